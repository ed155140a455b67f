# io/hooks.py
from typing import Protocol


class QueryHooks(Protocol):
    def build_start(self, *, name: str): ...
    def build_end(self, *, nodes, removed, locations, names, ms): ...
    def query_start(self, kind: str, **params): ...
    def query_end(self, kind: str, *, ms: float, **result): ...
    def error(self, kind: str, *, reason: str, **kw): ...


class NoopHooks:
    def build_start(self, **_):
        pass

    def build_end(self, **_):
        pass

    def query_start(self, *_, **__):
        pass

    def query_end(self, *_, **__):
        pass

    def error(self, *_, **__):
        pass
