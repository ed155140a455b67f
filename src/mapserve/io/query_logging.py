# io/query_logging.py
import itertools
import json
import logging
import sys

from mapserve.io.hooks import NoopHooks


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
        }
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            payload.update(extra)
        return json.dumps(payload, default=str)


def _default_json_logger(name="mapserve", level="INFO"):
    logger = logging.getLogger(name)
    if not logger.handlers:
        h = logging.StreamHandler(sys.stdout)
        h.setFormatter(_JsonFormatter())
        logger.addHandler(h)
        logger.setLevel(level)
    return logger


class QueryLogging(NoopHooks):
    """
    One place to shape and emit structured logs for index builds and queries.
    Route/search/tile requests are logged at INFO; per-query results only in debug mode.
    """

    SUMMARY = {"route", "search_prefix", "search_exact", "tiles"}

    def __init__(
        self,
        run_id: str = "local",
        level: str = "INFO",
        debug: bool = False,
        logger: logging.Logger | None = None,
    ):
        self.run_id, self.debug = run_id, debug
        self.log = logger or _default_json_logger(level=level)
        self._served = itertools.count(1)

    def _emit(self, level: str, msg: str, **extra):
        payload = {"run_id": self.run_id}
        self.log.log(getattr(logging, level), msg, extra={"extra": {**payload, **extra}})

    # build lifecycle

    def build_start(self, *, name: str):
        self._emit("INFO", "build_start", name=name)

    def build_end(self, *, nodes: int, removed: int, locations: int, names: int, ms: float):
        self._emit(
            "INFO",
            "build_end",
            nodes=nodes,
            removed=removed,
            locations=locations,
            names=names,
            ms=round(ms, 3),
        )

    # queries

    def query_start(self, kind: str, **params):
        if self.debug:
            self._emit("DEBUG", f"{kind}_start", **params)

    def query_end(self, kind: str, *, ms: float, **result):
        served = next(self._served)
        level = "INFO" if kind in self.SUMMARY else ("DEBUG" if self.debug else None)
        if level:
            self._emit(level, kind, ms=round(ms, 3), served=served, **result)

    def error(self, kind: str, *, reason: str, **kw):
        self._emit("ERROR", "query_error", kind=kind, reason=reason, **kw)
