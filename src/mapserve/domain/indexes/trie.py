import re
from collections.abc import Iterable
from dataclasses import dataclass, field

_NOT_LETTER_OR_SPACE = re.compile(r"[^a-zA-Z ]")


def normalize_name(s: str) -> str:
    """Keep ASCII letters and spaces only, lower-cased ("123 Main St!" -> "main st").

    Leading and trailing spaces left behind by stripped digits/punctuation are
    dropped too, so a prefix typed without the house number still matches.
    """
    return _NOT_LETTER_OR_SPACE.sub("", s).lower().strip()


@dataclass
class _TrieNode:
    children: dict[str, "_TrieNode"] = field(default_factory=dict)
    names: set[str] = field(default_factory=set)


class PrefixIndex:
    def __init__(self):
        self._root = _TrieNode()
        self._count = 0

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "PrefixIndex":
        idx = cls()
        for name in names:
            idx.add(normalize_name(name), name)
        return idx

    def __len__(self) -> int:
        return self._count

    def add(self, cleaned_key: str, original_name: str) -> None:
        node = self._root
        for ch in cleaned_key:
            node = node.children.setdefault(ch, _TrieNode())
        if original_name not in node.names:
            node.names.add(original_name)
            self._count += 1

    def _find(self, key: str) -> _TrieNode | None:
        node = self._root
        for ch in key:
            node = node.children.get(ch)
            if node is None:
                return None
        return node

    def query(self, prefix: str) -> set[str]:
        start = self._find(normalize_name(prefix))
        if start is None:
            return set()
        out: set[str] = set()
        stack = [start]
        while stack:
            node = stack.pop()
            out |= node.names
            stack.extend(node.children.values())
        return out
