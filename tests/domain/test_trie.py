import pytest

from mapserve.domain.indexes.trie import PrefixIndex, normalize_name

NAMES = [
    "Top Dog",
    "Top Dog!",
    "Tops Pizza",
    "Toyota of Berkeley",
    "123 Main St",
    "Main Street Bakery",
    "Cafe Strada",
    "CAFE ROMA",
    "7-Eleven",
    "42",
]


@pytest.fixture
def index() -> PrefixIndex:
    return PrefixIndex.from_names(NAMES)


def test_normalize_name():
    assert normalize_name("123 Main St!") == "main st"
    assert normalize_name("CAFE ROMA") == "cafe roma"
    assert normalize_name("7-Eleven") == "eleven"
    assert normalize_name("42") == ""
    assert normalize_name("Café") == "caf"


def test_empty_prefix_returns_everything(index: PrefixIndex):
    assert index.query("") == set(NAMES)
    assert len(index) == len(NAMES)


def test_prefix_matches_normalized_starts(index: PrefixIndex):
    for prefix in ["t", "top", "TOP D", "to", "main", "ca", "cafe s", "z", "e", "!!"]:
        expected = {n for n in NAMES if normalize_name(n).startswith(normalize_name(prefix))}
        assert index.query(prefix) == expected, prefix


def test_distinct_originals_with_same_cleaned_form_are_kept(index: PrefixIndex):
    assert index.query("top dog") == {"Top Dog", "Top Dog!"}


def test_miss_is_empty(index: PrefixIndex):
    assert index.query("xyz") == set()
    assert index.query("top dogs") == set()


def test_adding_same_name_twice_is_idempotent():
    idx = PrefixIndex()
    idx.add("oak", "Oak")
    idx.add("oak", "Oak")
    assert idx.query("o") == {"Oak"}
    assert len(idx) == 1
