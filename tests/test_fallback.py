from moviesearch.fallback import link_streaming_to_store, pattern_search, title_pattern
from moviesearch.records import CanonicalMovie

from conftest import streaming


def test_title_pattern_matches_whole_words():
    pat = title_pattern("matrix")

    assert pat.search("The Matrix")
    assert pat.search("THE MATRIX RELOADED")
    assert not pat.search("Matrices")


def test_title_pattern_escapes_by_default():
    assert not title_pattern("a.c").search("abc")
    assert title_pattern("a.c", no_escape=True).search("x abc y")


def test_pattern_search_empty_term(store):
    store.save(CanonicalMovie(title="Heat", year=1995, primary_id="1"))

    assert pattern_search(store, "  ") == []


def test_link_streaming_to_store_keeps_streaming_order(store):
    store.save(CanonicalMovie(title="Heat", year=1995, primary_id="1", streaming_id="s1"))
    store.save(CanonicalMovie(title="Ronin", year=1998, primary_id="2", streaming_id="s2"))

    linked = link_streaming_to_store(
        store,
        [streaming("s2", "Ronin", 1998, url="http://n/s2"), streaming("zz", "Nope", 2000), streaming("s1", "Heat", 1995)],
    )

    assert [m.primary_id for m in linked] == ["2", "1"]
    assert linked[0].streaming_url == "http://n/s2"
    # no se guarda aquí
    assert store.find_by_primary_id(["2"])["2"].streaming_url is None


def test_pattern_search_term_with_punctuation_edges(store):
    store.save(CanonicalMovie(title="(500) Days of Summer", year=2009, primary_id="1"))
    store.save(CanonicalMovie(title="Heat", year=1995, primary_id="2"))

    assert [m.primary_id for m in pattern_search(store, "(500)")] == ["1"]
    assert not title_pattern("(500)").search("x(500)y")
