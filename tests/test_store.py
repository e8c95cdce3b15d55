import json

import pytest

from moviesearch.errors import PersistenceError, StoreUnavailableError
from moviesearch.fallback import title_pattern
from moviesearch.records import CanonicalMovie, PosterUrls
from moviesearch.store import InMemoryStore, JsonFileStore


def test_in_memory_store_lookups_return_copies():
    store = InMemoryStore()
    store.save(CanonicalMovie(title="Heat", year=1995, primary_id="949", streaming_id="s1"))

    found = store.find_by_primary_id(["949", "nope"])
    assert list(found) == ["949"]

    found["949"].title = "Changed"
    assert store.find_by_streaming_id(["s1"])["s1"].title == "Heat"


def test_save_resolves_by_imdb_id():
    store = InMemoryStore()
    store.save(CanonicalMovie(title="Heat", year=1995, streaming_id="s1", imdb_id="tt0113277"))
    store.save(CanonicalMovie(title="Heat", year=1995, primary_id="949", imdb_id="tt0113277"))

    assert len(store) == 1
    assert store.all()[0].primary_id == "949"


def test_find_by_title_pattern_sorted_by_title():
    store = InMemoryStore()
    for pid, title in (("1", "The Matrix Reloaded"), ("2", "the matrix"), ("3", "Matrices")):
        store.save(CanonicalMovie(title=title, year=1999, primary_id=pid))

    out = store.find_by_title_pattern(title_pattern("matrix"))

    assert [m.primary_id for m in out] == ["2", "1"]


def test_json_store_round_trip(tmp_path):
    path = tmp_path / "movies.json"
    store = JsonFileStore(path)
    store.save(
        CanonicalMovie(
            title="Inception",
            year=2010,
            primary_id="27205",
            posters=PosterUrls(small="s.jpg"),
            cast=["Leonardo DiCaprio"],
        )
    )

    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["schema"] == 1
    assert "primary:27205" in raw["records"]

    reloaded = JsonFileStore(path)
    movie = reloaded.find_by_primary_id(["27205"])["27205"]
    assert movie.posters.small == "s.jpg"
    assert movie.cast == ["Leonardo DiCaprio"]
    assert not list(tmp_path.glob("tmp*"))


def test_json_store_missing_file_is_empty(tmp_path):
    assert len(JsonFileStore(tmp_path / "nope.json")) == 0


@pytest.mark.parametrize("content", ["{not json", '{"schema": 99, "records": {}}', '{"schema": 1}'])
def test_json_store_rejects_unreadable_file(tmp_path, content):
    path = tmp_path / "movies.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(StoreUnavailableError):
        JsonFileStore(path)


def test_json_store_save_failure_rolls_back(tmp_path, monkeypatch):
    import moviesearch.store as store_mod

    store = JsonFileStore(tmp_path / "movies.json")

    def _boom(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(store_mod.os, "replace", _boom)

    with pytest.raises(PersistenceError):
        store.save(CanonicalMovie(title="Heat", year=1995, primary_id="949"))
    assert len(store) == 0


def test_save_merges_other_record_with_same_imdb():
    store = InMemoryStore()
    store.save(CanonicalMovie(title="Alien", year=1979, primary_id="A"))
    store.save(
        CanonicalMovie(title="Alien", year=1979, primary_id="B", imdb_id="tt0078748", streaming_id="s1", special_edition=True)
    )

    # "A" gana el imdb más tarde: "B" se fusiona en "A" y desaparece
    store.save(CanonicalMovie(title="Alien", year=1979, primary_id="A", imdb_id="tt0078748", review_score=98))

    (movie,) = store.all()
    assert movie.primary_id == "A"
    assert movie.imdb_id == "tt0078748"
    assert movie.review_score == 98
    assert movie.streaming_id == "s1"
    assert movie.special_edition is True
    assert store.find_by_primary_id(["B"]) == {}


def test_failed_merge_restores_both_records(tmp_path, monkeypatch):
    import moviesearch.store as store_mod

    store = JsonFileStore(tmp_path / "movies.json")
    store.save(CanonicalMovie(title="Alien", year=1979, primary_id="A"))
    store.save(CanonicalMovie(title="Alien", year=1979, primary_id="B", imdb_id="tt0078748"))

    def _boom(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(store_mod.os, "replace", _boom)

    with pytest.raises(PersistenceError):
        store.save(CanonicalMovie(title="Alien", year=1979, primary_id="A", imdb_id="tt0078748"))
    assert sorted(m.primary_id for m in store.all()) == ["A", "B"]
