from moviesearch.records import CanonicalMovie, PosterUrls

from conftest import primary, review, streaming


def test_store_key_priority():
    assert CanonicalMovie(title="Heat", primary_id="949", streaming_id="s1").store_key == "primary:949"
    assert CanonicalMovie(title="Heat", streaming_id="s1").store_key == "streaming:s1"
    assert CanonicalMovie(title="Heat", year=1995).store_key == "ty:heat|1995"


def test_streaming_only_fills_gaps():
    movie = CanonicalMovie()
    movie.apply_primary(primary("1", "Alien", 1979, synopsis="Primary text."))
    movie.apply_streaming(
        streaming(
            "s1",
            "Alien",
            1979,
            special_edition=True,
            synopsis="Streaming text.",
            runtime_minutes=117,
            posters=PosterUrls(large="l.jpg"),
            official_url="http://alien.example",
        )
    )

    assert movie.synopsis == "Primary text."
    assert movie.runtime_minutes == 117
    assert movie.posters.large == "l.jpg"
    assert movie.special_edition is True
    assert movie.homepage == "http://alien.example"


def test_review_fills_missing_imdb():
    movie = CanonicalMovie(title="Heat", year=1995)
    movie.apply_review(review("r1", "Heat", 1995, imdb_id="0113277", critics_score=86))

    assert movie.imdb_id == "tt0113277"
    assert movie.review_score == 86


def test_from_dict_tolerates_partial_data():
    movie = CanonicalMovie.from_dict({"title": "Heat", "year": "1995", "posters": None, "cast": None})

    assert movie.year == 1995
    assert movie.posters.is_empty()
    assert movie.cast == []


def test_primary_sets_wikipedia_url():
    movie = CanonicalMovie()
    movie.apply_primary(primary("1", "Alien", 1979, wikipedia_url="https://en.wikipedia.org/wiki/Alien_(film)"))

    assert movie.wikipedia_url == "https://en.wikipedia.org/wiki/Alien_(film)"
    assert CanonicalMovie.from_dict(movie.to_dict()).wikipedia_url == movie.wikipedia_url
