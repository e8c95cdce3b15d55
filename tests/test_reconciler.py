from moviesearch.reconciler import Reconciler
from moviesearch.records import CanonicalMovie

from conftest import primary, review, streaming


def test_reconcile_keeps_primary_order_without_streaming():
    recs = [primary("1", "Alien", 1979), primary("2", "Aliens", 1986), primary("3", "Alien 3", 1992)]

    drafts = Reconciler().reconcile(recs, [])

    assert [d.primary_id for d in drafts] == ["1", "2", "3"]
    assert all(d.streaming_id is None for d in drafts)


def test_reconcile_links_streaming_by_title_and_year():
    recs = [primary("27205", "Inception", 2010, imdb_id="tt1375666", synopsis="Dreams.")]
    stream = [streaming("70131314", "inception", 2010, synopsis="Other text", url="http://n/70131314")]

    drafts = Reconciler().reconcile(recs, stream)

    assert len(drafts) == 1
    movie = drafts[0]
    assert movie.primary_id == "27205"
    assert movie.streaming_id == "70131314"
    assert movie.streaming_url == "http://n/70131314"
    # el primario manda en los campos que trae
    assert movie.synopsis == "Dreams."


def test_reconcile_drops_unmatched_streaming():
    recs = [primary("1", "Heat", 1995)]
    stream = [streaming("9", "Heat", 2013), streaming("10", "Ronin", 1998)]

    drafts = Reconciler().reconcile(recs, stream)

    assert len(drafts) == 1
    assert drafts[0].streaming_id is None


def test_reconcile_year_tolerance():
    recs = [primary("1", "Heat", 1995)]
    stream = [streaming("9", "Heat", 1996)]

    assert Reconciler().reconcile(recs, stream)[0].streaming_id is None
    assert Reconciler(year_tolerance=1).reconcile(recs, stream)[0].streaming_id == "9"


def test_reconcile_dedups_by_imdb_first_wins():
    recs = [
        primary("1", "The Thing", 1982, imdb_id="tt0084787"),
        primary("2", "The Thing (Remastered)", 1982, imdb_id="TT0084787"),
        primary("3", "The Thing", 2011, imdb_id="tt0905372"),
    ]

    drafts = Reconciler().reconcile(recs, [])

    assert [d.primary_id for d in drafts] == ["1", "3"]


def test_reconcile_each_primary_links_at_most_once():
    recs = [primary("1", "Solaris", 1972), primary("2", "Solaris", 1972)]
    stream = [streaming("a", "Solaris", 1972), streaming("b", "Solaris", 1972)]

    drafts = Reconciler().reconcile(recs, stream)

    assert [(d.primary_id, d.streaming_id) for d in drafts] == [("1", "a"), ("2", "b")]


def test_reconcile_updates_existing_in_place():
    existing = CanonicalMovie(title="Old title", year=2010, primary_id="27205", review_score=87)
    recs = [primary("27205", "Inception", 2010)]

    drafts = Reconciler().reconcile(recs, [], {"27205": existing})

    assert drafts[0] is existing
    assert existing.title == "Inception"
    assert existing.review_score == 87


def test_reconcile_prefers_known_streaming_link():
    # la película guardada ya estaba enlazada a "s1" aunque el título difiera
    existing = CanonicalMovie(title="Brazil", year=1985, primary_id="68", streaming_id="s1")
    recs = [primary("68", "Brazil", 1985), primary("69", "Brazil: The Final Cut", 1985)]
    stream = [streaming("s1", "Brazil: The Final Cut", 1985)]

    drafts = Reconciler().reconcile(recs, stream, {"68": existing})

    by_id = {d.primary_id: d for d in drafts}
    assert by_id["68"].streaming_id == "s1"
    assert by_id["69"].streaming_id is None


def test_attach_reviews_at_most_one_per_draft():
    drafts = Reconciler().reconcile(
        [primary("1", "Alien", 1979, imdb_id="tt0078748"), primary("2", "Aliens", 1986)],
        [],
    )
    reviews = [
        review("r0", "Something else", 1979, imdb_id="tt0078748", critics_score=98),
        review("r1", "Alien", 1979, critics_score=10),
        review("r2", "Aliens", 1986, critics_score=97, audience_score=94),
        review("r3", "Aliens", 1986, critics_score=1),
        review("r4", "Predator", 1987, critics_score=80),
    ]

    Reconciler().attach_reviews(drafts, reviews)

    # imdb manda sobre el título cuando ambos lo traen
    assert drafts[0].review_id == "r0"
    assert drafts[0].review_score == 98
    assert drafts[1].review_id == "r2"
    assert drafts[1].audience_score == 94
