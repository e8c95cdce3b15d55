from moviesearch.title_utils import (
    normalize_imdb_id,
    normalize_title_for_compare,
    split_special_edition,
    title_year_key,
    titles_match,
    years_match,
)


def test_normalize_title_for_compare():
    assert normalize_title_for_compare("Amélie: Le Fabuleux") == "amelie le fabuleux"
    assert normalize_title_for_compare("Fast & Furious") == "fast and furious"
    assert normalize_title_for_compare("  Spider-Man  2 ") == "spider man 2"
    assert normalize_title_for_compare(None) == ""


def test_split_special_edition():
    assert split_special_edition("Alien: Special Edition") == ("Alien", True)
    assert split_special_edition("Blade Runner special edition") == ("Blade Runner", True)
    assert split_special_edition("Special Edition") == ("Special Edition", False)
    assert split_special_edition("Aliens") == ("Aliens", False)


def test_years_match_rules():
    assert years_match(2010, 2010)
    assert not years_match(2010, 2011)
    assert years_match(2010, 2011, tolerance=1)
    assert years_match(None, 2011)


def test_titles_match():
    assert titles_match("The Matrix", 1999, "the matrix", 1999)
    assert not titles_match("The Matrix", 1999, "The Matrix", 2021)
    assert not titles_match("", None, "", None)


def test_normalize_imdb_id():
    assert normalize_imdb_id("TT0133093") == "tt0133093"
    assert normalize_imdb_id("0133093") == "tt0133093"
    assert normalize_imdb_id("https://www.imdb.com/title/tt0133093/") == "tt0133093"
    assert normalize_imdb_id("N/A") is None
    assert normalize_imdb_id(None) is None


def test_title_year_key():
    assert title_year_key("The Matrix", 1999) == "the matrix|1999"
    assert title_year_key("The Matrix", None) == "the matrix|"
