"""
Tests for text cleaning, diacritic folding, slugs and collation keys.
"""
from facet_search.normalize import (
    basic_clean,
    clamp_text_length,
    collation_key,
    fold_diacritics,
    generate_slug,
    is_blank_query,
    strip_html,
)


def test_strip_html_removes_tags_and_space_before_punctuation():
    assert strip_html("<p>Hello <b>world</b> !</p>") == "Hello world!"


def test_strip_html_passes_plain_text_through():
    assert strip_html("no markup here") == "no markup here"


def test_inequalities_are_not_taken_for_markup():
    assert basic_clean("Nierówność a<b") == "Nierówność a<b"
    assert basic_clean("x < y oraz a<b<c") == "x < y oraz a<b<c"


def test_inequality_inside_markup_survives():
    assert strip_html("<p>Jeśli a<b, to <i>b>a</i></p>") == "Jeśli a<b, to b>a"


def test_basic_clean_collapses_whitespace():
    assert basic_clean("  Równania \n\t liniowe  ") == "Równania liniowe"
    assert basic_clean(None) == ""


def test_clamp_text_length():
    assert clamp_text_length("abcdef", max_chars=3) == "abc"
    assert clamp_text_length(12345) == "12345"


def test_fold_diacritics_handles_polish_letters():
    assert fold_diacritics("łódź") == "lodz"
    assert fold_diacritics("Równania Ćwiczenia Źródła Żaba") == "Rownania Cwiczenia Zrodla Zaba"


def test_generate_slug():
    assert generate_slug("Równania liniowe") == "rownania-liniowe"
    assert generate_slug("  Ćwiczenia: z Algebry!  ") == "cwiczenia-z-algebry"
    assert generate_slug("") == ""


def test_is_blank_query():
    assert is_blank_query(None)
    assert is_blank_query("")
    assert is_blank_query("   \t")
    assert not is_blank_query(" a ")


def test_polish_collation_orders_accented_letters_after_their_base():
    titles = ["Pies", "Ósemka", "Okno", "Łamigłówki", "Lampa", "Mama"]
    ordered = sorted(titles, key=lambda t: collation_key(t, "pl"))
    assert ordered == ["Lampa", "Łamigłówki", "Mama", "Okno", "Ósemka", "Pies"]


def test_collation_puts_lowercase_first_on_ties():
    assert sorted(["Ala", "ala"], key=collation_key) == ["ala", "Ala"]


def test_collation_shorter_prefix_first():
    assert sorted(["Algebra II", "Algebra"], key=collation_key) == ["Algebra", "Algebra II"]
