"""Unit tests for pre-speech text cleaning rules."""

from __future__ import annotations

from pdfvoice.text.cleaners import CollapseWhitespace, NormalizePunctuationSpacing, TextCleaner


def test_cleaner_maps_typographic_punctuation_to_ascii() -> None:
    """Smart quotes, dashes and ellipses become plain ASCII."""

    text = "\u201cHello\u201d \u2014 it\u2019s \u2013 fine\u2026"

    assert TextCleaner().clean(text) == "\"Hello\" -- it's - fine..."


def test_cleaner_flattens_bullets_and_line_breaks() -> None:
    """Bullets turn into dashes and newlines into single spaces."""

    text = "\u2022 Item one\n\n\u2022 Item\u00a0two"

    assert TextCleaner().clean(text) == "- Item one - Item two"


def test_cleaner_normalizes_spacing_around_punctuation() -> None:
    """Punctuation gets one trailing space and no leading space."""

    text = "Hello ,world.Next sentence;here"

    assert TextCleaner().clean(text) == "Hello, world. Next sentence; here"


def test_punctuation_spacing_keeps_acronyms_and_digit_groups_intact() -> None:
    """`U.S.` and `1,000` must not gain inner spaces."""

    rule = NormalizePunctuationSpacing()

    assert rule.apply("The U.S. budget rose by 1,000 dollars.") == (
        "The U.S. budget rose by 1,000 dollars."
    )


def test_collapse_whitespace_rule_trims_and_collapses() -> None:
    """Every whitespace class collapses to one space."""

    assert CollapseWhitespace().apply(" \tone\n\ntwo\r\nthree ") == "one two three"


def test_cleaner_accepts_custom_rule_sequence() -> None:
    """Callers can supply their own ordered rules."""

    class Upper:
        def apply(self, text: str) -> str:
            return text.upper()

    cleaner = TextCleaner(rules=[CollapseWhitespace(), Upper()])

    assert cleaner.clean("  quiet   words ") == "QUIET WORDS"
