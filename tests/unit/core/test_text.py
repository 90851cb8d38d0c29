"""Unit tests for core/text.py"""

from podthread.core.text import WRAP_WIDTH, normalize_space, reformat, sanitize


def test_sanitize_escapes_macro_characters():
    """Backslashes are doubled and brackets become entity macros."""
    assert sanitize("a\\b [c]") == "a\\\\b \\entity[91]c\\entity[93]"


def test_sanitize_is_idempotent_on_clean_text():
    """Text with no backslash or bracket passes through unchanged."""
    text = "plain text, with <angles> & ampersands"
    assert sanitize(text) == text
    assert sanitize(sanitize(text)) == text


def test_normalize_space():
    """Whitespace runs collapse and the ends are trimmed."""
    assert normalize_space("  a \n\t b  ") == "a b"


def test_reformat_short_paragraph():
    """A paragraph within the width stays on one line followed by a blank line."""
    assert reformat("Some 0 item.\n") == "Some 0 item.\n\n"


def test_reformat_joins_lines_and_keeps_sentence_spacing():
    """Source lines join with one space, or two after a sentence-ending period."""
    assert reformat("First line\nsecond line.\nThird.\n") == "First line second line.  Third.\n\n"


def test_reformat_collapses_long_space_runs():
    """Three or more spaces shrink to two."""
    assert reformat("a     b\n") == "a  b\n\n"


def test_reformat_wraps_to_width():
    """Every wrapped line fits the width and no word is lost."""
    words = ["word%d" % i for i in range(60)]
    out = reformat(" ".join(words) + "\n")
    lines = out.rstrip("\n").split("\n")
    assert len(lines) > 1
    assert all(len(line) <= WRAP_WIDTH for line in lines)
    assert " ".join(lines).split() == words
    assert out.endswith("\n\n")


def test_reformat_custom_width():
    """The width parameter controls the break column."""
    out = reformat("aaa bbb ccc ddd\n", width=8)
    assert out == "aaa bbb\nccc ddd\n\n"


def test_reformat_never_splits_long_word():
    """A word wider than the line runs on to the next whitespace."""
    long_word = "x" * 100
    out = reformat(f"{long_word} tail\n")
    assert out == f"{long_word}\ntail\n\n"


def test_reformat_blank_input():
    """Whitespace-only input produces nothing."""
    assert reformat("   \n\n") == ""
