"""Unit tests for core/headings.py"""

from podthread.core.headings import output_level, parse_name, render_header, render_heading


def test_output_level_shifts_by_one():
    """=head1 renders one level down, leaving \\h1 for the page title."""
    assert output_level(1) == 2
    assert output_level(4) == 5


def test_render_heading_with_and_without_anchor():
    assert render_heading("OPTIONS", 2, "S2") == "\\h2(#S2)[OPTIONS]\n\n"
    assert render_heading("Details", 3) == "\\h3[Details]\n\n"


def test_parse_name_splits_description():
    """'name - description' yields the title and the description."""
    assert parse_name("foo - Some description of foo") == ("foo", "Some description of foo")
    assert parse_name("foo -- two dashes") == ("foo", "two dashes")


def test_parse_name_with_several_names():
    """Only the first dash separator splits the title from the description."""
    assert parse_name("foo, bar - Do things - quickly") == ("foo, bar", "Do things - quickly")


def test_parse_name_without_description():
    assert parse_name("  foo  ") == ("foo", None)


def test_render_header_full():
    """Header carries id, heading directive, title, and subheading in order."""
    assert render_header("foo", "ssh", "Some description", "$Id: foo $") == (
        "\\id[$Id: foo $]\n\n"
        "\\heading[foo][ssh]\n\n"
        "\\h1[foo]\n\n"
        "\\p(subhead)[(Some description)]\n\n"
    )


def test_render_header_minimal():
    """Without style, id, or description only the required parts are emitted."""
    assert render_header("foo") == "\\heading[foo][]\n\n\\h1[foo]\n\n"
