"""Unit tests for core/sections.py"""

from podthread.core.parse import parse_pod
from podthread.core.sections import SectionRegistry, navbar_label, scan_headings


def test_navbar_label_title_cases_words():
    """Each word is capitalized except 'and'."""
    assert navbar_label("SEE ALSO") == "See Also"
    assert navbar_label("BUGS AND LIMITATIONS") == "Bugs and Limitations"


def test_register_assigns_increasing_anchors():
    """Anchors follow encounter order as S1, S2, ..."""
    registry = SectionRegistry()
    assert registry.register("DESCRIPTION", "DESCRIPTION") == "S1"
    assert registry.register("OPTIONS", "OPTIONS") == "S2"
    assert registry.lookup("OPTIONS") == "S2"
    assert registry.lookup("MISSING") is None
    assert len(registry) == 2


def test_duplicate_heading_links_to_first():
    """A repeated heading gets its own anchor but lookups resolve to the first."""
    registry = SectionRegistry()
    registry.register("EXAMPLES", "EXAMPLES")
    assert registry.register("EXAMPLES", "EXAMPLES") == "S2"
    assert registry.lookup("EXAMPLES") == "S1"


def test_entries_sorted_numerically():
    """S10 sorts after S9."""
    registry = SectionRegistry()
    for i in range(1, 11):
        registry.register(f"H{i}", f"H{i}")
    anchors = [anchor for anchor, _, _ in registry.entries()]
    assert anchors == [f"S{i}" for i in range(1, 11)]


def test_supplied_anchors_used():
    """With a supplied mapping, headings take its anchors and unknown ones get none."""
    registry = SectionRegistry({"OPTIONS": ["S2"], "DESCRIPTION": ["S1"]})
    assert registry.lookup("OPTIONS") == "S2"
    assert registry.register("DESCRIPTION", "DESCRIPTION") == "S1"
    assert registry.register("EXTRA", "EXTRA") is None


def test_render_contents():
    """Contents list every heading as a packed numbered link."""
    registry = SectionRegistry()
    registry.register("DESCRIPTION", "DESCRIPTION")
    registry.register("OPTIONS", "\\code[OPTIONS]")
    assert registry.render_contents() == (
        "\\h2[Table of Contents]\n\n"
        "\\number(packed)[\\link[#S1][DESCRIPTION]]\n"
        "\\number(packed)[\\link[#S2][\\code[OPTIONS]]]\n"
        "\n"
    )


def test_render_navbar():
    """Navbar links are title-cased and separated by bars."""
    registry = SectionRegistry()
    registry.register("DESCRIPTION", "DESCRIPTION")
    registry.register("SEE ALSO", "SEE ALSO")
    assert registry.render_navbar() == (
        "\\class(navbar)[\n"
        "  \\link[#S1][Description] | \\link[#S2][See Also]\n"
        "]\n\n"
    )


def test_render_navbar_wraps_long_lines():
    """Links move to a new line once the visible labels pass the width."""
    registry = SectionRegistry()
    for word in ["DESCRIPTION", "OPTIONS", "EXAMPLES", "DIAGNOSTICS", "ENVIRONMENT", "FILES", "AUTHOR"]:
        registry.register(word, word)
    navbar = registry.render_navbar()
    assert "\n  | \\link" in navbar
    assert navbar.count("\\link[") == 7


def test_render_empty_registry():
    """No headings means no contents and no navbar."""
    registry = SectionRegistry()
    assert registry.render_contents() == ""
    assert registry.render_navbar() == ""


def test_scan_headings_skips_name():
    """Pre-scan assigns anchors to top-level headings other than NAME."""
    tokens = parse_pod("=head1 NAME\n\nfoo\n\n=head1 B<USAGE>\n\n=head2 Sub\n\n=head1 AUTHOR\n")
    assert scan_headings(tokens) == {"USAGE": ["S1"], "AUTHOR": ["S2"]}


def test_scan_headings_keeps_name_when_asked():
    """NAME is counted when it is not used for the page title."""
    tokens = parse_pod("=head1 NAME\n\nfoo\n\n=head1 USAGE\n")
    assert scan_headings(tokens, skip_name=False) == {"NAME": ["S1"], "USAGE": ["S2"]}


def test_scan_headings_duplicates_get_own_anchors():
    """Each occurrence of a repeated heading is listed with its own anchor."""
    tokens = parse_pod("=head1 A\n\n=head1 B\n\n=head1 A\n\n=head1 C\n")
    assert scan_headings(tokens) == {"A": ["S1", "S3"], "B": ["S2"], "C": ["S4"]}


def test_supplied_anchors_for_duplicates():
    """Repeated headings take their pre-scanned anchors in turn; links go to the first."""
    registry = SectionRegistry({"A": ["S1", "S3"], "B": ["S2"]})
    assert registry.register("A", "A") == "S1"
    assert registry.register("B", "B") == "S2"
    assert registry.register("A", "A") == "S3"
    assert registry.register("A", "A") is None
    assert registry.lookup("A") == "S1"
    assert [anchor for anchor, _, _ in registry.entries()] == ["S1", "S2", "S3"]
