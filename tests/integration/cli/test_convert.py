"""Integration tests for the convert and headings commands"""

from typer.testing import CliRunner

from podthread.cli.cli import app


POD = """\
=head1 NAME

demo - Demonstration page

=head1 USAGE

Run it.

=head1 SEE ALSO

L</USAGE>
"""


def test_convert_file_to_file(tmp_path):
    """convert writes thread output to the named file."""
    (tmp_path / "demo.pod").write_text(POD)

    runner = CliRunner()
    result = runner.invoke(app, ["convert", "demo.pod", "demo.th", "--navbar", "--style", "ssh"])

    assert result.exit_code == 0, result.output
    text = (tmp_path / "demo.th").read_text()
    assert text.startswith("\\heading[demo][ssh]\n\n\\h1[demo]\n\n")
    assert "\\link[#S1][Usage]" in text
    assert text.endswith("\\signature\n")


def test_convert_stdin_to_stdout():
    """With no arguments, convert reads stdin and writes stdout."""
    runner = CliRunner()
    result = runner.invoke(app, ["convert"], input="=head1 Hello\n\nWorld.\n")

    assert result.exit_code == 0, result.output
    assert "\\h2[Hello]\n\nWorld.\n\n\\signature\n" in result.stdout


def test_convert_title_and_id(tmp_path):
    (tmp_path / "demo.pod").write_text(POD)
    runner = CliRunner()
    result = runner.invoke(app, ["convert", "demo.pod", "--title", "Demo", "--id", "r12"])

    assert result.exit_code == 0, result.output
    assert result.stdout.startswith("\\id[r12]\n\n\\heading[Demo][]\n\n\\h1[Demo]\n\n\\h2[NAME]")


def test_convert_prescan_resolves_forward_links(tmp_path):
    (tmp_path / "fwd.pod").write_text("=head1 INTRO\n\nSee L</LATER>.\n\n=head1 LATER\n\nx\n")
    runner = CliRunner()
    result = runner.invoke(app, ["convert", "fwd.pod", "--prescan"])

    assert result.exit_code == 0, result.output
    assert "See \\link[#S2][LATER]." in result.stdout


def test_convert_prescan_needs_file():
    runner = CliRunner()
    result = runner.invoke(app, ["convert", "--prescan"], input="=head1 A\n")
    assert result.exit_code == 1
    assert "--prescan needs an input file" in result.output


def test_convert_pod_errors_exit_1_after_output(tmp_path):
    """POD errors fail the command, but the output file is still written."""
    (tmp_path / "bad.pod").write_text("=over\n\n=item *\n\nText\n")
    runner = CliRunner()
    result = runner.invoke(app, ["convert", "bad.pod", "bad.th"])

    assert result.exit_code == 1
    assert "1 POD error in document" in result.output
    assert (tmp_path / "bad.th").read_text().endswith("\\signature\n")


def test_convert_missing_input():
    runner = CliRunner()
    result = runner.invoke(app, ["convert", "missing.pod"])
    assert result.exit_code == 1
    assert "Cannot read missing.pod" in result.output


def test_convert_uses_config_yaml(tmp_path):
    """Options in config.yaml apply when no flag is given."""
    (tmp_path / "config.yaml").write_text("contents: true\n")
    (tmp_path / "demo.pod").write_text(POD)
    runner = CliRunner()
    result = runner.invoke(app, ["convert", "demo.pod"])

    assert result.exit_code == 0, result.output
    assert "\\h2[Table of Contents]" in result.stdout


def test_convert_invalid_config(tmp_path):
    (tmp_path / "config.yaml").write_text("key: [unclosed\n")
    runner = CliRunner()
    result = runner.invoke(app, ["convert"], input="=head1 A\n")
    assert result.exit_code == 1
    assert "Invalid config.yaml" in result.output


def test_headings_lists_anchors(tmp_path):
    (tmp_path / "demo.pod").write_text(POD)
    runner = CliRunner()
    result = runner.invoke(app, ["headings", "demo.pod"])

    assert result.exit_code == 0, result.output
    assert result.stdout.splitlines() == ["S1\tUSAGE", "S2\tSEE ALSO"]


def test_headings_none_found(tmp_path):
    (tmp_path / "empty.pod").write_text("=pod\n\nJust text.\n")
    runner = CliRunner()
    result = runner.invoke(app, ["headings", "empty.pod"])
    assert result.exit_code == 1
    assert "No top-level headings found." in result.output
