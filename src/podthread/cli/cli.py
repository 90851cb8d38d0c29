"""CLI entrypoint: Typer app definition and command registration"""

import typer

from podthread.cli.commands import build_cmd, convert_cmd, headings_cmd


app = typer.Typer(name="pod2thread", no_args_is_help=True, help="Convert POD documentation into thread macro markup")

app.command(name="convert")(convert_cmd)
app.command(name="build")(build_cmd)
app.command(name="headings")(headings_cmd)
