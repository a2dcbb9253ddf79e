"""CLI entrypoint: Typer app definition and command registration"""

import typer

from blogblocks.cli.commands import convert_cmd, delete_all_cmd, feed_cmd, import_cmd, init_cmd, update_cmd


app = typer.Typer(name="blogblocks", no_args_is_help=True, help="Blog export to structured content pipeline")

app.command(name="init")(init_cmd)
app.command(name="convert")(convert_cmd)
app.command(name="import")(import_cmd)
app.command(name="update")(update_cmd)
app.command(name="feed")(feed_cmd)
app.command(name="delete-all")(delete_all_cmd)
