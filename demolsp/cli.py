import asyncio
import sys
from pathlib import Path

import click

from .analysis.symbols import Symbol
from .documents import OpenDocument, apply_text_edits
from .lsp.types import Location, Position, TextDocumentItem
from .output.formatters import format_output
from .server.session import Session
from .utils.config import (
    DEFAULT_CONFIG,
    ConfigError,
    get_config_path,
    load_config,
    save_config,
)
from .utils.text import get_language_id, get_line_at, read_file_content, write_file_content
from .utils.uri import display_uri, path_to_uri


class OrderedGroup(click.Group):
    def __init__(self, *args, commands_order: list[str] | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.commands_order = commands_order or []

    def list_commands(self, ctx):
        commands = super().list_commands(ctx)
        if self.commands_order:
            ordered = [c for c in self.commands_order if c in commands]
            remaining = [c for c in commands if c not in self.commands_order]
            return ordered + remaining
        return commands


def open_file(path: str) -> tuple[Session, OpenDocument]:
    """Open a file in a fresh session, which indexes it and checks it."""
    file_path = Path(path).resolve()
    try:
        content = read_file_content(file_path)
    except UnicodeDecodeError:
        raise click.ClickException(f"Not a UTF-8 text file: {path}")

    try:
        session = Session.from_config(load_config())
    except ConfigError as e:
        raise click.ClickException(str(e))

    doc = session.open_document(
        TextDocumentItem(
            uri=path_to_uri(file_path),
            language_id=get_language_id(file_path),
            version=1,
            text=content,
        )
    )
    return session, doc


def to_position(line: int, column: int) -> Position:
    # LINE is 1-based like editors and grep, COLUMN is 0-based.
    return Position(line=line - 1, character=column)


def location_to_dict(location: Location, doc: OpenDocument) -> dict:
    start = location.range.start
    return {
        "path": display_uri(location.uri),
        "line": start.line + 1,
        "column": start.character,
        "text": get_line_at(doc.get_text(), start.line),
    }


def symbol_to_dict(symbol: Symbol) -> dict:
    return {
        "name": symbol.name,
        "kind": symbol.kind.value,
        "path": display_uri(symbol.uri),
        "line": symbol.range.start.line + 1,
        "column": symbol.range.start.character,
        "end_column": symbol.range.end.character,
    }


def echo(ctx: click.Context, data) -> None:
    click.echo(format_output(data, "json" if ctx.obj["json"] else "plain"))


CLI_HELP = """\
demolsp is a tiny language server for JavaScript-like files. It indexes
`let`/`const` bindings and `function` declarations line by line and answers
hover, definition, references and rename queries within a single file. It
also warns about lines longer than 80 characters.

Run `demolsp serve` (or `demolsp-server`) to speak LSP on stdin/stdout. The
other commands run the same queries on a file from the command line. LINE is
1-based and COLUMN is 0-based.
"""


@click.group(
    cls=OrderedGroup,
    commands_order=[
        "serve",
        "symbols",
        "diagnostics",
        "hover",
        "definition",
        "references",
        "rename",
        "config",
    ],
    help=CLI_HELP,
    context_settings={"help_option_names": ["-h", "--help"], "max_content_width": 120},
)
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def cli(ctx, json_output):
    ctx.ensure_object(dict)
    ctx.obj["json"] = json_output


@cli.command("serve")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    help="Override server.log_level from the config file",
)
def serve(log_level):
    """Run the language server on stdin/stdout."""
    from .server.server import run_server

    try:
        exit_code = asyncio.run(run_server(log_level=log_level))
    except ConfigError as e:
        raise click.ClickException(str(e))
    sys.exit(exit_code)


@cli.command("symbols")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def symbols(ctx, path):
    """List the variable and function declarations found in PATH."""
    session, doc = open_file(path)
    echo(ctx, [symbol_to_dict(s) for s in session.index.symbols(doc.uri)])


@cli.command("diagnostics")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def diagnostics(ctx, path):
    """Show lines in PATH that are too long."""
    session, doc = open_file(path)
    results = []
    for diag in session.checker.check(doc.uri, doc.get_text()):
        results.append({
            "path": display_uri(doc.uri),
            "line": diag.range.start.line + 1,
            "column": diag.range.start.character,
            "end_column": diag.range.end.character,
            "severity": int(diag.severity),
            "message": diag.message,
            "source": diag.source,
        })
    echo(ctx, results)


@cli.command("hover")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.argument("line", type=click.IntRange(min=1))
@click.argument("column", type=click.IntRange(min=0))
@click.pass_context
def hover(ctx, path, line, column):
    """Describe the declaration at LINE, COLUMN in PATH."""
    session, doc = open_file(path)
    result = session.queries.hover(doc.uri, to_position(line, column))
    echo(ctx, {"contents": result.contents.value if result else None})


@cli.command("definition")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.argument("line", type=click.IntRange(min=1))
@click.argument("column", type=click.IntRange(min=0))
@click.pass_context
def definition(ctx, path, line, column):
    """Find the declaration of the identifier at LINE, COLUMN in PATH."""
    session, doc = open_file(path)
    location = session.queries.definition(doc.uri, to_position(line, column))
    if location is None:
        raise click.ClickException("No declaration found")
    echo(ctx, location_to_dict(location, doc))


@cli.command("references")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.argument("line", type=click.IntRange(min=1))
@click.argument("column", type=click.IntRange(min=0))
@click.pass_context
def references(ctx, path, line, column):
    """Find the lines of PATH that mention the identifier at LINE, COLUMN."""
    session, doc = open_file(path)
    locations = session.queries.references(doc.uri, to_position(line, column))
    echo(ctx, [location_to_dict(loc, doc) for loc in locations])


@cli.command("rename")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.argument("line", type=click.IntRange(min=1))
@click.argument("column", type=click.IntRange(min=0))
@click.argument("new_name")
@click.option("--write", is_flag=True, help="Write the edits back to PATH")
@click.pass_context
def rename(ctx, path, line, column, new_name, write):
    """Rename the identifier at LINE, COLUMN in PATH to NEW_NAME.

    Every line that contains the old name has its first occurrence replaced.
    Without --write the edits are only printed.
    """
    session, doc = open_file(path)
    workspace_edit = session.queries.rename(doc.uri, to_position(line, column), new_name)
    if workspace_edit is None:
        raise click.ClickException("No identifier at that position")

    edits = (workspace_edit.changes or {}).get(doc.uri, [])
    result = {
        "new_name": new_name,
        "edits": [location_to_dict(Location(uri=doc.uri, range=e.range), doc) for e in edits],
        "written": False,
    }

    if write and edits:
        write_file_content(path, apply_text_edits(doc.get_text(), edits))
        result["written"] = True

    echo(ctx, result)


@cli.command()
@click.option("--init", "init_config", is_flag=True, help="Write the default config if none exists")
@click.pass_context
def config(ctx, init_config):
    """Print config file location and contents."""
    config_path = get_config_path()

    if init_config:
        if config_path.exists():
            click.echo(f"Config file already exists: {config_path}")
            return
        save_config(DEFAULT_CONFIG)
        click.echo(f"Wrote default config: {config_path}")
        return

    click.echo(f"Config file: {config_path}")
    click.echo()

    if config_path.exists():
        click.echo(config_path.read_text())
    else:
        click.echo("(file does not exist, using defaults)")


if __name__ == "__main__":
    cli()
