import asyncio
import json
import logging
import os
import re
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.syntax import Syntax
from rich.table import Table

from docchef import __version__
from docchef.choosers import get_chooser
from docchef.config import ChefConfig, load_config
from docchef.errors import DocChefError
from docchef.extract import ExhaustionPolicy, extract
from docchef.locate import locate_definitions
from docchef.models import CallableReference, DefinitionSite, ExtractedSource
from docchef.reflection import enumerate_definitions
from docchef.repository import RepositoryNotFoundError
from docchef.resolve import resolve
from docchef.summarize import Summarizer

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="docchef - extract and explain Python callable definitions",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

_LOCATION = re.compile(r"^(?P<path>.+):(?P<line>\d+)$")
_SOURCE_SUFFIXES = (".py", ".pyi")

ModuleOption = typer.Option(
    None, "--module", "-m", help="Restrict lookup to this module (repeatable)"
)
TypeOption = typer.Option(
    None, "--type", "-t", help="Argument type narrowing the overload (repeatable, in order)"
)
StaticOption = typer.Option(
    False, "--static", help="Scan source files with tree-sitter instead of importing code"
)
ChooserOption = typer.Option(
    None, "--chooser", help="Selection backend: auto, fzf, prompt, first or strict"
)
StrictOption = typer.Option(
    False, "--strict", help="Fail instead of returning the rest of the file when no end is found"
)


def _reference(name: str, modules: list[str] | None, types: list[str] | None) -> CallableReference:
    return CallableReference(
        name=name,
        signature=tuple(types) if types else None,
        scope=tuple(modules) if modules else None,
    )


def _enumerator(static: bool):
    if static:
        return locate_definitions

    # Make modules in the working directory importable, as `python -m` does
    cwd = os.getcwd()
    if cwd not in sys.path:
        sys.path.insert(0, cwd)
    return enumerate_definitions


def _looks_like_path(file_path: str) -> bool:
    if "/" in file_path or os.sep in file_path:
        return True
    return Path(file_path).suffix.lower() in _SOURCE_SUFFIXES


def _site_from_target(target: str) -> DefinitionSite | None:
    """Interpret TARGET as "path:line" if it names a file.

    A missing file still counts when the path part is shaped like a path, so
    extraction reports it as unreadable instead of resolving it as a name.
    """
    match = _LOCATION.match(target)
    if match is None:
        return None

    file_path = os.path.expanduser(match.group("path"))
    if not Path(file_path).is_file() and not _looks_like_path(file_path):
        return None

    return DefinitionSite(file_path=file_path, start_line=int(match.group("line")))


def _extract_target(
    target: str,
    config: ChefConfig,
    modules: list[str] | None,
    types: list[str] | None,
    static: bool,
    chooser_name: str | None,
    strict: bool,
) -> ExtractedSource:
    site = _site_from_target(target)
    if site is None:
        chooser = get_chooser(chooser_name or config.select.chooser)
        site = resolve(
            _reference(target, modules, types),
            enumerate_sites=_enumerator(static),
            chooser=chooser,
        )

    policy = ExhaustionPolicy.FAIL_STRICT if strict else config.extract.policy
    return extract(site, policy=policy)


def _fail(error: Exception, code: int) -> NoReturn:
    typer.echo(f"Error: {error}", err=True)
    raise typer.Exit(code=code)


@app.command()
def locate(
    name: str,
    module: Optional[List[str]] = ModuleOption,
    type_: Optional[List[str]] = TypeOption,
    static: bool = StaticOption,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List the definition sites a callable name resolves to.

    Args:
        name: Dotted path of the callable (e.g. "pkg.mod.func"), or its
              name within the modules given with --module
    """
    try:
        candidates = _enumerator(static)(_reference(name, module, type_))
    except (DocChefError, RepositoryNotFoundError, ValueError) as e:
        _fail(e, 1)
    except Exception as e:
        _fail(e, 2)

    if json_output:
        results = [
            {"label": c.label, "path": c.site.file_path, "line": c.site.start_line}
            for c in candidates
        ]
        typer.echo(json.dumps(results, indent=2))
        return

    table = Table()
    table.add_column("Label")
    table.add_column("Path")
    table.add_column("Line", justify="right")
    for c in candidates:
        table.add_row(c.label, c.site.file_path, str(c.site.start_line))
    console.print(table)


@app.command("extract")
def extract_command(
    target: str,
    module: Optional[List[str]] = ModuleOption,
    type_: Optional[List[str]] = TypeOption,
    static: bool = StaticOption,
    chooser: Optional[str] = ChooserOption,
    strict: bool = StrictOption,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Print the complete source of a definition.

    Args:
        target: "path:line" of the definition's first line, or a callable
                name as accepted by `locate`

    Examples:
        chef extract src/pkg/mod.py:42
        chef extract pkg.mod.func --type int
    """
    try:
        extracted = _extract_target(target, load_config(), module, type_, static, chooser, strict)
    except (DocChefError, RepositoryNotFoundError, ValueError) as e:
        _fail(e, 1)
    except Exception as e:
        _fail(e, 2)

    if json_output:
        typer.echo(json.dumps(extracted.to_dict(), indent=2))
    else:
        typer.echo(extracted.text)


@app.command()
def explain(
    target: str,
    module: Optional[List[str]] = ModuleOption,
    type_: Optional[List[str]] = TypeOption,
    static: bool = StaticOption,
    chooser: Optional[str] = ChooserOption,
    strict: bool = StrictOption,
    api_key: Optional[str] = typer.Option(
        None, "--api-key", envvar="OPENAI_API_KEY", help="API key for the LLM service"
    ),
    model: Optional[str] = typer.Option(None, "--model", help="Model used for the explanation"),
):
    """Explain a definition with a generated, docstring-style description.

    Args:
        target: "path:line" or a callable name, as for `extract`
    """
    config = load_config()
    summarize_config = replace(
        config.summarize,
        api_key=api_key or config.summarize.api_key,
        model=model or config.summarize.model,
    )

    try:
        extracted = _extract_target(target, config, module, type_, static, chooser, strict)
        logger.info("Explaining %s", extracted.site)
        err_console.rule("Explaining the following code...")
        err_console.print(Syntax(extracted.text, "python", line_numbers=True,
                                 start_line=extracted.site.start_line))
        doc = Summarizer(summarize_config).summarize(extracted.text)
    except (DocChefError, RepositoryNotFoundError, ValueError) as e:
        _fail(e, 1)
    except Exception as e:
        _fail(e, 2)

    console.print(Markdown(doc))


@app.command()
def mcp_server():
    """Start the MCP server exposing locate/extract to coding agents."""
    from docchef.mcp_server import main

    asyncio.run(main())


def _version_callback(value: bool):
    """Show version and exit."""
    if value:
        console.print(f"docchef version {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log resolution and extraction steps"),
):
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=err_console, show_path=False)],
        )
