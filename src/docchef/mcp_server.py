"""MCP server that exposes docchef's locate/extract tools to coding agents.

This server wraps the `chef` CLI. Agents cannot answer an interactive
selection, so extraction runs with the strict chooser: an ambiguous name
returns the candidate list, and the agent retries with a "path:line" target.
"""

import json
import subprocess
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

app = Server("chef")


@app.list_tools()
async def list_tools() -> list[Tool]:
    """Declare available tools."""
    return [
        Tool(
            name="chef_locate",
            description=(
                "List the definition sites (file and first line) of a Python callable. "
                "Overloads and singledispatch implementations are listed separately."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "name": {
                        "type": "string",
                        "description": "Dotted path of the callable, e.g. 'pkg.module.func'",
                    }
                },
                "required": ["name"],
            },
        ),
        Tool(
            name="chef_extract",
            description=(
                "Return the complete source code of a Python definition, from its first "
                "line to the end of its body and nothing more."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "target": {
                        "type": "string",
                        "description": (
                            "Either 'file_path:line' of the definition's first line, or a "
                            "dotted callable name. Examples: 'src/auth.py:42', 'auth.validate'"
                        ),
                    }
                },
                "required": ["target"],
            },
        ),
    ]


@app.call_tool()
async def call_tool(name: str, arguments: Any) -> list[TextContent]:
    """Handle tool calls by routing to the matching CLI command."""
    if name == "chef_locate":
        return await _handle_locate(arguments["name"])
    elif name == "chef_extract":
        return await _handle_extract(arguments["target"])

    raise ValueError(f"Unknown tool: {name}")


def _run_cli(args: list[str]) -> Any:
    result = subprocess.run(
        ["chef", *args],
        capture_output=True,
        text=True,
        check=True,
    )
    return json.loads(result.stdout)


def _error_content(command: str, error: Exception) -> list[TextContent]:
    if isinstance(error, subprocess.CalledProcessError):
        message = error.stderr.strip() if error.stderr else str(error)
        text = f"Error running chef {command}: {message}"
    elif isinstance(error, json.JSONDecodeError):
        text = f"Error parsing chef output: {error}"
    else:
        text = f"Unexpected error: {error}"
    return [TextContent(type="text", text=text)]


async def _handle_locate(name: str) -> list[TextContent]:
    """Handle chef_locate tool calls.

    Args:
        name: Dotted path of the callable

    Returns:
        List containing a single TextContent with one site per line
    """
    try:
        candidates = _run_cli(["locate", "--json", name])
    except Exception as e:
        return _error_content("locate", e)

    if not candidates:
        return [TextContent(type="text", text=f"No definitions found for '{name}'")]

    lines = [f"{c['label']} {c['path']}:{c['line']}" for c in candidates]
    return [TextContent(type="text", text="\n".join(lines))]


async def _handle_extract(target: str) -> list[TextContent]:
    """Handle chef_extract tool calls.

    Args:
        target: "file_path:line" or dotted callable name

    Returns:
        List containing a single TextContent with the located source
    """
    try:
        extracted = _run_cli(["extract", "--json", "--chooser", "strict", target])
    except Exception as e:
        return _error_content("extract", e)

    header = f"# {extracted['path']} (lines {extracted['start']}-{extracted['end']})"
    return [TextContent(type="text", text=f"{header}\n{extracted['code']}")]


async def main():
    """Run the MCP server."""
    async with stdio_server() as (read_stream, write_stream):
        await app.run(read_stream, write_stream, app.create_initialization_options())


if __name__ == "__main__":
    import asyncio

    asyncio.run(main())
