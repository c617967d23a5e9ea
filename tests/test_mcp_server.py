"""Tests for MCP server functionality."""

import json
import subprocess
from unittest.mock import patch

import pytest

from docchef import mcp_server


def _completed(payload):
    return subprocess.CompletedProcess(args=["chef"], returncode=0, stdout=json.dumps(payload), stderr="")


@pytest.mark.asyncio
async def test_list_tools():
    """Test that list_tools returns the chef_locate and chef_extract tools."""
    tools = await mcp_server.list_tools()

    assert [tool.name for tool in tools] == ["chef_locate", "chef_extract"]
    assert "name" in tools[0].inputSchema["properties"]
    assert "target" in tools[1].inputSchema["properties"]
    assert "Python" in tools[0].description


@pytest.mark.asyncio
async def test_call_tool_unknown():
    """Test that calling an unknown tool raises ValueError."""
    with pytest.raises(ValueError, match="Unknown tool"):
        await mcp_server.call_tool("nonexistent_tool", {})


@pytest.mark.asyncio
async def test_locate_lists_sites():
    payload = [
        {"label": "render(value)", "path": "/src/a.py", "line": 8},
        {"label": "render(value: int)", "path": "/src/a.py", "line": 13},
    ]
    with patch("docchef.mcp_server.subprocess.run", return_value=_completed(payload)) as run:
        content = await mcp_server.call_tool("chef_locate", {"name": "pkg.render"})

    assert run.call_args[0][0] == ["chef", "locate", "--json", "pkg.render"]
    assert content[0].text == "render(value) /src/a.py:8\nrender(value: int) /src/a.py:13"


@pytest.mark.asyncio
async def test_locate_no_results():
    with patch("docchef.mcp_server.subprocess.run", return_value=_completed([])):
        content = await mcp_server.call_tool("chef_locate", {"name": "nothing"})

    assert content[0].text == "No definitions found for 'nothing'"


@pytest.mark.asyncio
async def test_extract_uses_strict_chooser():
    payload = {"path": "/src/a.py", "start": 3, "end": 4, "code": "def f():\n    return 1"}
    with patch("docchef.mcp_server.subprocess.run", return_value=_completed(payload)) as run:
        content = await mcp_server.call_tool("chef_extract", {"target": "/src/a.py:3"})

    assert run.call_args[0][0] == ["chef", "extract", "--json", "--chooser", "strict", "/src/a.py:3"]
    assert content[0].text == "# /src/a.py (lines 3-4)\ndef f():\n    return 1"


@pytest.mark.asyncio
async def test_extract_reports_cli_error():
    error = subprocess.CalledProcessError(
        1, ["chef"], stderr="Error: Ambiguous reference: 2 candidates match\n"
    )
    with patch("docchef.mcp_server.subprocess.run", side_effect=error):
        content = await mcp_server.call_tool("chef_extract", {"target": "pkg.render"})

    assert content[0].text == (
        "Error running chef extract: Error: Ambiguous reference: 2 candidates match"
    )


@pytest.mark.asyncio
async def test_invalid_json_output():
    bad = subprocess.CompletedProcess(args=["chef"], returncode=0, stdout="not json", stderr="")
    with patch("docchef.mcp_server.subprocess.run", return_value=bad):
        content = await mcp_server.call_tool("chef_locate", {"name": "x"})

    assert content[0].text.startswith("Error parsing chef output")


@pytest.mark.asyncio
async def test_missing_executable():
    with patch("docchef.mcp_server.subprocess.run", side_effect=FileNotFoundError("chef")):
        content = await mcp_server.call_tool("chef_locate", {"name": "x"})

    assert content[0].text.startswith("Unexpected error")
