"""Reduce a callable reference to exactly one definition site."""

import logging
import os
from collections.abc import Callable

from docchef.choosers import Chooser, get_chooser
from docchef.errors import MalformedSelection, NoDefinitionFound, SelectionCancelled
from docchef.models import Candidate, CallableReference, DefinitionSite
from docchef.reflection import enumerate_definitions

logger = logging.getLogger(__name__)


def contract_home(file_path: str) -> str:
    """Replace a leading home directory with `~` for display."""
    home = os.path.expanduser("~")
    if home not in ("~", "/") and (file_path == home or file_path.startswith(home + os.sep)):
        return "~" + file_path[len(home):]
    return file_path


def format_candidate(candidate: Candidate) -> str:
    """Render a candidate as a display token: "<label> <path>:<line>"."""
    location = f"{contract_home(candidate.site.file_path)}:{candidate.site.start_line}"
    if candidate.label:
        return f"{candidate.label} {location}"
    return location


def parse_selection(token: str) -> DefinitionSite:
    """Parse the trailing "<path>:<line>" field of a chosen display token.

    Args:
        token: Display token; its last whitespace-delimited field is the location

    Returns:
        DefinitionSite with the home-directory shorthand expanded

    Raises:
        MalformedSelection: If the field has no colon, or the line is not a
            positive integer
    """
    fields = token.split()
    if not fields:
        raise MalformedSelection(token, "empty selection")

    file_path, separator, line_text = fields[-1].rpartition(":")
    if not separator or not file_path:
        raise MalformedSelection(token, "expected <path>:<line>")

    try:
        line = int(line_text)
    except ValueError:
        raise MalformedSelection(token, f"line {line_text!r} is not an integer") from None

    if line <= 0:
        raise MalformedSelection(token, f"line {line} is not positive")

    return DefinitionSite(file_path=os.path.expanduser(file_path), start_line=line)


def resolve(
    ref: CallableReference,
    enumerate_sites: Callable[[CallableReference], list[Candidate]] = enumerate_definitions,
    chooser: Chooser | None = None
) -> DefinitionSite:
    """Resolve a callable reference to a single definition site.

    A single candidate is returned without interaction. Several candidates
    are handed to the chooser once, and its answer is parsed back.

    Args:
        ref: Callable to resolve
        enumerate_sites: Enumeration service (runtime reflection by default)
        chooser: Selection service; the "auto" chooser if None

    Raises:
        NoDefinitionFound: If no candidate matches
        SelectionCancelled: If the chooser returned an empty answer
        MalformedSelection: If the chooser's answer cannot be parsed
    """
    candidates = enumerate_sites(ref)
    if not candidates:
        raise NoDefinitionFound(ref.name)

    if len(candidates) == 1:
        return candidates[0].site

    logger.info("%d definitions match %s, asking for a selection", len(candidates), ref.name)
    if chooser is None:
        chooser = get_chooser()

    answer = chooser.choose([format_candidate(c) for c in candidates])
    if not answer or not answer.strip():
        raise SelectionCancelled()

    return parse_selection(answer)
