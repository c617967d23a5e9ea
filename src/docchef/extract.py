"""Incremental extent extraction.

Finds the shortest run of lines, starting at a definition site, that forms
one complete top-level syntactic unit. Completeness is decided by a syntax
oracle (the language's real parser); no grammar is re-implemented here.
"""

import logging
import tokenize
from collections.abc import Sequence
from enum import Enum
from pathlib import Path

from docchef.errors import ExtentNotFound, FileUnreadable, UnsupportedFileType
from docchef.models import Completeness, DefinitionSite, ExtractedSource
from docchef.parsers import get_parser_for_file
from docchef.parsers.base import BaseParser

logger = logging.getLogger(__name__)


class ExhaustionPolicy(Enum):
    """What to do when no prefix is ever reported complete."""
    FAIL_OPEN = "fail-open"  # Return the rest of the file
    FAIL_STRICT = "fail-strict"  # Raise ExtentNotFound


def read_lines_from(file_path: str, start_line: int) -> list[str]:
    """Read a file and return its lines from `start_line` (1-indexed) on.

    The file is decoded the way the interpreter decodes it (coding cookie or
    BOM, UTF-8 otherwise), and only newlines end a line, so line numbers agree
    with `inspect` and tracebacks even when the text holds form feeds.

    Raises:
        FileUnreadable: If the file cannot be opened or decoded
    """
    try:
        with tokenize.open(file_path) as f:
            lines = [line.rstrip("\n") for line in f]
    except (OSError, UnicodeDecodeError, SyntaxError) as e:
        raise FileUnreadable(file_path, str(e)) from e

    return lines[start_line - 1:]


def extract_lines(
    lines: Sequence[str],
    oracle: BaseParser,
    policy: ExhaustionPolicy = ExhaustionPolicy.FAIL_OPEN
) -> int:
    """Scan growing prefixes of `lines` until the oracle reports a closed unit.

    Incomplete and invalid prefixes both continue the scan, since a prefix
    that cuts a string literal or operator chain in half may look invalid
    until more lines are appended.

    Args:
        lines: Source lines starting at the definition site
        oracle: Syntax oracle for the source language
        policy: Behaviour when the end is reached without a complete unit

    Returns:
        Number of lines forming the unit (the extent)

    Raises:
        ExtentNotFound: If `lines` is empty, or if the policy is FAIL_STRICT
            and no prefix is complete
    """
    if not lines:
        raise ExtentNotFound("No source lines at the requested location")

    for n in range(1, len(lines) + 1):
        candidate = "\n".join(lines[:n])
        outcome = oracle.parse_top_level(candidate)

        if outcome.state is Completeness.COMPLETE:
            if oracle.closes_unit(outcome, lines[:n], lines[n:]):
                return n
            logger.debug("Prefix of %d lines parses but its block continues", n)
        else:
            logger.debug("Prefix of %d lines is %s", n, outcome.state.value)

    if policy is ExhaustionPolicy.FAIL_STRICT:
        raise ExtentNotFound(
            f"No complete syntactic unit within {len(lines)} lines"
        )

    logger.warning(
        "No complete syntactic unit detected; returning all %d remaining lines",
        len(lines)
    )
    return len(lines)


def extract(
    site: DefinitionSite,
    oracle: BaseParser | None = None,
    policy: ExhaustionPolicy = ExhaustionPolicy.FAIL_OPEN
) -> ExtractedSource:
    """Extract the definition starting at `site`.

    Args:
        site: File and 1-indexed start line of the definition
        oracle: Syntax oracle; chosen from the file extension if None
        policy: Exhaustion policy, see `ExhaustionPolicy`

    Returns:
        ExtractedSource holding the lines of the complete unit

    Raises:
        FileUnreadable: If the file cannot be read
        UnsupportedFileType: If no oracle is given and none matches the file
        ExtentNotFound: If the start line is past the end of the file, or
            under FAIL_STRICT when no complete unit is found
    """
    if oracle is None:
        oracle = get_parser_for_file(Path(site.file_path))
        if oracle is None:
            raise UnsupportedFileType(site.file_path)

    lines = read_lines_from(site.file_path, site.start_line)
    if not lines:
        raise ExtentNotFound(f"Line {site.start_line} is past the end of {site.file_path}")

    extent = extract_lines(lines, oracle, policy)
    logger.info("Extracted %s (%d lines)", site, extent)

    return ExtractedSource(site=site, lines=tuple(lines[:extent]))
