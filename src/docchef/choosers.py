"""Selection services that pick one candidate out of several.

A chooser receives display tokens ("<label> <path>:<line>") and returns the
chosen token, or an empty string when the operator cancels.
"""

import logging
import shutil
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Sequence

from rich.console import Console
from rich.prompt import Prompt
from rich.table import Table

from docchef.errors import AmbiguousReference, ChooserError, ChooserUnavailable

logger = logging.getLogger(__name__)

# fzf exits with 1 when nothing matched and 130 on Esc/Ctrl-C
_FZF_CANCEL_CODES = (1, 130)


class Chooser(ABC):
    """Abstract interactive (or policy-driven) selection service."""

    @abstractmethod
    def choose(self, tokens: Sequence[str]) -> str:
        """Return the chosen token, or "" if the selection was cancelled."""
        pass


class FzfChooser(Chooser):
    """Fuzzy selection through the `fzf` executable."""

    def __init__(self, executable: str = "fzf", args: Sequence[str] = ()):
        self.executable = executable
        self.args = list(args)

    def choose(self, tokens: Sequence[str]) -> str:
        command = [self.executable, "--no-multi", *self.args]
        try:
            # fzf draws on the terminal itself; only its answer goes to stdout
            result = subprocess.run(
                command,
                input="\n".join(tokens),
                stdout=subprocess.PIPE,
                text=True,
            )
        except FileNotFoundError as e:
            raise ChooserUnavailable(f"{self.executable} is not installed") from e

        if result.returncode in _FZF_CANCEL_CODES:
            return ""
        if result.returncode != 0:
            raise ChooserError(f"{self.executable} exited with code {result.returncode}")

        return result.stdout.strip()


class PromptChooser(Chooser):
    """Numbered menu rendered with rich; empty input cancels."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console(stderr=True)

    def choose(self, tokens: Sequence[str]) -> str:
        table = Table(title="Multiple definitions found")
        table.add_column("#", justify="right")
        table.add_column("Definition")
        for index, token in enumerate(tokens, start=1):
            table.add_row(str(index), token)
        self.console.print(table)

        answer = Prompt.ask(
            "Select a definition (empty to cancel)",
            console=self.console,
            choices=[str(index) for index in range(1, len(tokens) + 1)],
            show_choices=False,
            default="",
            show_default=False,
        )
        if not answer:
            return ""
        return tokens[int(answer) - 1]


class FirstCandidateChooser(Chooser):
    """Deterministic tie-break for non-interactive use: take the first token."""

    def choose(self, tokens: Sequence[str]) -> str:
        return tokens[0] if tokens else ""


class StrictChooser(Chooser):
    """Refuse to pick; ambiguity is reported to the caller."""

    def choose(self, tokens: Sequence[str]) -> str:
        raise AmbiguousReference(tokens)


def get_chooser(name: str = "auto") -> Chooser:
    """Build a chooser by name.

    Args:
        name: One of "auto", "fzf", "prompt", "first" or "strict". "auto"
            uses fzf when it is on PATH and the rich prompt otherwise.

    Raises:
        ValueError: If the name is unknown
    """
    if name == "auto":
        if shutil.which("fzf"):
            return FzfChooser()
        logger.warning("fzf not found on PATH, falling back to prompt selection")
        return PromptChooser()
    if name == "fzf":
        return FzfChooser()
    if name == "prompt":
        return PromptChooser()
    if name == "first":
        return FirstCandidateChooser()
    if name == "strict":
        return StrictChooser()

    raise ValueError(f"Unknown chooser: {name}")
