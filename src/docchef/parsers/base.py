from abc import ABC, abstractmethod
from collections.abc import Sequence

from docchef.models import ParseOutcome


class BaseParser(ABC):
    """Abstract base class for language-specific syntax oracles."""

    @abstractmethod
    def parse_top_level(self, source: str) -> ParseOutcome:
        """Classify a source prefix as complete, incomplete or invalid.

        Args:
            source: Candidate source text (lines joined with newlines)

        Returns:
            ParseOutcome whose state is COMPLETE only when the text parses
            as a top-level unit without a dangling, unterminated construct
        """
        pass

    def closes_unit(
        self,
        outcome: ParseOutcome,
        unit: Sequence[str],
        rest: Sequence[str]
    ) -> bool:
        """Confirm that a COMPLETE prefix is not continued by the lines after it.

        Grammars whose blocks carry explicit terminators are closed as soon as
        they parse, so the default accepts every complete prefix.

        Args:
            outcome: The COMPLETE outcome returned for `unit`
            unit: Lines of the complete prefix
            rest: Remaining lines of the file after the prefix

        Returns:
            True if the unit ends here
        """
        return True
