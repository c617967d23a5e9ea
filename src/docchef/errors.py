"""Error taxonomy for resolution, extraction and their collaborators.

None of these are retried: they stem from missing data or a deliberate
operator action, never from a transient condition.
"""


class DocChefError(Exception):
    """Base class for all docchef errors."""


class NoDefinitionFound(DocChefError):
    """Enumeration yielded zero candidate definition sites."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No definition found for '{name}'")


class SelectionCancelled(DocChefError):
    """The operator declined or cancelled the interactive choice."""

    def __init__(self):
        super().__init__("Selection cancelled; could not determine location of definition")


class MalformedSelection(DocChefError):
    """The chosen token's trailing file:line suffix could not be parsed."""

    def __init__(self, token: str, reason: str):
        self.token = token
        super().__init__(f"Malformed selection {token!r}: {reason}")


class AmbiguousReference(DocChefError):
    """Several candidates matched and the chooser refuses to pick one."""

    def __init__(self, tokens):
        self.tokens = list(tokens)
        listing = "\n".join(f"  {token}" for token in self.tokens)
        super().__init__(
            f"Ambiguous reference: {len(self.tokens)} candidates match\n{listing}"
        )


class FileUnreadable(DocChefError):
    """The target source file could not be opened or decoded."""

    def __init__(self, file_path: str, reason: str):
        self.file_path = file_path
        super().__init__(f"Cannot read {file_path}: {reason}")


class ExtentNotFound(DocChefError):
    """No complete syntactic unit was found from the requested line."""


class UnsupportedFileType(DocChefError):
    """No syntax oracle is registered for the file's extension."""

    def __init__(self, file_path: str):
        self.file_path = file_path
        super().__init__(f"Unsupported file type: {file_path}")


class ChooserUnavailable(DocChefError):
    """The interactive selection backend is not installed."""


class ChooserError(DocChefError):
    """The interactive selection backend failed."""


class SummarizerNotConfigured(DocChefError):
    """The summarization service is missing credentials."""
