from pathlib import Path

from docchef.parsers.base import BaseParser
from docchef.parsers.python_parser import PythonParser

_PARSERS_BY_SUFFIX = {
    ".py": PythonParser,
    ".pyi": PythonParser,
}


def get_parser_for_file(file_path: Path) -> BaseParser | None:
    """Return a syntax oracle for the file's extension, or None if unsupported."""
    parser_class = _PARSERS_BY_SUFFIX.get(Path(file_path).suffix.lower())
    if parser_class is None:
        return None
    return parser_class()
