import ast
import io
import logging
import re
import tokenize
import warnings
from collections.abc import Sequence

import tree_sitter_python
from tree_sitter import Language, Parser

from docchef.models import Completeness, Definition, Parameter, ParseOutcome
from docchef.parsers.base import BaseParser

logger = logging.getLogger(__name__)

# Clauses that continue a compound statement at the same indentation
_CONTINUATION_CLAUSE = re.compile(r"(else|elif|except|finally)\b")

# Compiler messages that mean "valid so far, more input expected"
_UNTERMINATED_MESSAGES = (
    "expected an indented block",
    "was never closed",
    "unterminated triple-quoted string",
    "unexpected EOF",
    "incomplete input",
)


def _indent_width(line: str) -> int:
    return len(line) - len(line.lstrip())


def _strip_common_indent(lines: Sequence[str]) -> list[str]:
    """Remove the first line's indentation from every line that carries it.

    Lines with shallower indentation (e.g. column-0 text inside a string
    literal) are left untouched.
    """
    if not lines:
        return []
    prefix = lines[0][:_indent_width(lines[0])]
    if not prefix:
        return list(lines)
    return [line[len(prefix):] if line.startswith(prefix) else line for line in lines]


def _next_code_line(lines: Sequence[str]) -> str | None:
    """First line that is neither blank nor a comment."""
    for line in lines:
        stripped = line.strip()
        if stripped and not stripped.startswith("#"):
            return line
    return None


def _is_compound(node: ast.stmt) -> bool:
    return isinstance(getattr(node, "body", None), list)


def _is_unterminated(text: str, error: Exception) -> bool:
    """Decide whether a syntax error only reflects input that stops too early."""
    message = getattr(error, "msg", None) or str(error)
    if any(marker in message for marker in _UNTERMINATED_MESSAGES):
        return True

    try:
        for _ in tokenize.generate_tokens(io.StringIO(text).readline):
            pass
    except tokenize.TokenError:
        # EOF inside a bracket, string or backslash continuation
        return True
    except (SyntaxError, ValueError):
        return False

    return False


class PythonParser(BaseParser):
    """Python syntax oracle (via `ast`) and definition scanner (via tree-sitter)."""

    def __init__(self):
        self.language = Language(tree_sitter_python.language())
        self.parser = Parser(self.language)

    def parse_top_level(self, source: str) -> ParseOutcome:
        """Classify a source prefix using Python's own parser.

        The prefix is re-indented relative to its first line so that
        definitions nested in a class body parse on their own.

        Args:
            source: Candidate source text

        Returns:
            COMPLETE with the `ast.Module` when the text parses and holds at
            least one statement; INCOMPLETE when the parser ran out of input
            (or only blank/comment lines are present); INVALID otherwise.
        """
        text = "\n".join(_strip_common_indent(source.split("\n")))

        with warnings.catch_warnings():
            # Invalid escape sequences etc. would warn once per prefix
            warnings.simplefilter("ignore")
            try:
                tree = ast.parse(text)
            except (SyntaxError, ValueError) as e:
                if _is_unterminated(text, e):
                    return ParseOutcome(Completeness.INCOMPLETE, error=e)
                return ParseOutcome(Completeness.INVALID, error=e)

        if not tree.body:
            return ParseOutcome(Completeness.INCOMPLETE)

        return ParseOutcome(Completeness.COMPLETE, tree=tree)

    def closes_unit(
        self,
        outcome: ParseOutcome,
        unit: Sequence[str],
        rest: Sequence[str]
    ) -> bool:
        """Check that an indentation-delimited block really ends after `unit`.

        A prefix ending in a compound statement (def, class, if, ...) parses
        as soon as its first body line is present. It is only closed once
        the next code line dedents back to the unit's own level and does
        not open a continuation clause (else/elif/except/finally).
        """
        if not _is_compound(outcome.tree.body[-1]):
            return True

        following = _next_code_line(rest)
        if following is None:
            return True

        unit_indent = _indent_width(unit[0])
        following_indent = _indent_width(following)
        if following_indent > unit_indent:
            return False
        if following_indent == unit_indent and _CONTINUATION_CLAUSE.match(following.strip()):
            return False

        return True

    def _extract_text(self, source_code: str, start_byte: int, end_byte: int) -> str:
        return source_code.encode("utf8")[start_byte:end_byte].decode("utf8")

    def find_definitions(self, source_code: str) -> list[Definition]:
        """Find top-level functions and classes and the methods inside classes.

        Args:
            source_code: Python source code to scan

        Returns:
            Definitions in file order; `line` is 1-indexed and points at the
            first decorator when the definition is decorated
        """
        tree = self.parser.parse(bytes(source_code, "utf8"))
        definitions = []

        for child in tree.root_node.children:
            node, extent_node = self._unwrap_decorated(child)
            if node is None:
                continue

            name = self._node_name(node, source_code)
            if name is None:
                continue

            if node.type == "function_definition":
                definitions.append(Definition(
                    kind="function",
                    qualname=name,
                    line=extent_node.start_point[0] + 1,
                    params=self._extract_parameters(node, source_code),
                ))
            else:
                definitions.append(Definition(
                    kind="class",
                    qualname=name,
                    line=extent_node.start_point[0] + 1,
                ))
                definitions.extend(self._find_methods(node, name, source_code))

        return definitions

    def _unwrap_decorated(self, node):
        """Return (definition_node, extent_node); extent includes decorators."""
        if node.type in ("function_definition", "class_definition"):
            return node, node
        if node.type == "decorated_definition":
            definition = node.child_by_field_name("definition")
            if definition is not None:
                return definition, node
        return None, None

    def _node_name(self, node, source_code: str) -> str | None:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return None
        return self._extract_text(source_code, name_node.start_byte, name_node.end_byte)

    def _find_methods(self, class_node, class_name: str, source_code: str) -> list[Definition]:
        methods = []
        body = class_node.child_by_field_name("body")
        if not body:
            return methods

        for item in body.children:
            node, extent_node = self._unwrap_decorated(item)
            if node is None or node.type != "function_definition":
                continue
            name = self._node_name(node, source_code)
            if name is None:
                continue
            methods.append(Definition(
                kind="method",
                qualname=f"{class_name}.{name}",
                line=extent_node.start_point[0] + 1,
                params=self._extract_parameters(node, source_code),
            ))

        return methods

    def _extract_parameters(self, node, source_code: str) -> list[Parameter]:
        """Extract parameter list from function/method definition.

        Args:
            node: function_definition tree-sitter node
            source_code: Source code string for text extraction

        Returns:
            List of Parameter objects
        """
        parameters = []

        params_node = node.child_by_field_name("parameters")
        if not params_node:
            return parameters

        def text(n):
            return self._extract_text(source_code, n.start_byte, n.end_byte)

        for child in params_node.children:
            if child.type in ("(", ")", ","):
                continue

            param_name = None
            param_type = None
            param_default = None

            if child.type == "identifier":
                param_name = text(child)

            elif child.type == "typed_parameter":
                # typed_parameter -> identifier (or splat pattern), :, type
                for subchild in child.children:
                    if param_name is None and subchild.type in (
                        "identifier", "list_splat_pattern", "dictionary_splat_pattern"
                    ):
                        param_name = text(subchild)
                    elif subchild.type == "type":
                        param_type = text(subchild)

            elif child.type in ("default_parameter", "typed_default_parameter"):
                name_node = child.child_by_field_name("name")
                type_node = child.child_by_field_name("type")
                value_node = child.child_by_field_name("value")
                if name_node:
                    param_name = text(name_node)
                if type_node:
                    param_type = text(type_node)
                if value_node:
                    param_default = text(value_node)

            elif child.type in ("list_splat_pattern", "dictionary_splat_pattern"):
                # Keep the * or ** prefix
                param_name = text(child)

            elif child.type == "keyword_separator":
                # Bare *: the parameters after it are keyword-only
                param_name = "*"

            if param_name:
                parameters.append(Parameter(
                    name=param_name,
                    type=param_type,
                    default=param_default
                ))

        return parameters
