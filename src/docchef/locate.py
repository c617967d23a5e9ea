"""Static enumeration of definition sites, for code that cannot be imported."""

import logging
from pathlib import Path

from docchef.models import Candidate, CallableReference, Definition, DefinitionSite
from docchef.parsers.python_parser import PythonParser
from docchef.repository import find_python_files, find_repository_root, module_name_for

logger = logging.getLogger(__name__)


def _descriptor_name(descriptor) -> str:
    if isinstance(descriptor, str):
        return descriptor
    return descriptor.__name__


def _annotations_match(definition: Definition, signature: tuple | None) -> bool:
    """Compare type descriptors against parameter annotation text.

    Unannotated parameters accept anything. A dotted descriptor matches an
    annotation naming the same class without its module prefix.
    """
    if signature is None:
        return True

    params = definition.params
    if definition.kind == "method" and params:
        params = params[1:]  # self / cls

    positional = []
    variadic = False
    for p in params:
        if p.name.startswith("*"):
            # *args and a bare * both end the positional parameters
            variadic = p.name != "*" and not p.name.startswith("**")
            break
        positional.append(p)
    if len(signature) > len(positional) and not variadic:
        return False

    for param, descriptor in zip(positional, signature):
        if param.type is None:
            continue
        expected = _descriptor_name(descriptor)
        if param.type != expected and param.type.rsplit(".", 1)[-1] != expected.rsplit(".", 1)[-1]:
            return False

    return True


def _label(definition: Definition, module: str) -> str:
    qualified = f"{module}.{definition.qualname}" if module else definition.qualname
    if definition.kind == "class":
        return f"class {qualified}"

    params = ", ".join(
        f"{p.name}: {p.type}" if p.type else p.name for p in definition.params
    )
    return f"{qualified}({params})"


def locate_definitions(ref: CallableReference, repo_root: Path | None = None) -> list[Candidate]:
    """Find definitions named by `ref` by parsing the repository's Python files.

    Args:
        ref: Name may be a bare name, `Class.method`, or (without a scope)
            prefixed by its dotted module path
        repo_root: Repository root (auto-detected if None)

    Returns:
        Candidates ordered by file path, then line

    Raises:
        RepositoryNotFoundError: If `repo_root` is None and the current
            directory is not inside a repository
    """
    if repo_root is None:
        repo_root = find_repository_root(Path.cwd())

    parser = PythonParser()
    candidates = []

    for path in find_python_files(repo_root):
        module = module_name_for(path, repo_root)
        if ref.scope is not None and module not in ref.scope:
            continue

        targets = {ref.name}
        if ref.scope is None and module and ref.name.startswith(module + "."):
            targets.add(ref.name[len(module) + 1:])

        try:
            source_code = path.read_text()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Skipping unreadable file %s: %s", path, e)
            continue

        for definition in parser.find_definitions(source_code):
            if definition.qualname not in targets:
                continue
            if not _annotations_match(definition, ref.signature):
                continue
            candidates.append(Candidate(
                site=DefinitionSite(file_path=str(path.resolve()), start_line=definition.line),
                label=_label(definition, module),
            ))

    logger.debug("Static scan found %d candidate(s) for %s", len(candidates), ref.name)
    return candidates
