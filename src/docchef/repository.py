from pathlib import Path

_EXCLUDED_DIRS = {
    ".git", ".venv", "venv", ".virtualenv", "virtualenv",
    "site-packages", "__pycache__", "node_modules", ".tox",
}


class RepositoryNotFoundError(Exception):
    """Raised when no repository root can be found above a directory."""


def find_repository_root(start: Path) -> Path:
    """Walk up from `start` to the first directory containing `.git`.

    Args:
        start: Directory to start searching from

    Returns:
        Repository root directory

    Raises:
        RepositoryNotFoundError: If no `.git` directory is found
    """
    current = start.resolve()
    for candidate in (current, *current.parents):
        if (candidate / ".git").exists():
            return candidate

    raise RepositoryNotFoundError(f"Not inside a git repository: {start}")


def should_exclude_path(path: Path, repo_root: Path) -> bool:
    """Check whether a file lives in a virtualenv, VCS or cache directory."""
    try:
        relative_parts = path.resolve().relative_to(repo_root.resolve()).parts
    except ValueError:
        relative_parts = path.parts

    if any(part in _EXCLUDED_DIRS for part in relative_parts):
        return True

    return False


def find_python_files(repo_root: Path) -> list[Path]:
    """Find Python source files under `repo_root`, sorted for stable output."""
    return sorted(
        path for path in repo_root.rglob("*.py")
        if path.is_file() and not should_exclude_path(path, repo_root)
    )


def module_name_for(path: Path, repo_root: Path) -> str:
    """Dotted module name of a file relative to the repository root.

    A leading `src/` directory is dropped and `__init__.py` maps to its package.
    """
    parts = list(path.resolve().relative_to(repo_root.resolve()).with_suffix("").parts)
    if parts and parts[0] == "src":
        parts = parts[1:]
    if parts and parts[-1] == "__init__":
        parts = parts[:-1]
    return ".".join(parts)

