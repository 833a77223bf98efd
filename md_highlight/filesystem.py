"""Reading markdown sources and writing rendered markup for the CLI."""

from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path

from .constants import DEFAULT_MAX_FILE_SIZE, MARKDOWN_EXTENSIONS

MAX_FILE_SIZE_ENV_VAR = "MD_HIGHLIGHT_MAX_FILE_SIZE"


def resolve_max_file_size(default: int = DEFAULT_MAX_FILE_SIZE) -> int:
    """Return the size limit for input files, honoring the environment.

    Args:
        default: Limit in bytes used when `MD_HIGHLIGHT_MAX_FILE_SIZE` is unset.

    Returns:
        int: Limit in bytes.

    Raises:
        ValueError: If the environment value is not a positive integer.

    Examples:
        os.environ["MD_HIGHLIGHT_MAX_FILE_SIZE"] = "4096"
        resolve_max_file_size()  # 4096
    """
    raw_value = os.environ.get(MAX_FILE_SIZE_ENV_VAR)
    if raw_value is None:
        return default

    try:
        limit = int(raw_value)
    except ValueError as error:
        raise ValueError(
            f"{MAX_FILE_SIZE_ENV_VAR} must be a positive integer, got {raw_value!r}"
        ) from error

    if limit <= 0:
        raise ValueError(f"{MAX_FILE_SIZE_ENV_VAR} must be a positive integer, got {limit}")
    return limit


def is_symlinked(path: Path) -> bool:
    """Whether `path` or one of its ancestors is a symbolic link."""
    for candidate in (path, *path.parents):
        try:
            if candidate.is_symlink():
                return True
        except OSError:
            continue
    return False


def resolve_markdown_path(raw_path: str, base_dir: Path) -> Path:
    """Turn a user-supplied path into an absolute markdown file path.

    The file must exist, be a regular file with a markdown extension, live
    under `base_dir`, and be reachable without following symlinks.

    Args:
        raw_path: Path given on the command line.
        base_dir: Directory the file must be inside of.

    Returns:
        Path: Resolved absolute path.

    Raises:
        ValueError: Describing the first check that failed.

    Examples:
        resolve_markdown_path("notes/today.md", Path.cwd())
    """
    path = Path(raw_path).expanduser()
    if is_symlinked(path):
        raise ValueError(f"Symlinks are not supported: {path}")

    try:
        resolved = path.resolve(strict=True)
    except FileNotFoundError as error:
        raise ValueError(f"{path} does not exist.") from error
    except OSError as error:
        raise ValueError(f"Cannot resolve {path}: {error}") from error

    if not resolved.is_file():
        raise ValueError(f"{resolved} is not a regular file.")
    if not resolved.is_relative_to(base_dir):
        raise ValueError(f"{resolved} is outside of the working directory {base_dir}.")
    if resolved.suffix.lower() not in MARKDOWN_EXTENSIONS:
        raise ValueError(
            f"{resolved} is not a Markdown file "
            f"(expected one of: {', '.join(MARKDOWN_EXTENSIONS)})."
        )
    return resolved


def read_markdown(filepath: Path, max_size: int) -> str:
    """Read a markdown file as UTF-8, keeping its line endings.

    Args:
        filepath: File returned by `resolve_markdown_path`.
        max_size: Largest accepted size in bytes.

    Returns:
        str: File content.

    Raises:
        IOError: If the file is unreadable, not a regular file, a symlink, or
            larger than `max_size`.
        UnicodeDecodeError: If the file is not valid UTF-8.
    """
    try:
        file_stat = os.stat(filepath, follow_symlinks=False)
    except OSError as error:
        raise IOError(f"Cannot access {filepath}: {error}") from error

    if stat.S_ISLNK(file_stat.st_mode):
        raise IOError(f"Symlinks are not supported: {filepath}")
    if not stat.S_ISREG(file_stat.st_mode):
        raise IOError(f"{filepath} is not a regular file.")
    if file_stat.st_size > max_size:
        raise IOError(f"{filepath} exceeds the maximum allowed size of {max_size} bytes.")

    try:
        with open(filepath, encoding="UTF-8", newline="") as source:
            return source.read()
    except (PermissionError, IsADirectoryError, FileNotFoundError) as error:
        raise IOError(f"Cannot access {filepath}: {error}") from error


def write_markup(filepath: Path, markup: str):
    """Write rendered markup next to `filepath` and move it into place.

    Raises:
        IOError: If the destination is a symlink or cannot be written.

    Examples:
        write_markup(Path("notes.html"), markup)
    """
    if filepath.is_symlink():
        raise IOError(f"Symlinks are not supported: {filepath}")

    staged: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w", encoding="UTF-8", dir=filepath.parent, suffix=".tmp", delete=False
        ) as handle:
            staged = Path(handle.name)
            handle.write(markup)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(staged, filepath)
    except OSError as error:
        raise IOError(f"Cannot write {filepath}: {error}") from error
    finally:
        if staged is not None and staged.exists():
            staged.unlink()
