"""Reading and rewriting template files for the command line."""

from __future__ import annotations

import contextlib
import os
import stat
import tempfile
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from .constants import DEFAULT_MAX_FILE_SIZE, TEMPLATE_EXTENSIONS

MAX_FILE_SIZE_ENV_VAR = "TWIG_FORMAT_MAX_FILE_SIZE"


class TemplateFileError(IOError):
    """Raised when a template cannot be read or rewritten safely."""


@dataclass(frozen=True)
class TemplateFile:
    """A template together with the file metadata it was read with.

    Attributes:
        path: Absolute path of the template.
        content: Decoded template source.
        snapshot: ``lstat`` result taken before reading. A rewrite is refused
            when the file no longer matches it.
    """

    path: Path
    content: str
    snapshot: os.stat_result


def _identity(snapshot: os.stat_result) -> tuple[int, int, int, int]:
    return snapshot.st_ino, snapshot.st_dev, snapshot.st_size, snapshot.st_mtime_ns


def _lstat(path: Path) -> os.stat_result:
    try:
        return path.lstat()
    except OSError as error:
        raise TemplateFileError(f"Cannot read {path}: {error.strerror or error}") from error


def max_file_size(default: int = DEFAULT_MAX_FILE_SIZE) -> int:
    """Return the size limit for templates, honouring `TWIG_FORMAT_MAX_FILE_SIZE`.

    Raises:
        ValueError: If the environment variable is set to anything other than
            a positive integer.

    Examples:
        max_file_size(default=config.max_file_size)
    """
    raw_value = os.environ.get(MAX_FILE_SIZE_ENV_VAR)
    if raw_value is None:
        return default

    value = raw_value.strip()
    if not value.isdecimal() or int(value) == 0:
        raise ValueError(f"{MAX_FILE_SIZE_ENV_VAR} must be a positive integer, got {raw_value!r}")
    return int(value)


def resolve_template(raw_path: str, base_dir: Path) -> Path:
    """Turn a command-line path into the absolute path of a template.

    Args:
        raw_path: Path given by the user, absolute or relative to `base_dir`.
        base_dir: Resolved working directory; templates must live below it.

    Returns:
        Path: Absolute path of the template.

    Raises:
        ValueError: If the path goes through a symlink, leaves `base_dir`, or
            does not end with a template extension.

    Examples:
        resolve_template("templates/base.html.twig", Path.cwd().resolve())
    """
    path = Path(raw_path).expanduser()
    if not path.is_absolute():
        path = base_dir / path

    for candidate in (path, *path.parents):
        if candidate.is_symlink():
            raise ValueError(f"Refusing to follow symlink {candidate}")

    resolved = path.resolve()
    if not resolved.is_relative_to(base_dir):
        raise ValueError(f"{resolved} is outside of the working directory {base_dir}")

    if resolved.suffix.lower() not in TEMPLATE_EXTENSIONS:
        extensions = ", ".join(TEMPLATE_EXTENSIONS)
        raise ValueError(f"{resolved.name} is not a Twig template (expected {extensions})")

    return resolved


def read_template(path: Path, max_size: int = DEFAULT_MAX_FILE_SIZE) -> TemplateFile:
    """Read a template after checking that it is a small, regular file.

    The file is inspected with ``lstat`` before it is opened, so pipes,
    sockets and devices are rejected without blocking on them.

    Args:
        path: Template to read.
        max_size: Largest accepted size in bytes.

    Returns:
        TemplateFile: The decoded source and the metadata snapshot.

    Raises:
        TemplateFileError: If the file is missing, not a regular file, too
            large, not valid UTF-8, or changes while it is being read.
    """
    snapshot = _lstat(path)
    if not stat.S_ISREG(snapshot.st_mode):
        raise TemplateFileError(f"{path} is not a regular file")
    if snapshot.st_size > max_size:
        raise TemplateFileError(
            f"{path} is {snapshot.st_size} bytes, over the maximum allowed size of "
            f"{max_size} bytes"
        )

    try:
        content = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as error:
        raise TemplateFileError(
            f"Invalid UTF-8 sequence in {path} at byte {error.start}: {error.reason}"
        ) from error
    except OSError as error:
        raise TemplateFileError(f"Cannot read {path}: {error.strerror or error}") from error

    if _identity(_lstat(path)) != _identity(snapshot):
        raise TemplateFileError(f"{path} changed while it was being read")
    return TemplateFile(path, content, snapshot)


def write_template(
    template: TemplateFile,
    formatted: str,
    warn: Callable[[str], None] | None = None,
) -> None:
    """Replace a template with its formatted source.

    The source is written to a sibling temporary file that takes over the
    original's mode (and owner, where permitted) before it is renamed over
    the template. The access time recorded when the template was read is
    restored afterwards.

    Args:
        template: Template as returned by `read_template`.
        formatted: New source for the file.
        warn: Optional callback for non-fatal diagnostics.

    Raises:
        TemplateFileError: If the template changed since it was read or the
            replacement could not be written.

    Examples:
        template = read_template(path)
        write_template(template, format_text(template.content))
    """
    path = template.path
    if _identity(_lstat(path)) != _identity(template.snapshot):
        raise TemplateFileError(f"{path} changed since it was read; not overwriting it")

    descriptor, temp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
    )
    temp_path = Path(temp_name)
    try:
        with os.fdopen(descriptor, "w", encoding="utf-8", newline="") as stream:
            stream.write(formatted)
            stream.flush()
            os.fsync(stream.fileno())
        os.chmod(temp_path, stat.S_IMODE(template.snapshot.st_mode))
        _copy_owner(template, temp_path, warn)
        os.replace(temp_path, path)
        os.utime(path, ns=(template.snapshot.st_atime_ns, path.stat().st_mtime_ns))
    except OSError as error:
        raise TemplateFileError(f"Cannot rewrite {path}: {error.strerror or error}") from error
    finally:
        with contextlib.suppress(OSError):
            temp_path.unlink(missing_ok=True)


def _copy_owner(
    template: TemplateFile, temp_path: Path, warn: Callable[[str], None] | None
) -> None:
    owner = getattr(template.snapshot, "st_uid", None)
    group = getattr(template.snapshot, "st_gid", None)
    if owner is None or group is None or not hasattr(os, "chown"):
        return

    try:
        os.chown(temp_path, owner, group)
    except PermissionError:
        if warn is not None:
            warn(
                f"Warning: {template.path.name} is now owned by the current user "
                "(keeping the original owner requires elevated privileges)"
            )
