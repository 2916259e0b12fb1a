"""Local filesystem provider.

``DiskFileProvider`` is the default provider of a registry: it owns native
paths (``/data/file.txt``, ``C:\\data``, ``~/notes``) and paths carrying the
``file:`` scheme. Paths are handed to the operating system as they are, after
removing the ``file:`` prefix and expanding a leading ``~``.

Symbolic links are leaves: ``exists`` reports dangling links, ``is_directory``
is False for a link to a directory, and ``delete`` removes the link itself.
Recursive operations therefore never descend through a link.

Operating system failures are reported through the schemefs error vocabulary
(see :mod:`schemefs.compat`).

Example:

    >>> from schemefs import DiskFileProvider
    >>> disk = DiskFileProvider()
    >>> disk.create_file("/tmp/example.txt")
    True
    >>> disk.size("file:/tmp/example.txt")
    0

"""

from __future__ import annotations

import atexit
import logging
import os
import stat
import tempfile
from typing import TYPE_CHECKING

from .compat import os_errors_translated, translate_os_error
from .interfaces import (
    AlreadyExistsError,
    FileProvider,
    InvalidOperationError,
    NotFoundError,
)
from .schemes import has_scheme, join_scheme, parse_scheme, strip_scheme
from .utils import validate_handle_mode

if TYPE_CHECKING:
    from typing import BinaryIO

logger = logging.getLogger(__name__)

_SEPARATORS = os.sep + (os.altsep or "")
_WRITE_BITS = stat.S_IWUSR | stat.S_IWGRP | stat.S_IWOTH


class DiskFileProvider(FileProvider):
    """Provider implementation backed by the local filesystem."""

    scheme = "file"

    def accepts(self, path: str) -> bool:
        """Claim ``file:`` paths and every path without a scheme."""
        return has_scheme(path, self.scheme) or parse_scheme(path) is None

    def unwrap(self, path: str) -> str:
        """Return the path without the ``file:`` prefix."""
        return strip_scheme(path, self.scheme)

    def file_starts_with(self, path: str, prefix: str) -> bool:
        """Compare native paths using the platform's case rules."""
        native = os.path.normcase(self._native(path))
        return native.startswith(os.path.normcase(self._native(prefix)))

    def exists(self, path: str) -> bool:
        """Check whether the path exists on disk, counting dangling symlinks."""
        return os.path.lexists(self._native(path))

    def create_directory(self, path: str) -> None:
        """Create a directory; no-op if it already exists."""
        native = self._native(path)
        if os.path.isdir(native):
            return
        with os_errors_translated(path):
            os.mkdir(native)

    def create_file(self, path: str) -> bool:
        """Create an empty file unless something already exists at the path."""
        native = self._native(path)
        try:
            fd = os.open(native, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o666)
        except FileExistsError:
            return False
        except OSError as exc:
            raise translate_os_error(exc, path) from exc
        os.close(fd)
        return True

    def delete(self, path: str) -> None:
        """Delete a file or an empty directory."""
        native = self._native(path)
        with os_errors_translated(path):
            if os.path.isdir(native) and not os.path.islink(native):
                os.rmdir(native)
            else:
                os.remove(native)

    def get_canonical_path(self, path: str) -> str:
        """Return the absolute path with symlinks and ``..`` resolved."""
        return os.path.realpath(self._native(path))

    def get_parent(self, path: str) -> str | None:
        """Return the parent directory, or None for a root or a bare name."""
        trimmed = self._trimmed(path)
        parent = os.path.dirname(trimmed)
        if not parent or parent == trimmed:
            return None
        return self._qualify(path, parent)

    def is_absolute(self, path: str) -> bool:
        """Check whether the native path is absolute."""
        return os.path.isabs(self._native(path))

    def move_to(self, old: str, new: str, *, atomic_replace: bool = False) -> None:
        """Rename a file or directory on the same filesystem."""
        source = self._native(old)
        target = self._native(new)
        if not os.path.lexists(source):
            raise NotFoundError(old)
        if source == target:
            return
        if os.path.lexists(target) and not atomic_replace:
            raise AlreadyExistsError(new)
        with os_errors_translated(old):
            os.replace(source, target)

    def get_name(self, path: str) -> str:
        """Return the last path segment."""
        return os.path.basename(self._trimmed(path))

    def list_files(self, path: str) -> list[str]:
        """Return the entries of a directory joined to ``path``."""
        with os_errors_translated(path):
            names = sorted(os.listdir(self._native(path)))
        return [os.path.join(path, name) for name in names]

    def last_modified(self, path: str) -> int:
        """Return the modification time in milliseconds since the epoch."""
        with os_errors_translated(path):
            return os.stat(self._native(path)).st_mtime_ns // 1_000_000

    def size(self, path: str) -> int:
        """Return the file size in bytes."""
        with os_errors_translated(path):
            return os.stat(self._native(path)).st_size

    def is_directory(self, path: str) -> bool:
        """Check whether the path is a directory and not a symlink to one."""
        native = self._native(path)
        return os.path.isdir(native) and not os.path.islink(native)

    def open_handle(self, path: str, mode: str = "r") -> BinaryIO:
        """Open a random access file object.

        ``rws`` and ``rwd`` open the file with ``O_SYNC`` and ``O_DSYNC``
        respectively and without user-space buffering, so each write reaches
        the device before returning.
        """
        validate_handle_mode(mode, path)
        native = self._native(path)
        if os.path.isdir(native):
            raise InvalidOperationError.cannot_open_directory(path)

        flags = getattr(os, "O_BINARY", 0)
        if mode == "r":
            flags |= os.O_RDONLY
        else:
            flags |= os.O_RDWR | os.O_CREAT
            if mode == "rws":
                flags |= getattr(os, "O_SYNC", 0)
            elif mode == "rwd":
                flags |= getattr(os, "O_DSYNC", getattr(os, "O_SYNC", 0))

        with os_errors_translated(path):
            fd = os.open(native, flags, 0o666)
        try:
            if mode == "r":
                return os.fdopen(fd, "rb")
            buffering = 0 if mode in ("rws", "rwd") else -1
            return os.fdopen(fd, "r+b", buffering=buffering)
        except OSError as exc:
            os.close(fd)
            raise translate_os_error(exc, path) from exc

    def new_input_stream(self, path: str) -> BinaryIO:
        """Open the file for reading."""
        with os_errors_translated(path):
            return open(self._native(path), "rb")  # noqa: SIM115

    def new_output_stream(self, path: str, *, append: bool = False) -> BinaryIO:
        """Open the file for writing, creating it if needed."""
        mode = "ab" if append else "wb"
        with os_errors_translated(path):
            return open(self._native(path), mode)  # noqa: SIM115

    def can_write(self, path: str) -> bool:
        """Check whether the path exists and carries write permission."""
        native = self._native(path)
        try:
            st_mode = os.stat(native).st_mode
        except OSError:
            return False
        return bool(st_mode & stat.S_IWUSR) and os.access(native, os.W_OK)

    def is_read_only(self, path: str) -> bool:
        """Check whether an existing path has its write permission removed."""
        return os.path.exists(self._native(path)) and not self.can_write(path)

    def set_read_only(self, path: str) -> bool:
        """Remove every write permission bit from the path."""
        native = self._native(path)
        try:
            mode = stat.S_IMODE(os.stat(native).st_mode)
            os.chmod(native, mode & ~_WRITE_BITS)
        except OSError as exc:
            logger.debug("Could not make %s read-only: %s", path, exc)
            return False
        return True

    def create_temp_file(
        self,
        prefix: str,
        suffix: str,
        *,
        delete_on_exit: bool = False,
        in_temp_dir: bool = False,
    ) -> str:
        """Create a unique empty file next to ``prefix`` or in the temp dir."""
        directory, name = os.path.split(self._native(prefix))
        if in_temp_dir:
            directory = tempfile.gettempdir()
        with os_errors_translated(prefix):
            fd, created = tempfile.mkstemp(
                suffix=suffix,
                prefix=name,
                dir=directory or os.curdir,
            )
        os.close(fd)
        if delete_on_exit:
            atexit.register(_remove_quietly, created)
        logger.debug("Created temporary file %s", created)
        return self._qualify(prefix, created)

    def _native(self, path: str) -> str:
        """Return the operating system path for ``path``."""
        native = strip_scheme(path, self.scheme)
        if native.startswith("~"):
            native = os.path.expanduser(native)
        return native

    def _trimmed(self, path: str) -> str:
        """Return the native path without trailing separators (roots kept)."""
        native = self._native(path)
        return native.rstrip(_SEPARATORS) or native

    def _qualify(self, original: str, native: str) -> str:
        """Re-apply the ``file:`` prefix when ``original`` carried it."""
        if has_scheme(original, self.scheme):
            return join_scheme(self.scheme, native)
        return native


def _remove_quietly(native: str) -> None:
    """Remove a temporary file at interpreter exit, ignoring failures."""
    try:
        os.remove(native)
    except OSError:
        pass
