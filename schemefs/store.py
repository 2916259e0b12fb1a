"""Dispatch facade and composite file operations.

``FileStore`` is the surface callers use instead of talking to providers
directly. Each primitive resolves the provider owning its (first) path through
a :class:`~schemefs.registry.ProviderRegistry` and forwards the call
unchanged; results and errors pass through untouched.

The composite operations (``delete_recursive``, ``create_directories``,
``copy``, ``try_delete``) are written only in terms of those primitives, so
they behave the same on every provider.

Composite operations that list and then act on a directory are not atomic:
entries added or removed concurrently may be missed or reported as missing.
Callers that need atomicity must serialise access to the path themselves.

Example:
    >>> from schemefs import FileStore
    >>> from schemefs.factory import create_default_registry
    >>>
    >>> store = FileStore(create_default_registry())
    >>> store.create_directories("mem:/x")
    >>> store.create_file("mem:/x/y.txt")
    True
    >>> store.list_files("mem:/x")
    ['mem:/x/y.txt']
    >>> store.delete_recursive("mem:/x")
    >>> store.exists("mem:/x")
    False

"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .interfaces import (
    DEFAULT_CHUNK_SIZE,
    BackendMismatchError,
    InvalidOperationError,
)
from .utils import copy_stream

if TYPE_CHECKING:
    from typing import BinaryIO

    from .interfaces import FileProvider
    from .registry import ProviderRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeleteOutcome:
    """Result of a best-effort delete.

    Truthy when the path was deleted; otherwise ``error`` holds the failure.
    """

    path: str
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        """Whether the delete succeeded."""
        return self.error is None

    def __bool__(self) -> bool:
        return self.ok


class FileStore:
    """Single dispatch surface over the providers of a registry."""

    def __init__(self, registry: ProviderRegistry) -> None:
        """Initialise the store.

        Args:
            registry: Registry used to resolve the provider of every path.

        """
        self._registry = registry

    @property
    def registry(self) -> ProviderRegistry:
        """Registry used for path resolution."""
        return self._registry

    def resolve(self, path: str) -> FileProvider:
        """Return the provider that owns ``path``."""
        return self._registry.resolve(path)

    # primitive operations

    def exists(self, path: str) -> bool:
        """Check if a file or directory exists."""
        return self.resolve(path).exists(path)

    def create_directory(self, path: str) -> None:
        """Create a directory (the parent directory must already exist)."""
        self.resolve(path).create_directory(path)

    def create_file(self, path: str) -> bool:
        """Create a new empty file.

        Returns:
            True if the file was created, False if it already existed.

        """
        return self.resolve(path).create_file(path)

    def delete(self, path: str) -> None:
        """Delete a file or an empty directory."""
        self.resolve(path).delete(path)

    def get_canonical_path(self, path: str) -> str:
        """Return the normalised path."""
        return self.resolve(path).get_canonical_path(path)

    def get_parent(self, path: str) -> str | None:
        """Return the parent directory, or None if there is none."""
        return self.resolve(path).get_parent(path)

    def is_absolute(self, path: str) -> bool:
        """Check whether the path is absolute."""
        return self.resolve(path).is_absolute(path)

    def move_to(self, old: str, new: str, *, atomic_replace: bool = False) -> None:
        """Rename a file or directory.

        Both paths must belong to the same provider; moving across providers
        is not supported.

        Raises:
            BackendMismatchError: If ``old`` and ``new`` resolve to different
                providers.

        """
        provider = self.resolve(old)
        if self.resolve(new) is not provider:
            raise BackendMismatchError(old, new)
        provider.move_to(old, new, atomic_replace=atomic_replace)

    def get_name(self, path: str) -> str:
        """Return the last element of the path."""
        return self.resolve(path).get_name(path)

    def list_files(self, path: str) -> list[str]:
        """Return the fully qualified paths of the entries of a directory."""
        return self.resolve(path).list_files(path)

    def last_modified(self, path: str) -> int:
        """Return the last modification time in milliseconds since the epoch."""
        return self.resolve(path).last_modified(path)

    def size(self, path: str) -> int:
        """Return the size of a file in bytes."""
        return self.resolve(path).size(path)

    def is_directory(self, path: str) -> bool:
        """Check whether the path is a directory."""
        return self.resolve(path).is_directory(path)

    def open_handle(self, path: str, mode: str = "r") -> BinaryIO:
        """Open a random access handle (modes ``r``, ``rw``, ``rws``, ``rwd``)."""
        return self.resolve(path).open_handle(path, mode)

    def new_input_stream(self, path: str) -> BinaryIO:
        """Open a stream reading the file."""
        return self.resolve(path).new_input_stream(path)

    def new_output_stream(self, path: str, *, append: bool = False) -> BinaryIO:
        """Open a stream writing the file, truncating it unless ``append``."""
        return self.resolve(path).new_output_stream(path, append=append)

    def can_write(self, path: str) -> bool:
        """Check whether the file is writable."""
        return self.resolve(path).can_write(path)

    def is_read_only(self, path: str) -> bool:
        """Check whether the file is read-only."""
        return self.resolve(path).is_read_only(path)

    def set_read_only(self, path: str) -> bool:
        """Disable writing; return True on success."""
        return self.resolve(path).set_read_only(path)

    def unwrap(self, path: str) -> str:
        """Return the path without the prefixes of wrapping providers."""
        return self.resolve(path).unwrap(path)

    def file_starts_with(self, path: str, prefix: str) -> bool:
        """Check whether ``path`` starts with ``prefix``."""
        return self.resolve(path).file_starts_with(path, prefix)

    def create_temp_file(
        self,
        prefix: str,
        suffix: str,
        *,
        delete_on_exit: bool = False,
        in_temp_dir: bool = False,
    ) -> str:
        """Create a new empty temporary file and return its path.

        Args:
            prefix: Name prefix, including the directory when required. Also
                selects the provider.
            suffix: Name suffix.
            delete_on_exit: Delete the file when the interpreter exits.
            in_temp_dir: Store the file in the temporary directory.

        """
        return self.resolve(prefix).create_temp_file(
            prefix,
            suffix,
            delete_on_exit=delete_on_exit,
            in_temp_dir=in_temp_dir,
        )

    # composite operations

    def delete_recursive(self, path: str, try_only: bool = False) -> None:
        """Delete a file, or a directory with everything below it.

        Entries are deleted before the directory containing them. Missing
        paths are ignored.

        Args:
            path: File or directory to delete.
            try_only: Ignore failures to delete individual entries. Failures
                to list a directory are still raised.

        """
        if not self.exists(path):
            return
        if self.is_directory(path):
            for child in self.list_files(path):
                self.delete_recursive(child, try_only)
        if try_only:
            self.attempt_delete(path)
        else:
            logger.debug("Deleting %s", path)
            self.delete(path)

    def create_directories(self, path: str | None) -> None:
        """Create a directory and every missing parent directory.

        Does nothing if ``path`` is None or already exists.

        Raises:
            InvalidOperationError: If the provider reports a path as its own
                parent (directly or through a cycle).

        """
        missing: list[str] = []
        seen: set[str] = set()
        current = path
        while current is not None and not self.exists(current):
            if current in seen:
                raise InvalidOperationError.parent_loop(current)
            seen.add(current)
            missing.append(current)
            current = self.get_parent(current)

        for directory in reversed(missing):
            logger.debug("Creating directory %s", directory)
            self.create_directory(directory)

    def copy(
        self,
        original: str,
        target: str,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> int:
        """Copy the content of ``original`` into ``target``.

        ``target`` is truncated first; its parent directory must exist. Both
        streams are closed before returning, also on failure.

        Returns:
            Number of bytes copied.

        Raises:
            InvalidOperationError: If both paths name the same file of the
                same provider.

        """
        provider = self.resolve(original)
        if self.resolve(target) is provider:
            canonical = provider.get_canonical_path(original)
            if canonical == provider.get_canonical_path(target):
                raise InvalidOperationError.copy_onto_itself(target)
        with self.new_input_stream(original) as source:
            with self.new_output_stream(target, append=False) as sink:
                copied = copy_stream(source, sink, chunk_size)
        logger.debug("Copied %d bytes from %s to %s", copied, original, target)
        return copied

    def attempt_delete(self, path: str) -> DeleteOutcome:
        """Delete a file or empty directory without raising.

        Returns:
            A truthy DeleteOutcome on success, or a falsy one carrying the
            failure.

        """
        try:
            self.delete(path)
        except Exception as exc:  # noqa: BLE001
            logger.debug("Best-effort delete of %s failed: %s", path, exc)
            return DeleteOutcome(path, exc)
        return DeleteOutcome(path)

    def try_delete(self, path: str) -> bool:
        """Try to delete a file or empty directory; never raises.

        Returns:
            True if the path was deleted.

        """
        return self.attempt_delete(path).ok

    def __repr__(self) -> str:
        return f"FileStore({self._registry!r})"


_default_store: FileStore | None = None
_default_lock = threading.Lock()


def get_default_store() -> FileStore:
    """Return the process-wide store, building it on first use.

    The store uses :func:`schemefs.factory.create_default_registry`.
    """
    global _default_store  # noqa: PLW0603
    with _default_lock:
        if _default_store is None:
            from .factory import create_default_registry

            _default_store = FileStore(create_default_registry())
        return _default_store


def set_default_store(store: FileStore | None) -> None:
    """Replace the process-wide store; None rebuilds it on next use."""
    global _default_store  # noqa: PLW0603
    with _default_lock:
        _default_store = store


def register_provider(provider: FileProvider) -> None:
    """Register a provider with the process-wide store's registry.

    Example:
        >>> from schemefs import MemoryFileProvider, register_provider
        >>> register_provider(MemoryFileProvider(scheme="cache"))

    """
    get_default_store().registry.register(provider)


def resolve_provider(path: str) -> FileProvider:
    """Return the provider of ``path`` in the process-wide store."""
    return get_default_store().resolve(path)
