"""Wrapping providers.

A wrapping provider claims paths of the form ``<scheme>:<inner path>`` and
serves them by delegating to the provider that owns the inner path, adding a
capability on the way. Wrappers nest (``ro:mem:/data``) and ``unwrap``
returns the innermost real path.

Example:
    >>> from schemefs import (
    ...     DiskFileProvider,
    ...     MemoryFileProvider,
    ...     ProviderRegistry,
    ...     ReadOnlyFileProvider,
    ... )
    >>> registry = ProviderRegistry(DiskFileProvider())
    >>> registry.register(MemoryFileProvider(scheme="mem"))
    >>> registry.register(ReadOnlyFileProvider(registry))
    >>> registry.resolve("ro:mem:/data").unwrap("ro:mem:/data")
    'mem:/data'

"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .interfaces import BackendMismatchError, FileProvider, PermissionDeniedError
from .schemes import is_valid_scheme, join_scheme, strip_scheme
from .utils import validate_handle_mode

if TYPE_CHECKING:
    from typing import BinaryIO

    from .registry import ProviderRegistry


class FileProviderWrapper(FileProvider):
    """Provider that forwards every operation to the wrapped path's provider.

    Subclasses override the operations whose behaviour they change.
    """

    def __init__(self, registry: ProviderRegistry, scheme: str) -> None:
        """Initialise the wrapper.

        Args:
            registry: Registry used to resolve the wrapped paths.
            scheme: Scheme claimed by this wrapper.

        Raises:
            ValueError: If ``scheme`` is not a valid scheme token.

        """
        if not is_valid_scheme(scheme):
            msg = f"Invalid provider scheme: {scheme!r}"
            raise ValueError(msg)
        self.scheme = scheme
        self._registry = registry

    def unwrap(self, path: str) -> str:
        """Return the innermost real path."""
        provider, inner = self._delegate(path)
        return provider.unwrap(inner)

    def file_starts_with(self, path: str, prefix: str) -> bool:
        """Compare the wrapped paths."""
        provider, inner = self._delegate(path)
        return provider.file_starts_with(inner, self._inner(prefix))

    def exists(self, path: str) -> bool:
        """Check whether the wrapped path exists."""
        provider, inner = self._delegate(path)
        return provider.exists(inner)

    def create_directory(self, path: str) -> None:
        """Create the wrapped directory."""
        provider, inner = self._delegate(path)
        provider.create_directory(inner)

    def create_file(self, path: str) -> bool:
        """Create the wrapped file."""
        provider, inner = self._delegate(path)
        return provider.create_file(inner)

    def delete(self, path: str) -> None:
        """Delete the wrapped path."""
        provider, inner = self._delegate(path)
        provider.delete(inner)

    def get_canonical_path(self, path: str) -> str:
        """Return the canonical wrapped path, wrapped again."""
        provider, inner = self._delegate(path)
        return self._wrap(provider.get_canonical_path(inner))

    def get_parent(self, path: str) -> str | None:
        """Return the wrapped parent, or None at the inner root."""
        provider, inner = self._delegate(path)
        parent = provider.get_parent(inner)
        return None if parent is None else self._wrap(parent)

    def is_absolute(self, path: str) -> bool:
        """Check whether the wrapped path is absolute."""
        provider, inner = self._delegate(path)
        return provider.is_absolute(inner)

    def move_to(self, old: str, new: str, *, atomic_replace: bool = False) -> None:
        """Rename within the wrapped provider.

        Raises:
            BackendMismatchError: If the wrapped paths belong to different
                providers.

        """
        provider, inner_old = self._delegate(old)
        target, inner_new = self._delegate(new)
        if target is not provider:
            raise BackendMismatchError(old, new)
        provider.move_to(inner_old, inner_new, atomic_replace=atomic_replace)

    def get_name(self, path: str) -> str:
        """Return the last segment of the wrapped path."""
        provider, inner = self._delegate(path)
        return provider.get_name(inner)

    def list_files(self, path: str) -> list[str]:
        """List the wrapped directory, re-wrapping every entry."""
        provider, inner = self._delegate(path)
        return [self._wrap(child) for child in provider.list_files(inner)]

    def last_modified(self, path: str) -> int:
        """Return the modification time of the wrapped path."""
        provider, inner = self._delegate(path)
        return provider.last_modified(inner)

    def size(self, path: str) -> int:
        """Return the size of the wrapped file."""
        provider, inner = self._delegate(path)
        return provider.size(inner)

    def is_directory(self, path: str) -> bool:
        """Check whether the wrapped path is a directory."""
        provider, inner = self._delegate(path)
        return provider.is_directory(inner)

    def open_handle(self, path: str, mode: str = "r") -> BinaryIO:
        """Open a handle on the wrapped file."""
        provider, inner = self._delegate(path)
        return provider.open_handle(inner, mode)

    def new_input_stream(self, path: str) -> BinaryIO:
        """Open the wrapped file for reading."""
        provider, inner = self._delegate(path)
        return provider.new_input_stream(inner)

    def new_output_stream(self, path: str, *, append: bool = False) -> BinaryIO:
        """Open the wrapped file for writing."""
        provider, inner = self._delegate(path)
        return provider.new_output_stream(inner, append=append)

    def can_write(self, path: str) -> bool:
        """Check whether the wrapped path is writable."""
        provider, inner = self._delegate(path)
        return provider.can_write(inner)

    def is_read_only(self, path: str) -> bool:
        """Check whether the wrapped path is read-only."""
        provider, inner = self._delegate(path)
        return provider.is_read_only(inner)

    def set_read_only(self, path: str) -> bool:
        """Make the wrapped path read-only."""
        provider, inner = self._delegate(path)
        return provider.set_read_only(inner)

    def create_temp_file(
        self,
        prefix: str,
        suffix: str,
        *,
        delete_on_exit: bool = False,
        in_temp_dir: bool = False,
    ) -> str:
        """Create a temporary file through the wrapped provider."""
        provider, inner = self._delegate(prefix)
        created = provider.create_temp_file(
            inner,
            suffix,
            delete_on_exit=delete_on_exit,
            in_temp_dir=in_temp_dir,
        )
        return self._wrap(created)

    def _inner(self, path: str) -> str:
        """Return the wrapped path."""
        return strip_scheme(path, self.scheme)

    def _wrap(self, inner: str) -> str:
        """Return ``inner`` prefixed with this wrapper's scheme."""
        return join_scheme(self.scheme, inner)

    def _delegate(self, path: str) -> tuple[FileProvider, str]:
        """Return the provider owning the wrapped path and the wrapped path."""
        inner = self._inner(path)
        return self._registry.resolve(inner), inner


class ReadOnlyFileProvider(FileProviderWrapper):
    """Wrapper that serves reads and rejects every modification.

    ``ro:/data/db.bin`` reads ``/data/db.bin``; creating, deleting, renaming
    or opening it for writing raises :class:`PermissionDeniedError`.
    """

    def __init__(self, registry: ProviderRegistry, scheme: str = "ro") -> None:
        """Initialise a read-only wrapper claiming ``scheme``."""
        super().__init__(registry, scheme)

    def create_directory(self, path: str) -> None:
        """Reject directory creation."""
        raise PermissionDeniedError(path, reason="Read-only provider")

    def create_file(self, path: str) -> bool:
        """Reject file creation."""
        raise PermissionDeniedError(path, reason="Read-only provider")

    def delete(self, path: str) -> None:
        """Reject deletion."""
        raise PermissionDeniedError(path, reason="Read-only provider")

    def move_to(self, old: str, new: str, *, atomic_replace: bool = False) -> None:
        """Reject renames."""
        raise PermissionDeniedError(old, reason="Read-only provider")

    def open_handle(self, path: str, mode: str = "r") -> BinaryIO:
        """Open a read-only handle; writable modes are rejected."""
        validate_handle_mode(mode, path)
        if mode != "r":
            raise PermissionDeniedError(path, reason="Read-only provider")
        return super().open_handle(path, mode)

    def new_output_stream(self, path: str, *, append: bool = False) -> BinaryIO:
        """Reject writing."""
        raise PermissionDeniedError(path, reason="Read-only provider")

    def can_write(self, path: str) -> bool:
        """Nothing is writable through this wrapper."""
        return False

    def is_read_only(self, path: str) -> bool:
        """Every existing path is read-only."""
        return self.exists(path)

    def set_read_only(self, path: str) -> bool:
        """Report success for existing paths; they are read-only already."""
        return self.exists(path)

    def create_temp_file(
        self,
        prefix: str,
        suffix: str,
        *,
        delete_on_exit: bool = False,
        in_temp_dir: bool = False,
    ) -> str:
        """Reject temporary file creation."""
        raise PermissionDeniedError(prefix, reason="Read-only provider")
