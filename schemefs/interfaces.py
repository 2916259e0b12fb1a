"""Core interfaces and error vocabulary for file providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import BinaryIO

from .schemes import has_scheme

DEFAULT_CHUNK_SIZE = 8192

HANDLE_MODES = ("r", "rw", "rws", "rwd")


class FileBackendError(RuntimeError):
    """Base exception for provider operations."""

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
    ) -> None:
        """Initialise the base error with an optional path context."""
        detail = message if path is None else ": ".join((message, str(path)))
        super().__init__(detail)
        self.message = message
        self.path = path


class NotFoundError(FileBackendError):
    """Raised when an expected file or directory is missing."""

    def __init__(self, path: str) -> None:
        """Create a not-found error for the provided path."""
        super().__init__("Path not found", path=path)


class AlreadyExistsError(FileBackendError):
    """Raised when attempting to create a resource that already exists."""

    def __init__(self, path: str, *, reason: str | None = None) -> None:
        """Create an already-exists error with an optional reason."""
        super().__init__(reason or "Path already exists", path=path)


class PermissionDeniedError(FileBackendError):
    """Raised when a provider rejects an operation due to access rights."""

    def __init__(self, path: str, *, reason: str | None = None) -> None:
        """Create a permission error with an optional reason."""
        super().__init__(reason or "Permission denied", path=path)


class BackendMismatchError(FileBackendError):
    """Raised when the paths of a binary operation belong to different providers."""

    def __init__(self, source: str, target: str) -> None:
        """Create a mismatch error naming both paths."""
        super().__init__(
            f"Cannot move across providers (target {target!r})",
            path=source,
        )
        self.target = target


class BackendIOError(FileBackendError):
    """Generic provider-level I/O failure."""


class InvalidOperationError(FileBackendError):
    """Raised when an operation is not allowed for the given path."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        """Initialise an invalid operation error scoped to a path."""
        super().__init__(message, path=path)

    @classmethod
    def unsupported_mode(cls, mode: str, path: str) -> InvalidOperationError:
        """Return an error for an unknown handle access mode."""
        allowed = ", ".join(HANDLE_MODES)
        return cls(f"Unsupported mode {mode!r} (expected one of {allowed})", path=path)

    @classmethod
    def cannot_open_directory(cls, path: str) -> InvalidOperationError:
        """Return an error indicating directories cannot be opened as files."""
        return cls("Cannot open directory", path=path)

    @classmethod
    def cannot_overwrite_file_with_directory(
        cls,
        path: str,
    ) -> InvalidOperationError:
        """Return an error describing a file-to-directory overwrite attempt."""
        return cls("Cannot overwrite file with directory", path=path)

    @classmethod
    def parent_path_not_directory(cls, path: str) -> InvalidOperationError:
        """Return an error when a parent segment is not a directory."""
        return cls("Parent path is not a directory", path=path)

    @classmethod
    def not_a_directory(cls, path: str) -> InvalidOperationError:
        """Return an error when a listing targets a file."""
        return cls("Path is not a directory", path=path)

    @classmethod
    def copy_onto_itself(cls, path: str) -> InvalidOperationError:
        """Return an error when the source and target of a copy are one file."""
        return cls("Cannot copy a file onto itself", path=path)

    @classmethod
    def parent_loop(cls, path: str) -> InvalidOperationError:
        """Return an error when a provider reports a path as its own parent."""
        return cls("Provider returned a parent equal to the path itself", path=path)


class DirectoryNotEmptyError(InvalidOperationError):
    """Raised when deleting a directory that still has entries."""

    def __init__(self, path: str) -> None:
        """Create a not-empty error for the provided directory."""
        super().__init__("Directory not empty", path=path)


class FileProvider(ABC):
    """Capability contract every storage provider implements.

    A provider owns every path that starts with ``scheme + ":"``. The default
    provider of a registry additionally owns every path no other provider
    claims. Failures are reported with the exceptions of this module.
    """

    scheme: str = ""

    def accepts(self, path: str) -> bool:
        """Return True if this provider claims ``path``."""
        return has_scheme(path, self.scheme)

    def unwrap(self, path: str) -> str:
        """Return the innermost real path (no wrapper prefixes)."""
        return path

    def file_starts_with(self, path: str, prefix: str) -> bool:
        """Check whether ``path`` starts with ``prefix``."""
        return path.startswith(prefix)

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Check whether a file or directory exists."""

    @abstractmethod
    def create_directory(self, path: str) -> None:
        """Create a directory; its parent must already exist."""

    @abstractmethod
    def create_file(self, path: str) -> bool:
        """Create an empty file.

        Returns:
            True if the file was created, False if it already existed.

        """

    @abstractmethod
    def delete(self, path: str) -> None:
        """Delete a file or an empty directory."""

    @abstractmethod
    def get_canonical_path(self, path: str) -> str:
        """Return the normalised form of ``path``."""

    @abstractmethod
    def get_parent(self, path: str) -> str | None:
        """Return the parent path, or None when there is none."""

    @abstractmethod
    def is_absolute(self, path: str) -> bool:
        """Check whether ``path`` is absolute."""

    @abstractmethod
    def move_to(self, old: str, new: str, *, atomic_replace: bool = False) -> None:
        """Rename ``old`` to ``new``.

        Args:
            old: Existing path.
            new: Target path, owned by the same provider.
            atomic_replace: Replace an existing target instead of failing.

        """

    @abstractmethod
    def get_name(self, path: str) -> str:
        """Return the last segment of ``path``."""

    @abstractmethod
    def list_files(self, path: str) -> list[str]:
        """Return the fully qualified paths of the entries of a directory."""

    @abstractmethod
    def last_modified(self, path: str) -> int:
        """Return the modification time in milliseconds since the epoch."""

    @abstractmethod
    def size(self, path: str) -> int:
        """Return the size of a file in bytes."""

    @abstractmethod
    def is_directory(self, path: str) -> bool:
        """Check whether ``path`` is an existing directory."""

    @abstractmethod
    def open_handle(self, path: str, mode: str = "r") -> BinaryIO:
        """Open a random access handle.

        Args:
            path: Target file.
            mode: ``r``, ``rw``, ``rws`` (sync content and metadata) or
                ``rwd`` (sync content). Writable modes create the file.

        """

    @abstractmethod
    def new_input_stream(self, path: str) -> BinaryIO:
        """Open a binary stream reading from the start of a file."""

    @abstractmethod
    def new_output_stream(self, path: str, *, append: bool = False) -> BinaryIO:
        """Open a binary stream writing to a file, truncating unless ``append``."""

    @abstractmethod
    def can_write(self, path: str) -> bool:
        """Check whether the path may be written."""

    @abstractmethod
    def is_read_only(self, path: str) -> bool:
        """Check whether an existing path is read-only."""

    @abstractmethod
    def set_read_only(self, path: str) -> bool:
        """Mark a path read-only; return True on success."""

    @abstractmethod
    def create_temp_file(
        self,
        prefix: str,
        suffix: str,
        *,
        delete_on_exit: bool = False,
        in_temp_dir: bool = False,
    ) -> str:
        """Create a new empty file with a unique name and return its path.

        Args:
            prefix: Name prefix, including the directory when required.
            suffix: Name suffix.
            delete_on_exit: Remove the file when the interpreter exits.
            in_temp_dir: Place the file in the temporary directory.

        """

    def __repr__(self) -> str:
        """Return a short representation naming the scheme."""
        return f"{type(self).__name__}(scheme={self.scheme!r})"
