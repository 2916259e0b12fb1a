"""In-memory provider.

``MemoryFileProvider`` keeps a tree of files and directories in a dict keyed
by normalised POSIX paths. Paths look like ``mem:/data/file.txt``; the part
after the scheme is always treated as absolute, so ``mem:data`` and
``mem:/data`` name the same entry. The root ``mem:/`` always exists.

Handles are ``io.BytesIO`` snapshots that write their content back to the tree
on ``flush()`` and ``close()`` (and after every write for ``rws``/``rwd``).
A handle whose file was deleted in the meantime raises ``NotFoundError``
instead of recreating it.

Example:

    >>> from schemefs import MemoryFileProvider
    >>> mem = MemoryFileProvider(scheme="mem")
    >>> mem.create_directory("mem:/data")
    >>> with mem.new_output_stream("mem:/data/a.txt") as out:
    ...     out.write(b"hello")
    5
    >>> mem.list_files("mem:/data")
    ['mem:/data/a.txt']

"""

from __future__ import annotations

import io
import posixpath
import secrets
import threading
from dataclasses import dataclass, field

from .interfaces import (
    AlreadyExistsError,
    DirectoryNotEmptyError,
    FileProvider,
    InvalidOperationError,
    NotFoundError,
    PermissionDeniedError,
)
from .schemes import is_valid_scheme, join_scheme, strip_scheme
from .utils import current_time_millis, validate_handle_mode

ROOT = "/"


@dataclass
class _MemoryNode:
    """A file or directory stored in memory."""

    is_dir: bool
    data: bytearray = field(default_factory=bytearray)
    last_modified: int = field(default_factory=current_time_millis)
    read_only: bool = False


class MemoryHandle(io.BytesIO):
    """Binary handle over a snapshot of an in-memory file."""

    def __init__(
        self,
        provider: MemoryFileProvider,
        key: str,
        data: bytes,
        *,
        writable: bool,
        append: bool = False,
        sync: bool = False,
    ) -> None:
        super().__init__(data)
        self._provider = provider
        self._key = key
        self._writable = writable
        self._append = append
        self._sync = sync
        self._dirty = False
        if append:
            self.seek(0, io.SEEK_END)

    def writable(self) -> bool:
        if not self._writable:
            return False
        return super().writable()

    def write(self, data) -> int:  # type: ignore[override]
        if not self._writable:
            raise io.UnsupportedOperation("write")
        if self._append:
            self.seek(0, io.SEEK_END)
        written = super().write(data)
        self._dirty = True
        if self._sync:
            self.flush()
        return written

    def truncate(self, size: int | None = None) -> int:
        if not self._writable:
            raise io.UnsupportedOperation("truncate")
        result = super().truncate(size)
        self._dirty = True
        if self._sync:
            self.flush()
        return result

    def flush(self) -> None:
        super().flush()
        if self._dirty:
            self._dirty = False
            self._provider._commit(self._key, self.getvalue())

    def close(self) -> None:
        if self.closed:
            return
        try:
            self.flush()
        finally:
            super().close()


class MemoryFileProvider(FileProvider):
    """Provider keeping files and directories in process memory."""

    def __init__(self, scheme: str = "mem") -> None:
        """Initialise an empty tree claimed by ``scheme``.

        Raises:
            ValueError: If ``scheme`` is not a valid scheme token.

        """
        if not is_valid_scheme(scheme):
            msg = f"Invalid provider scheme: {scheme!r}"
            raise ValueError(msg)
        self.scheme = scheme
        self._nodes: dict[str, _MemoryNode] = {ROOT: _MemoryNode(is_dir=True)}
        self._lock = threading.RLock()

    def exists(self, path: str) -> bool:
        """Check whether an entry exists."""
        with self._lock:
            return self._key(path) in self._nodes

    def create_directory(self, path: str) -> None:
        """Create a directory below an existing directory."""
        key = self._key(path)
        with self._lock:
            node = self._nodes.get(key)
            if node is not None:
                if node.is_dir:
                    return
                raise InvalidOperationError.cannot_overwrite_file_with_directory(path)
            self._require_parent_directory(key, path)
            self._nodes[key] = _MemoryNode(is_dir=True)

    def create_file(self, path: str) -> bool:
        """Create an empty file; False if the entry already exists."""
        key = self._key(path)
        with self._lock:
            if key in self._nodes:
                return False
            self._require_parent_directory(key, path)
            self._nodes[key] = _MemoryNode(is_dir=False)
            return True

    def delete(self, path: str) -> None:
        """Delete a file or an empty directory."""
        key = self._key(path)
        with self._lock:
            node = self._nodes.get(key)
            if node is None:
                raise NotFoundError(path)
            if key == ROOT:
                raise PermissionDeniedError(path, reason="Cannot delete the root")
            if node.read_only:
                raise PermissionDeniedError(path, reason="File is read-only")
            if node.is_dir and self._children(key):
                raise DirectoryNotEmptyError(path)
            del self._nodes[key]

    def get_canonical_path(self, path: str) -> str:
        """Return ``scheme:`` followed by the normalised absolute path."""
        return self._path(self._key(path))

    def get_parent(self, path: str) -> str | None:
        """Return the parent directory, or None for the root."""
        key = self._key(path)
        if key == ROOT:
            return None
        return self._path(posixpath.dirname(key))

    def is_absolute(self, path: str) -> bool:
        """Memory paths are always absolute."""
        return True

    def move_to(self, old: str, new: str, *, atomic_replace: bool = False) -> None:
        """Rename an entry, moving the whole subtree of a directory."""
        source = self._key(old)
        target = self._key(new)
        with self._lock:
            if source not in self._nodes:
                raise NotFoundError(old)
            if source == target:
                return
            if source == ROOT:
                raise PermissionDeniedError(old, reason="Cannot move the root")
            if target.startswith(source + "/"):
                msg = "Cannot move a directory into itself"
                raise InvalidOperationError(msg, path=new)
            existing = self._nodes.get(target)
            if existing is not None:
                if not atomic_replace:
                    raise AlreadyExistsError(new)
                if existing.is_dir and self._children(target):
                    raise DirectoryNotEmptyError(new)
            self._require_parent_directory(target, new)

            moved = [
                key
                for key in self._nodes
                if key == source or key.startswith(source + "/")
            ]
            for key in moved:
                self._nodes[target + key[len(source) :]] = self._nodes.pop(key)

    def get_name(self, path: str) -> str:
        """Return the last path segment (empty for the root)."""
        return posixpath.basename(self._key(path))

    def list_files(self, path: str) -> list[str]:
        """Return the fully qualified paths of the entries of a directory."""
        key = self._key(path)
        with self._lock:
            node = self._nodes.get(key)
            if node is None:
                raise NotFoundError(path)
            if not node.is_dir:
                raise InvalidOperationError.not_a_directory(path)
            return [self._path(child) for child in sorted(self._children(key))]

    def last_modified(self, path: str) -> int:
        """Return the last write time in milliseconds since the epoch."""
        return self._node(path).last_modified

    def size(self, path: str) -> int:
        """Return the file size in bytes (0 for directories)."""
        return len(self._node(path).data)

    def is_directory(self, path: str) -> bool:
        """Check whether the path is an existing directory."""
        with self._lock:
            node = self._nodes.get(self._key(path))
        return node is not None and node.is_dir

    def open_handle(self, path: str, mode: str = "r") -> MemoryHandle:
        """Open a random access handle; writable modes create the file."""
        validate_handle_mode(mode, path)
        if mode == "r":
            return self._open(path, writable=False)
        return self._open(path, writable=True, sync=mode in ("rws", "rwd"))

    def new_input_stream(self, path: str) -> MemoryHandle:
        """Open the file for reading."""
        return self._open(path, writable=False)

    def new_output_stream(self, path: str, *, append: bool = False) -> MemoryHandle:
        """Open the file for writing, truncating unless ``append``."""
        return self._open(path, writable=True, append=append, truncate=not append)

    def can_write(self, path: str) -> bool:
        """Check whether the entry exists and is not read-only."""
        with self._lock:
            node = self._nodes.get(self._key(path))
        return node is not None and not node.read_only

    def is_read_only(self, path: str) -> bool:
        """Check whether the entry exists and is read-only."""
        with self._lock:
            node = self._nodes.get(self._key(path))
        return node is not None and node.read_only

    def set_read_only(self, path: str) -> bool:
        """Mark an existing entry read-only."""
        with self._lock:
            node = self._nodes.get(self._key(path))
            if node is None:
                return False
            node.read_only = True
            return True

    def create_temp_file(
        self,
        prefix: str,
        suffix: str,
        *,
        delete_on_exit: bool = False,
        in_temp_dir: bool = False,
    ) -> str:
        """Create a unique empty file named ``prefix`` + random token + ``suffix``.

        A prefix ending in ``/`` places the file inside that directory.
        The tree never outlives the interpreter and has no temporary
        directory, so ``delete_on_exit`` and ``in_temp_dir`` have no effect.
        """
        base = ROOT + strip_scheme(prefix, self.scheme).lstrip("/")
        with self._lock:
            while True:
                key = posixpath.normpath(f"{base}{secrets.token_hex(6)}{suffix}")
                if key not in self._nodes:
                    break
            self._require_parent_directory(key, prefix)
            self._nodes[key] = _MemoryNode(is_dir=False)
        return self._path(key)

    def _open(
        self,
        path: str,
        *,
        writable: bool,
        append: bool = False,
        truncate: bool = False,
        sync: bool = False,
    ) -> MemoryHandle:
        """Open a handle on a file, creating it when opened for writing."""
        key = self._key(path)
        with self._lock:
            node = self._nodes.get(key)
            if node is not None and node.is_dir:
                raise InvalidOperationError.cannot_open_directory(path)
            if not writable:
                if node is None:
                    raise NotFoundError(path)
                return MemoryHandle(self, key, bytes(node.data), writable=False)

            if node is None:
                self._require_parent_directory(key, path)
                node = self._nodes[key] = _MemoryNode(is_dir=False)
            elif node.read_only:
                raise PermissionDeniedError(path, reason="File is read-only")
            if truncate:
                node.data = bytearray()
                node.last_modified = current_time_millis()
            return MemoryHandle(
                self,
                key,
                bytes(node.data),
                writable=True,
                append=append,
                sync=sync,
            )

    def _commit(self, key: str, data: bytes) -> None:
        """Store the content written through a handle.

        Raises:
            NotFoundError: If the file was deleted while the handle was open.
            InvalidOperationError: If a directory replaced the file meanwhile.

        """
        with self._lock:
            node = self._nodes.get(key)
            if node is None:
                raise NotFoundError(self._path(key))
            if node.is_dir:
                raise InvalidOperationError.cannot_open_directory(self._path(key))
            node.data = bytearray(data)
            node.last_modified = current_time_millis()

    def _node(self, path: str) -> _MemoryNode:
        """Return the node for ``path``.

        Raises:
            NotFoundError: If the entry does not exist.

        """
        with self._lock:
            node = self._nodes.get(self._key(path))
        if node is None:
            raise NotFoundError(path)
        return node

    def _children(self, key: str) -> list[str]:
        """Return the keys of the direct children of a directory key."""
        prefix = key.rstrip("/") + "/"
        return [
            candidate
            for candidate in self._nodes
            if candidate != key
            and candidate.startswith(prefix)
            and "/" not in candidate[len(prefix) :]
        ]

    def _require_parent_directory(self, key: str, path: str) -> None:
        """Ensure the parent of ``key`` exists and is a directory."""
        parent = posixpath.dirname(key)
        node = self._nodes.get(parent)
        if node is None:
            raise NotFoundError(self._path(parent))
        if not node.is_dir:
            raise InvalidOperationError.parent_path_not_directory(path)

    def _key(self, path: str) -> str:
        """Return the normalised absolute key for ``path``."""
        rest = strip_scheme(path, self.scheme)
        return posixpath.normpath(ROOT + rest.lstrip("/"))

    def _path(self, key: str) -> str:
        """Return the fully qualified path for ``key``."""
        return join_scheme(self.scheme, key)
