"""Scheme-dispatched file access for multiple storage providers.

This package lets callers work with plain path strings while the storage
behind them varies. A path's scheme prefix (``mem:``, ``ro:``, ``file:``)
selects the provider that serves it; paths without a scheme go to the local
disk.

Core Components:
    - FileProvider: Abstract capability contract every provider implements
    - ProviderRegistry: Ordered scheme-to-provider resolution with a default
    - FileStore: Dispatch facade plus composite operations
    - DiskFileProvider: Local filesystem (default provider)
    - MemoryFileProvider: In-memory tree
    - ReadOnlyFileProvider: Wrapper rejecting every modification

Quick Start:

    >>> from schemefs import FileStore
    >>> from schemefs.factory import create_default_registry
    >>> store = FileStore(create_default_registry())
    >>> store.create_directories("mem:/reports/2024")
    >>> with store.new_output_stream("mem:/reports/2024/q1.csv") as out:
    ...     out.write(b"region,total\\n")
    13
    >>> store.copy("mem:/reports/2024/q1.csv", "/tmp/q1.csv")
    13
    >>> store.delete_recursive("mem:/reports")

Exception Handling:

    >>> from schemefs import NotFoundError
    >>> try:
    ...     store.delete("mem:/missing")
    ... except NotFoundError:
    ...     print("Path not found")

Supported Operations:
    - exists(), is_directory(), size(), last_modified()
    - create_file(), create_directory(), create_directories()
    - delete(), delete_recursive(), try_delete(), attempt_delete()
    - list_files(), get_parent(), get_name(), get_canonical_path()
    - move_to(), copy()
    - open_handle(), new_input_stream(), new_output_stream()
    - can_write(), is_read_only(), set_read_only()
    - unwrap(), file_starts_with(), is_absolute(), create_temp_file()

"""

from .interfaces import (
    DEFAULT_CHUNK_SIZE,
    AlreadyExistsError,
    BackendIOError,
    BackendMismatchError,
    DirectoryNotEmptyError,
    FileBackendError,
    FileProvider,
    InvalidOperationError,
    NotFoundError,
    PermissionDeniedError,
)
from .local import DiskFileProvider
from .memory import MemoryFileProvider
from .registry import ProviderRegistry
from .store import (
    DeleteOutcome,
    FileStore,
    get_default_store,
    register_provider,
    resolve_provider,
    set_default_store,
)
from .wrappers import FileProviderWrapper, ReadOnlyFileProvider

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "AlreadyExistsError",
    "BackendIOError",
    "BackendMismatchError",
    "DeleteOutcome",
    "DirectoryNotEmptyError",
    "DiskFileProvider",
    "FileBackendError",
    "FileProvider",
    "FileProviderWrapper",
    "FileStore",
    "InvalidOperationError",
    "MemoryFileProvider",
    "NotFoundError",
    "PermissionDeniedError",
    "ProviderRegistry",
    "ReadOnlyFileProvider",
    "get_default_store",
    "register_provider",
    "resolve_provider",
    "set_default_store",
]
