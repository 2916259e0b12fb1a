"""Exception translation between OSError and the schemefs error vocabulary.

Providers built on the operating system receive ``OSError`` subclasses and
report them through :func:`os_errors_translated`. Callers that prefer the
builtin exceptions can go the other way with :func:`translate_exceptions`.
"""

from __future__ import annotations

import errno
from contextlib import contextmanager
from typing import TYPE_CHECKING

from .interfaces import (
    AlreadyExistsError,
    BackendIOError,
    BackendMismatchError,
    DirectoryNotEmptyError,
    FileBackendError,
    InvalidOperationError,
    NotFoundError,
    PermissionDeniedError,
)

if TYPE_CHECKING:
    from collections.abc import Iterator


def translate_os_error(exc: OSError, path: str) -> FileBackendError:
    """Convert an OSError raised for ``path`` into a FileBackendError.

    Maps:
    - FileNotFoundError → NotFoundError
    - FileExistsError → AlreadyExistsError
    - PermissionError → PermissionDeniedError
    - ENOTEMPTY → DirectoryNotEmptyError
    - NotADirectoryError → InvalidOperationError
    - IsADirectoryError → InvalidOperationError
    - anything else → BackendIOError

    """
    if isinstance(exc, FileNotFoundError):
        return NotFoundError(path)
    if isinstance(exc, FileExistsError):
        return AlreadyExistsError(path)
    if isinstance(exc, PermissionError):
        return PermissionDeniedError(path)
    if exc.errno == errno.ENOTEMPTY:
        return DirectoryNotEmptyError(path)
    if isinstance(exc, NotADirectoryError):
        return InvalidOperationError.not_a_directory(path)
    if isinstance(exc, IsADirectoryError):
        return InvalidOperationError.cannot_open_directory(path)
    return BackendIOError(exc.strerror or str(exc), path=path)


@contextmanager
def os_errors_translated(path: str) -> Iterator[None]:
    """Context manager re-raising OSError as the matching FileBackendError.

    Example:
        ```python
        with os_errors_translated(path):
            os.rmdir(native)  # DirectoryNotEmptyError when not empty
        ```

    """
    try:
        yield
    except OSError as exc:
        raise translate_os_error(exc, path) from exc


def translate_backend_exception(exc: FileBackendError) -> OSError:
    """Convert a FileBackendError to a standard Python OSError.

    Maps:
    - NotFoundError → FileNotFoundError
    - AlreadyExistsError → FileExistsError
    - PermissionDeniedError → PermissionError
    - DirectoryNotEmptyError → OSError(ENOTEMPTY)
    - InvalidOperationError (cannot open directory) → IsADirectoryError
    - InvalidOperationError (not a directory) → NotADirectoryError
    - BackendMismatchError → OSError(EXDEV)
    - everything else → OSError

    Args:
        exc: The FileBackendError to translate.

    Returns:
        A standard Python OSError or subclass.

    """
    message = str(exc)

    if isinstance(exc, NotFoundError):
        return FileNotFoundError(errno.ENOENT, message)
    if isinstance(exc, AlreadyExistsError):
        return FileExistsError(errno.EEXIST, message)
    if isinstance(exc, PermissionDeniedError):
        return PermissionError(errno.EACCES, message)
    if isinstance(exc, DirectoryNotEmptyError):
        return OSError(errno.ENOTEMPTY, message)
    if isinstance(exc, BackendMismatchError):
        return OSError(errno.EXDEV, message)
    if isinstance(exc, InvalidOperationError):
        if "Cannot open directory" in exc.message:
            return IsADirectoryError(errno.EISDIR, message)
        if "not a directory" in exc.message.lower():
            return NotADirectoryError(errno.ENOTDIR, message)
    return OSError(message)


@contextmanager
def translate_exceptions() -> Iterator[None]:
    """Context manager translating FileBackendError into OSError.

    Example:
        ```python
        with translate_exceptions():
            store.delete("mem:/missing")  # Raises FileNotFoundError
        ```

    Raises:
        OSError: Any FileBackendError wrapped as the matching OSError subclass.

    """
    try:
        yield
    except FileBackendError as exc:
        raise translate_backend_exception(exc) from exc
