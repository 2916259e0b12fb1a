"""Test doubles used across registry and store tests."""

from __future__ import annotations

import io
from typing import Any

from schemefs.interfaces import FileProvider


class RecordingProvider(FileProvider):
    """Provider that records every call and returns canned values.

    ``results`` maps an operation name to the value it returns (or an
    exception instance it raises).
    """

    def __init__(self, scheme: str, **results: Any) -> None:
        self.scheme = scheme
        self.calls: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []
        self._results = results

    def _record(self, name: str, *args: Any, default: Any = None, **kwargs: Any) -> Any:
        self.calls.append((name, args, kwargs))
        result = self._results.get(name, default)
        if isinstance(result, BaseException):
            raise result
        return result

    def call_names(self) -> list[str]:
        """Return the names of the recorded operations in call order."""
        return [name for name, _, _ in self.calls]

    def exists(self, path: str) -> bool:
        return self._record("exists", path, default=True)

    def create_directory(self, path: str) -> None:
        self._record("create_directory", path)

    def create_file(self, path: str) -> bool:
        return self._record("create_file", path, default=True)

    def delete(self, path: str) -> None:
        self._record("delete", path)

    def get_canonical_path(self, path: str) -> str:
        return self._record("get_canonical_path", path, default=path)

    def get_parent(self, path: str) -> str | None:
        return self._record("get_parent", path)

    def is_absolute(self, path: str) -> bool:
        return self._record("is_absolute", path, default=True)

    def move_to(self, old: str, new: str, *, atomic_replace: bool = False) -> None:
        self._record("move_to", old, new, atomic_replace=atomic_replace)

    def get_name(self, path: str) -> str:
        return self._record("get_name", path, default=path.rsplit("/", 1)[-1])

    def list_files(self, path: str) -> list[str]:
        return self._record("list_files", path, default=[])

    def last_modified(self, path: str) -> int:
        return self._record("last_modified", path, default=0)

    def size(self, path: str) -> int:
        return self._record("size", path, default=0)

    def is_directory(self, path: str) -> bool:
        return self._record("is_directory", path, default=False)

    def open_handle(self, path: str, mode: str = "r") -> io.BytesIO:
        return self._record("open_handle", path, mode, default=io.BytesIO())

    def new_input_stream(self, path: str) -> io.BytesIO:
        return self._record("new_input_stream", path, default=io.BytesIO())

    def new_output_stream(self, path: str, *, append: bool = False) -> io.BytesIO:
        return self._record(
            "new_output_stream",
            path,
            append=append,
            default=io.BytesIO(),
        )

    def can_write(self, path: str) -> bool:
        return self._record("can_write", path, default=True)

    def is_read_only(self, path: str) -> bool:
        return self._record("is_read_only", path, default=False)

    def set_read_only(self, path: str) -> bool:
        return self._record("set_read_only", path, default=True)

    def create_temp_file(
        self,
        prefix: str,
        suffix: str,
        *,
        delete_on_exit: bool = False,
        in_temp_dir: bool = False,
    ) -> str:
        return self._record(
            "create_temp_file",
            prefix,
            suffix,
            delete_on_exit=delete_on_exit,
            in_temp_dir=in_temp_dir,
            default=f"{prefix}0{suffix}",
        )


class SelfParentProvider(RecordingProvider):
    """Provider whose paths never exist and are their own parent."""

    def exists(self, path: str) -> bool:
        self.calls.append(("exists", (path,), {}))
        return False

    def get_parent(self, path: str) -> str | None:
        self.calls.append(("get_parent", (path,), {}))
        return path


class TrackingStream(io.BytesIO):
    """BytesIO that remembers whether it was closed."""

    def __init__(self, data: bytes = b"", *, fail_on_read: bool = False) -> None:
        super().__init__(data)
        self.was_closed = False
        self._fail_on_read = fail_on_read

    def read(self, size: int | None = -1) -> bytes:
        if self._fail_on_read:
            message = "simulated read failure"
            raise OSError(message)
        return super().read(size)

    def close(self) -> None:
        self.was_closed = True
        super().close()
