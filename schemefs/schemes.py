"""Path scheme parsing utilities.

A path may start with a scheme token followed by a colon, for example
``mem:/data/file.txt`` or ``ro:mem:/data``. The token selects the provider
that owns the path. Paths without a recognised token belong to the default
provider.

Single-letter tokens are never schemes so that Windows drive letters
(``C:\\data``) stay native paths.

Example:

    >>> split_scheme("mem:/data/file.txt")
    ('mem', '/data/file.txt')
    >>> split_scheme("/tmp/file.txt")
    (None, '/tmp/file.txt')
    >>> has_scheme("ro:mem:/x", "ro")
    True

"""

from __future__ import annotations

import re

SCHEME_SEPARATOR = ":"

_SCHEME_PATTERN = re.compile(r"[A-Za-z][A-Za-z0-9+.\-]+")


def is_valid_scheme(token: str) -> bool:
    """Check whether ``token`` can be used as a scheme.

    Args:
        token: Candidate scheme without the separator.

    Returns:
        True for tokens of at least two characters made of letters, digits,
        ``+``, ``.`` or ``-`` and starting with a letter.

    """
    return bool(_SCHEME_PATTERN.fullmatch(token))


def parse_scheme(path: str) -> str | None:
    """Return the scheme token of ``path`` or None if it carries none."""
    index = path.find(SCHEME_SEPARATOR)
    if index < 0:
        return None
    token = path[:index]
    return token if is_valid_scheme(token) else None


def split_scheme(path: str) -> tuple[str | None, str]:
    """Split ``path`` into its scheme token and the remainder.

    Only the outermost scheme is removed, so nested prefixes stay in the
    remainder.

    """
    scheme = parse_scheme(path)
    if scheme is None:
        return None, path
    return scheme, path[len(scheme) + len(SCHEME_SEPARATOR) :]


def has_scheme(path: str, scheme: str) -> bool:
    """Check whether ``path`` starts with ``scheme`` followed by the separator."""
    if not scheme:
        return False
    return path.startswith(scheme + SCHEME_SEPARATOR)


def strip_scheme(path: str, scheme: str) -> str:
    """Remove ``scheme`` from ``path`` if present; return the path otherwise."""
    if has_scheme(path, scheme):
        return path[len(scheme) + len(SCHEME_SEPARATOR) :]
    return path


def join_scheme(scheme: str, rest: str) -> str:
    """Prefix ``rest`` with ``scheme`` and the separator."""
    return f"{scheme}{SCHEME_SEPARATOR}{rest}"
