"""Provider registry and path resolution.

The registry keeps an ordered sequence of providers plus one default
provider. A path is owned by the first provider, in registration order, whose
``accepts`` predicate returns True; when none does, the default provider owns
it.

Example:
    >>> from schemefs import DiskFileProvider, MemoryFileProvider, ProviderRegistry
    >>>
    >>> registry = ProviderRegistry(DiskFileProvider())
    >>> registry.register(MemoryFileProvider(scheme="mem"))
    >>>
    >>> registry.resolve("mem:/data").scheme
    'mem'
    >>> registry.resolve("/tmp/data").scheme
    'file'

"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from .schemes import is_valid_scheme

if TYPE_CHECKING:
    from .interfaces import FileProvider

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Ordered registry of file providers with a universal default.

    Updates replace the internal tuple as a whole, so a concurrent ``resolve``
    sees either the old or the new sequence and never a partial one.
    """

    def __init__(self, default: FileProvider) -> None:
        """Initialise a registry that falls back to ``default``.

        Args:
            default: Provider used for every path no registered provider claims.

        """
        self._default = default
        self._providers: tuple[FileProvider, ...] = ()
        self._lock = threading.Lock()

    @property
    def default(self) -> FileProvider:
        """Provider used when no registered provider accepts a path."""
        return self._default

    @property
    def providers(self) -> tuple[FileProvider, ...]:
        """Snapshot of the registered providers in match order."""
        return self._providers

    def set_default(self, provider: FileProvider) -> None:
        """Replace the default provider."""
        with self._lock:
            self._default = provider
        logger.debug("Default provider set to %r", provider)

    def register(self, provider: FileProvider) -> None:
        """Register a provider for its scheme.

        A provider whose scheme is already registered replaces the previous
        one at the same position; otherwise it is appended and matches after
        every earlier registration.

        Args:
            provider: Provider to register.

        Raises:
            ValueError: If the provider's scheme is not a valid scheme token.

        """
        scheme = provider.scheme
        if not is_valid_scheme(scheme):
            msg = f"Invalid provider scheme: {scheme!r}"
            raise ValueError(msg)

        with self._lock:
            current = list(self._providers)
            for index, existing in enumerate(current):
                if existing.scheme == scheme:
                    current[index] = provider
                    logger.debug("Replaced provider for scheme '%s'", scheme)
                    break
            else:
                current.append(provider)
                logger.debug("Registered provider for scheme '%s'", scheme)
            self._providers = tuple(current)

    def unregister(self, scheme: str) -> FileProvider:
        """Remove and return the provider registered for ``scheme``.

        Raises:
            KeyError: If no provider is registered for the scheme.

        """
        with self._lock:
            for index, existing in enumerate(self._providers):
                if existing.scheme == scheme:
                    self._providers = (
                        self._providers[:index] + self._providers[index + 1 :]
                    )
                    break
            else:
                msg = f"Scheme '{scheme}' not registered"
                raise KeyError(msg)
        logger.debug("Unregistered provider for scheme '%s'", scheme)
        return existing

    def get(self, scheme: str) -> FileProvider:
        """Return the provider registered for ``scheme``.

        Raises:
            KeyError: If no provider is registered for the scheme.

        """
        for provider in self._providers:
            if provider.scheme == scheme:
                return provider
        msg = f"Scheme '{scheme}' not registered"
        raise KeyError(msg)

    def schemes(self) -> list[str]:
        """List the registered schemes in match order."""
        return [provider.scheme for provider in self._providers]

    def resolve(self, path: str) -> FileProvider:
        """Return the provider that owns ``path``.

        Never fails: paths no registered provider accepts go to the default.
        """
        for provider in self._providers:
            if provider.accepts(path):
                return provider
        return self._default

    def __contains__(self, scheme: object) -> bool:
        """Check whether a provider is registered for ``scheme``."""
        return any(provider.scheme == scheme for provider in self._providers)

    def __len__(self) -> int:
        """Return the number of registered (non-default) providers."""
        return len(self._providers)

    def __repr__(self) -> str:
        """Return a representation listing schemes and the default."""
        schemes = self.schemes()
        return f"ProviderRegistry(schemes={schemes!r}, default={self._default!r})"
