"""Provider factory for building registries from configuration strings.

A provider spec names a factory and passes it a target and parameters:

    - ``memory`` or ``memory://?scheme=ram`` - MemoryFileProvider
    - ``readonly`` or ``readonly://?scheme=ro`` - ReadOnlyFileProvider
    - ``file`` - DiskFileProvider

Custom factories are added with :meth:`ProviderFactory.register`. A factory
is a callable ``(target, params, registry) -> FileProvider``; ``registry`` is
the registry being built, which wrapping providers need to resolve the paths
they wrap.

Example:
    >>> from schemefs.factory import build_registry
    >>> registry = build_registry(["memory://?scheme=mem", "readonly"])
    >>> registry.schemes()
    ['mem', 'ro']

"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable
from urllib.parse import parse_qs, urlparse

from .local import DiskFileProvider
from .memory import MemoryFileProvider
from .registry import ProviderRegistry
from .wrappers import ReadOnlyFileProvider

if TYPE_CHECKING:
    from collections.abc import Iterable
    from typing import TypeAlias

    from .interfaces import FileProvider

    ProviderFactoryFunc: TypeAlias = Callable[
        [str, dict[str, str], ProviderRegistry],
        FileProvider,
    ]

logger = logging.getLogger(__name__)

DEFAULT_MEMORY_SCHEME = "mem"
DEFAULT_READ_ONLY_SCHEME = "ro"


class ProviderFactory:
    """Factory for creating providers from spec strings."""

    def __init__(self) -> None:
        """Initialize the factory with the built-in provider factories."""
        self._factories: dict[str, Callable[..., Any]] = {
            "file": self._create_disk_provider,
            "memory": self._create_memory_provider,
            "readonly": self._create_read_only_provider,
        }

    def names(self) -> list[str]:
        """List the registered factory names."""
        return sorted(self._factories)

    def parse_spec(self, spec: str) -> tuple[str, str, dict[str, str]]:
        """Parse a provider spec into factory name, target and parameters.

        Args:
            spec: ``name``, ``name://target`` or ``name://target?key=value``

        Returns:
            Tuple of (name, target, params); ``target`` may be empty.

        Raises:
            ValueError: If the spec has no factory name.

        """
        if "://" in spec:
            parsed = urlparse(spec)
            name = parsed.scheme
            target = f"{parsed.netloc}{parsed.path}"
            query = parsed.query
        else:
            name, _, query = spec.partition("?")
            target = ""

        name = name.strip()
        if not name:
            msg = f"Invalid provider spec: missing name in '{spec}'"
            raise ValueError(msg)

        params: dict[str, str] = {}
        if query:
            params = {key: values[0] for key, values in parse_qs(query).items()}
        return name, target, params

    def create(self, spec: str, registry: ProviderRegistry) -> FileProvider:
        """Create a provider from a spec string.

        Args:
            spec: Provider spec string
            registry: Registry the provider will be registered with

        Raises:
            ValueError: If the factory name is unknown

        """
        name, target, params = self.parse_spec(spec)

        if name not in self._factories:
            supported = ", ".join(self.names())
            msg = f"Unsupported provider: '{name}'. Supported providers: {supported}"
            raise ValueError(msg)

        return self._factories[name](target, params, registry)

    def register(self, name: str, factory_func: Callable[..., Any]) -> None:
        """Register a custom provider factory.

        Args:
            name: Factory name used in specs (e.g., "zip", "split")
            factory_func: Callable taking (target, params, registry) and
                returning a FileProvider

        """
        if not callable(factory_func):
            msg = "factory_func must be callable"
            raise TypeError(msg)
        self._factories[name] = factory_func

    def _create_disk_provider(
        self,
        target: str,
        params: dict[str, str],
        registry: ProviderRegistry,
    ) -> FileProvider:
        """Create a DiskFileProvider (target and params are unused)."""
        return DiskFileProvider()

    def _create_memory_provider(
        self,
        target: str,
        params: dict[str, str],
        registry: ProviderRegistry,
    ) -> FileProvider:
        """Create a MemoryFileProvider.

        Params:
            scheme: Claimed scheme (default ``mem``)

        """
        return MemoryFileProvider(scheme=params.get("scheme", DEFAULT_MEMORY_SCHEME))

    def _create_read_only_provider(
        self,
        target: str,
        params: dict[str, str],
        registry: ProviderRegistry,
    ) -> FileProvider:
        """Create a ReadOnlyFileProvider bound to ``registry``.

        Params:
            scheme: Claimed scheme (default ``ro``)

        """
        return ReadOnlyFileProvider(
            registry,
            scheme=params.get("scheme", DEFAULT_READ_ONLY_SCHEME),
        )


_default_factory = ProviderFactory()


def build_registry(
    specs: Iterable[str],
    *,
    default: FileProvider | None = None,
    factory: ProviderFactory | None = None,
) -> ProviderRegistry:
    """Build a registry from provider specs, registered in the given order.

    Args:
        specs: Provider spec strings
        default: Default provider (a DiskFileProvider when omitted)
        factory: Factory to use instead of the module default

    Raises:
        ValueError: If a spec is invalid or names an unknown factory

    """
    factory = factory or _default_factory
    registry = ProviderRegistry(default or DiskFileProvider())
    for spec in specs:
        registry.register(factory.create(spec, registry))
    logger.debug("Built provider registry %r", registry)
    return registry


def create_default_registry() -> ProviderRegistry:
    """Return a registry with disk as default plus ``mem:`` and ``ro:``."""
    return build_registry(["memory", "readonly"])


def register_provider_factory(
    name: str,
    factory_func: Callable[..., Any],
) -> None:
    """Register a custom provider factory with the module default factory.

    Example:
        >>> def split_factory(target, params, registry):
        ...     return SplitFileProvider(registry, part_size=int(params["size"]))
        >>> register_provider_factory("split", split_factory)

    """
    _default_factory.register(name, factory_func)
