"""Tests for ProviderFactory, registry building and the process-wide store."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from schemefs import (
    DiskFileProvider,
    FileStore,
    MemoryFileProvider,
    ProviderRegistry,
    ReadOnlyFileProvider,
    get_default_store,
    register_provider,
    resolve_provider,
    set_default_store,
)
from schemefs.factory import (
    ProviderFactory,
    build_registry,
    create_default_registry,
    register_provider_factory,
)
from tests.fakes import RecordingProvider

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def factory() -> ProviderFactory:
    """Provide a fresh factory."""
    return ProviderFactory()


@pytest.fixture
def fresh_default_store() -> Iterator[None]:
    """Reset the process-wide store around a test."""
    set_default_store(None)
    yield
    set_default_store(None)


class TestParseSpec:
    """Tests for ProviderFactory.parse_spec."""

    @pytest.mark.parametrize(
        ("spec", "expected"),
        [
            ("memory", ("memory", "", {})),
            ("memory?scheme=ram", ("memory", "", {"scheme": "ram"})),
            ("memory://?scheme=ram", ("memory", "", {"scheme": "ram"})),
            ("zip:///data/a.zip?level=9", ("zip", "/data/a.zip", {"level": "9"})),
            ("split://host/base", ("split", "host/base", {})),
        ],
    )
    def test_valid(
        self,
        factory: ProviderFactory,
        spec: str,
        expected: tuple[str, str, dict[str, str]],
    ) -> None:
        """Specs split into name, target and parameters."""
        assert factory.parse_spec(spec) == expected

    @pytest.mark.parametrize("spec", ["", "  ", "?scheme=x"])
    def test_missing_name(self, factory: ProviderFactory, spec: str) -> None:
        """A spec without a factory name is rejected."""
        with pytest.raises(ValueError, match="missing name"):
            factory.parse_spec(spec)


class TestCreate:
    """Tests for ProviderFactory.create and register."""

    def test_builtin_factories(self, factory: ProviderFactory) -> None:
        """The built-in names create the built-in providers."""
        registry = ProviderRegistry(DiskFileProvider())
        assert factory.names() == ["file", "memory", "readonly"]
        assert isinstance(factory.create("file", registry), DiskFileProvider)
        memory = factory.create("memory?scheme=ram", registry)
        assert isinstance(memory, MemoryFileProvider)
        assert memory.scheme == "ram"
        read_only = factory.create("readonly", registry)
        assert isinstance(read_only, ReadOnlyFileProvider)
        assert read_only.scheme == "ro"

    def test_unknown_factory(self, factory: ProviderFactory) -> None:
        """Unknown names list the supported ones."""
        registry = ProviderRegistry(DiskFileProvider())
        with pytest.raises(ValueError, match="Unsupported provider: 'nope'"):
            factory.create("nope", registry)

    def test_register_custom_factory(self, factory: ProviderFactory) -> None:
        """Custom factories receive target, parameters and registry."""
        received: list[tuple] = []

        def fake_factory(target, params, registry):
            received.append((target, params, registry))
            return RecordingProvider(params["scheme"])

        registry = ProviderRegistry(DiskFileProvider())
        factory.register("fake", fake_factory)
        provider = factory.create("fake://base?scheme=fk", registry)
        assert provider.scheme == "fk"
        assert received == [("base", {"scheme": "fk"}, registry)]
        assert "fake" in factory.names()

    def test_register_requires_callable(self, factory: ProviderFactory) -> None:
        """Factories must be callable."""
        with pytest.raises(TypeError, match="callable"):
            factory.register("bad", "not a function")  # type: ignore[arg-type]


class TestBuildRegistry:
    """Tests for build_registry and create_default_registry."""

    def test_default_registry(self) -> None:
        """The default registry has disk as default plus mem and ro."""
        registry = create_default_registry()
        assert isinstance(registry.default, DiskFileProvider)
        assert registry.schemes() == ["mem", "ro"]
        assert isinstance(registry.resolve("ro:mem:/x"), ReadOnlyFileProvider)

    def test_specs_registered_in_order(self) -> None:
        """Specs are registered in the order given."""
        registry = build_registry(
            ["memory?scheme=bb", "memory?scheme=aa", "readonly?scheme=view"],
        )
        assert registry.schemes() == ["bb", "aa", "view"]

    def test_read_only_wraps_the_built_registry(self) -> None:
        """Wrappers built from specs resolve through the registry being built."""
        store = FileStore(build_registry(["memory", "readonly"]))
        store.create_file("mem:/a.txt")
        assert store.exists("ro:mem:/a.txt")

    def test_custom_default_and_factory(self) -> None:
        """A custom default provider and factory can be supplied."""
        default = RecordingProvider("default")
        factory = ProviderFactory()
        factory.register(
            "fake",
            lambda target, params, registry: RecordingProvider("fk"),
        )
        registry = build_registry(["fake"], default=default, factory=factory)
        assert registry.default is default
        assert registry.schemes() == ["fk"]

    def test_invalid_spec_raises(self) -> None:
        """Unknown factories abort the build."""
        with pytest.raises(ValueError, match="Unsupported provider"):
            build_registry(["memory", "nope"])

    def test_register_provider_factory(self) -> None:
        """Factories registered globally are used by build_registry."""
        register_provider_factory(
            "scratchpad",
            lambda target, params, registry: MemoryFileProvider(scheme="scratch"),
        )
        registry = build_registry(["scratchpad"])
        assert registry.schemes() == ["scratch"]


@pytest.mark.usefixtures("fresh_default_store")
class TestDefaultStore:
    """Tests for the process-wide store helpers."""

    def test_lazily_built_once(self) -> None:
        """The same store is returned until it is replaced."""
        store = get_default_store()
        assert store is get_default_store()
        assert store.registry.schemes() == ["mem", "ro"]

    def test_set_default_store(self) -> None:
        """A supplied store replaces the default one."""
        custom = FileStore(ProviderRegistry(RecordingProvider("default")))
        set_default_store(custom)
        assert get_default_store() is custom
        set_default_store(None)
        assert get_default_store() is not custom

    def test_register_and_resolve_provider(self) -> None:
        """Providers registered globally own their scheme."""
        cache = MemoryFileProvider(scheme="cache")
        register_provider(cache)
        assert resolve_provider("cache:/x") is cache
        assert isinstance(resolve_provider("/tmp/x"), DiskFileProvider)
