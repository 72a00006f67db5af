"""
Service container for kiln.

A thin registry of dependency-injector providers keyed by interface type.
kiln registers two services (ILogger, IPresenter); library code reaches
them through kiln.core.di so it also runs without any registration.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import ClassVar, TypeVar

from dependency_injector import providers

T = TypeVar("T")


class ServiceContainer:
    """Interface type -> provider table, with one process-wide instance."""

    _instance: ClassVar[ServiceContainer | None] = None

    def __init__(self) -> None:
        self._providers: dict[type, providers.Provider] = {}

    @classmethod
    def get_instance(cls) -> ServiceContainer:
        """The process-wide container, created on first use."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the process-wide container and everything registered in it."""
        cls._instance = None

    def register_singleton(
        self,
        interface: type[T],
        implementation: T | None = None,
        factory: Callable[[], T] | None = None,
    ) -> None:
        """
        Register one shared instance of ``interface``.

        Args:
            interface: Key to resolve by
            implementation: Ready-made instance
            factory: Builds the instance on first resolve instead

        Raises:
            ValueError: If neither implementation nor factory is given
        """
        if implementation is not None:
            self._providers[interface] = providers.Object(implementation)
        elif factory is not None:
            self._providers[interface] = providers.Singleton(factory)
        else:
            raise ValueError(
                f"register_singleton({interface.__name__}) needs an instance or a factory"
            )

    def register_transient(self, interface: type[T], factory: Callable[..., T]) -> None:
        """Register ``factory``; every resolve builds a new instance."""
        self._providers[interface] = providers.Factory(factory)

    def override(self, interface: type[T], provider: providers.Provider) -> None:
        """Replace the provider for ``interface`` with an arbitrary one (tests)."""
        self._providers[interface] = provider

    def __contains__(self, interface: type) -> bool:
        return interface in self._providers

    def resolve(self, interface: type[T]) -> T:
        """
        Build or fetch the service registered for ``interface``.

        Raises:
            KeyError: If nothing is registered for it
        """
        provider = self._providers.get(interface)
        if provider is None:
            raise KeyError(f"Nothing registered for {interface.__name__}")
        return provider()

    def try_resolve(self, interface: type[T]) -> T | None:
        """Like resolve(), but None when nothing is registered."""
        provider = self._providers.get(interface)
        return provider() if provider is not None else None


def get_container() -> ServiceContainer:
    """The process-wide service container."""
    return ServiceContainer.get_instance()


def resolve(interface: type[T]) -> T:
    """Resolve ``interface`` from the process-wide container."""
    return get_container().resolve(interface)
