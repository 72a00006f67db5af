"""
Service lookup for library code.

The build graph, nodes and actions look their logger up lazily so that
they work the same inside the CLI (bootstrapped container) and when kiln is
imported on its own (nothing registered).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable

T = TypeVar("T")


def try_resolve(interface: type[T]) -> T | None:
    """Registered service for ``interface``, or None."""
    from .container import get_container

    return get_container().try_resolve(interface)


def resolve_or_default(interface: type[T], default_factory: Callable[[], T]) -> T:
    """
    Registered service for ``interface``, else ``default_factory()``.

    The default is not registered, so a later bootstrap still takes effect
    for objects created afterwards::

        logger = resolve_or_default(ILogger, NullLogger)
    """
    instance = try_resolve(interface)
    return default_factory() if instance is None else instance
