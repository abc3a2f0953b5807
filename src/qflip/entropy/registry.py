"""Name lookup for the sources listed in ``source_order``.

Each source module registers its class with ``@register_entropy_source``
when :mod:`qflip.entropy` is imported. The names are the ones accepted in
``QFLIP_SOURCE_ORDER``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from qflip.entropy.base import EntropySource

_SOURCES: dict[str, type[EntropySource]] = {}


def register_entropy_source(name: str) -> Callable[[type[EntropySource]], type[EntropySource]]:
    """Class decorator binding *name* to an entropy source class.

    Raises:
        ValueError: If *name* is already bound to a different class.
    """

    def decorator(source_cls: type[EntropySource]) -> type[EntropySource]:
        existing = _SOURCES.get(name)
        if existing is not None and existing is not source_cls:
            raise ValueError(f"Entropy source name {name!r} already used by {existing.__name__}")
        _SOURCES[name] = source_cls
        return source_cls

    return decorator


def get_source_class(name: str) -> type[EntropySource]:
    """Return the class registered as *name*.

    Raises:
        KeyError: If no source uses that name.
    """
    try:
        return _SOURCES[name]
    except KeyError:
        known = ", ".join(sorted(_SOURCES)) or "(none)"
        raise KeyError(f"Unknown entropy source: {name!r}. Available: {known}") from None


def available_sources() -> list[str]:
    """Registered source names, sorted."""
    return sorted(_SOURCES)


def unregister_entropy_source(name: str) -> None:
    """Drop *name* from the registry if present."""
    _SOURCES.pop(name, None)
