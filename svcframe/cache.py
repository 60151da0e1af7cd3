"""Caches of assets keyed by case-insensitive URL."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")


class CacheBase(ABC):
    """Interface every cache registered with Caches provides."""

    @abstractmethod
    def clear(self) -> None:
        """Remove all assets."""

    @abstractmethod
    def reload_all(self) -> None:
        """Reload all assets."""


class Caches:
    """Holds caches and manages them together."""

    def __init__(self) -> None:
        self._caches: list[CacheBase] = []

    def __len__(self) -> int:
        return len(self._caches)

    def __contains__(self, obj: object) -> bool:
        return any(cache is obj for cache in self._caches)

    def register_cache_object(self, obj: CacheBase) -> None:
        """Register a cache; registering the same cache twice is an error."""
        if obj in self:
            raise ValueError("cache object is already registered")
        self._caches.append(obj)

    def flush_all(self) -> None:
        """Unload assets from every cache."""
        for cache in self._caches:
            cache.clear()

    def destroy_all(self) -> None:
        """Unload every cache and forget them all."""
        for cache in self._caches:
            cache.clear()
        self._caches.clear()


_default_registry = Caches()


class Cache(CacheBase, Generic[T]):
    """Caches assets created by a factory from their URL.

    The factory returns the asset, or None if it cannot be loaded. Assets
    are expected to have a ``reload()`` method for ``reload_all``.
    """

    def __init__(
        self,
        factory: Callable[[str], T | None],
        registry: Caches | None = None,
    ) -> None:
        self._factory = factory
        self._resources: dict[str, T] = {}
        (registry if registry is not None else _default_registry).register_cache_object(self)

    def __len__(self) -> int:
        return len(self._resources)

    def __contains__(self, url: object) -> bool:
        return isinstance(url, str) and url.lower() in self._resources

    def load(self, url: str) -> T | None:
        """Return the cached asset for a URL, loading it on first use."""
        key = url.lower()
        if key in self._resources:
            return self._resources[key]

        resource = self._factory(url)
        if resource is None:
            log.warning("Can't load asset: %s", key)
            return None

        self._resources[key] = resource
        return resource

    def remove(self, obj: Any) -> None:
        """Remove the first entry holding this asset."""
        for key, resource in self._resources.items():
            if resource is obj:
                del self._resources[key]
                return

    def clear(self) -> None:
        self._resources.clear()

    def reload_all(self) -> None:
        for resource in list(self._resources.values()):
            resource.reload()  # type: ignore[attr-defined]