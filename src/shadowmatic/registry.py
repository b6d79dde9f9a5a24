from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from types import MappingProxyType

from typing_extensions import (
    Any,
    ClassVar,
    Dict,
    Iterator,
    List,
    Mapping,
    Tuple,
    Type,
)

from .failures import (
    AttributesNotShadowed,
    OverlappingShadowRegistration,
    ShadowNameCollision,
)
from .naming import DEFAULT_INSTANCE

logger = logging.getLogger(__name__)


def _mro(container) -> Tuple[Type, ...]:
    return getattr(container, "__mro__", (container,))


@dataclass(frozen=True)
class ShadowEntry:
    """
    The names a container uses for one shadowed attribute of a contained type.
    """

    internal_name: str
    """
    The name under which the container stores the supplied value.
    """
    external_name: str
    """
    The name under which the value is supplied to the container's constructor.
    """


@dataclass(frozen=True)
class ShadowKey:
    """
    Identifies the shadowed attributes of one contained instance inside a container type.
    """

    contained: Type
    """
    The type whose attributes are shadowed.
    """
    container: Type
    """
    The type that shadows the attributes.
    """
    instance: str = DEFAULT_INSTANCE
    """
    The qualifier distinguishing several contained instances of the same type within one container.
    """


ShadowMap = Mapping[str, ShadowEntry]
"""
Type alias for the mapping from contained attribute names to their shadow entries.
"""


class SingletonMeta(type):
    """
    A metaclass for classes that have exactly one instance per process.
    Creation of the instance is guarded by a lock, so concurrent first calls agree on the instance.
    """

    _instances: ClassVar[Dict[Type, Any]] = {}
    """
    The available instances of the singleton classes.
    """
    _creation_lock: ClassVar[threading.Lock] = threading.Lock()

    def __call__(cls, *args, **kwargs):
        with SingletonMeta._creation_lock:
            if cls not in cls._instances:
                cls._instances[cls] = super().__call__(*args, **kwargs)
            return cls._instances[cls]

    def clear_instance(cls):
        """
        Drop the stored instance, the next call creates a fresh one.
        """
        with SingletonMeta._creation_lock:
            cls._instances.pop(cls, None)


@dataclass
class ShadowRegistry:
    """
    Keyed store of shadow entries.

    Entries are written once when a container class is defined and read whenever a container instance
    delegates to, or builds, its contained objects. Registering attributes for a key that already has
    entries merges them, as long as the attribute sets are disjoint and no internal or external name
    is used twice within the container.

    Writes are serialized by a lock. Stored mappings are read-only views that are replaced, never mutated,
    so reads need no locking.
    """

    _entries: Dict[ShadowKey, ShadowMap] = field(default_factory=dict, init=False, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False)

    def __contains__(self, key: ShadowKey) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> List[ShadowKey]:
        return list(self._entries)

    def lookup(self, key: ShadowKey) -> ShadowMap:
        """
        :param key: The registry key.
        :return: The shadow entries registered under the key.
        """
        try:
            return self._entries[key]
        except KeyError:
            raise AttributesNotShadowed(key.contained, key.container, key.instance) from None

    def _registered_along_mro(
        self, contained: Type, container: Type, instance: str
    ) -> Iterator[ShadowMap]:
        """
        :return: The entries of `contained` and `instance` registered under the classes of the container's MRO,
            most distant class first.
        """
        for klass in reversed(_mro(container)):
            entries = self._entries.get(ShadowKey(contained, klass, instance))
            if entries is not None:
                yield entries

    def lookup_for(
        self, contained: Type, container: Type, instance: str = DEFAULT_INSTANCE
    ) -> ShadowMap:
        """
        Look up the entries of a container type, including those registered under the classes it inherits from.

        :param contained: The contained type.
        :param container: The container type, usually the type of a container instance.
        :param instance: The instance qualifier.
        :return: The entries of every class in the container's MRO that shadows the contained type.
        """
        found = False
        merged: Dict[str, ShadowEntry] = {}
        for entries in self._registered_along_mro(contained, container, instance):
            found = True
            merged.update(entries)
        if not found:
            raise AttributesNotShadowed(contained, container, instance)
        return MappingProxyType(merged)

    def entries_of_container(self, container: Type) -> Iterator[ShadowEntry]:
        """
        :param container: The container type.
        :return: All shadow entries registered under the container or a class it inherits from, for any
            contained type.
        """
        mro = _mro(container)
        for key, entries in self._entries.items():
            if key.container in mro:
                yield from entries.values()

    def _check(self, key: ShadowKey, entries: ShadowMap):
        overlap = set()
        for existing in self._registered_along_mro(key.contained, key.container, key.instance):
            overlap |= set(existing) & set(entries)
        if overlap:
            raise OverlappingShadowRegistration(
                key.contained, key.container, key.instance, overlap
            )
        used_internal = set()
        used_external = set()
        for entry in self.entries_of_container(key.container):
            used_internal.add(entry.internal_name)
            used_external.add(entry.external_name)
        for entry in entries.values():
            if entry.internal_name in used_internal:
                raise ShadowNameCollision(entry.internal_name, key.container, "internal")
            if entry.external_name in used_external:
                raise ShadowNameCollision(entry.external_name, key.container)
            used_internal.add(entry.internal_name)
            used_external.add(entry.external_name)

    @contextmanager
    def registering(self, key: ShadowKey, entries: ShadowMap):
        """
        Validate new entries for a key, and store them once the body of the with-statement succeeds.
        The registry stays locked for the whole block.

        :param key: The registry key.
        :param entries: The entries to add, keyed by contained attribute name.
        """
        with self._lock:
            self._check(key, entries)
            yield
            merged = dict(self._entries.get(key, {}))
            merged.update(entries)
            self._entries[key] = MappingProxyType(merged)
        logger.debug(
            f"Registered {list(entries)} of {key.contained.__name__} "
            f"in {key.container.__name__} for instance '{key.instance}'."
        )

    def register(self, key: ShadowKey, entries: ShadowMap):
        """
        Validate and store new entries for a key.

        :param key: The registry key.
        :param entries: The entries to add, keyed by contained attribute name.
        """
        with self.registering(key, entries):
            pass

    def clear(self):
        """
        Remove all entries. Meant for isolating tests.
        """
        with self._lock:
            self._entries.clear()


@dataclass
class GlobalShadowRegistry(ShadowRegistry, metaclass=SingletonMeta):
    """
    The process wide registry used when no registry is passed explicitly.
    """
