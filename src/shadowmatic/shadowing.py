"""
Shadow attributes of contained classes in container dataclasses.

A container that builds an object of a contained class often needs to accept some of the contained class'
constructor arguments itself. Instead of repeating the declarations, the container shadows them:

    >>> from dataclasses import dataclass, field
    >>> from functools import cached_property
    >>> from shadowmatic import shadows, xtract_attrs, prefix_with
    >>> @dataclass
    ... class Foo:
    ...     a: int = 1
    ...     b: int = 2
    ...
    >>> @dataclass
    ... @shadows(Foo, ["a", "b"], fmt=prefix_with("pfx_"))
    ... class Bar:
    ...     @cached_property
    ...     def foo(self) -> Foo:
    ...         return Foo(**xtract_attrs(Foo, self))
    ...
    >>> Bar(pfx_a=3).foo
    Foo(a=3, b=2)
"""

from __future__ import annotations

import copy
import inspect
from collections.abc import Mapping
from dataclasses import dataclass

from typing_extensions import (
    Any,
    Callable,
    Dict,
    Iterable,
    Optional,
    Protocol,
    Type,
    TypeVar,
    Union,
    runtime_checkable,
)

from . import logger
from .failures import ConfigurationError, MissingShadowableAttributes, ShadowNameCollision
from .naming import (
    DEFAULT_INSTANCE,
    NameFormatter,
    resolve_external_name,
    resolve_internal_name,
    validate_identifier,
)
from .registry import GlobalShadowRegistry, ShadowEntry, ShadowKey, ShadowMap, ShadowRegistry
from .shadow_attribute import UNSET, DataclassHost, ShadowAttribute, ShadowHost

T = TypeVar("T", bound=type)

AttributeSpec = Union[Iterable[str], Mapping]
"""
Type alias for the attributes to shadow, either names or a mapping from names to explicit external names.
"""


@runtime_checkable
class SupportsShadowableAttributes(Protocol):
    """
    A contained type that declares which of its attributes may be shadowed.
    """

    @classmethod
    def shadowable_attrs(cls) -> Iterable[str]: ...


@dataclass(frozen=True)
class ShadowOptions:
    """
    The options of a shadowing registration.
    """

    fmt: Optional[NameFormatter] = None
    """
    Maps contained attribute names to external names, unless an explicit name is given.
    """
    instance: Optional[str] = None
    """
    The qualifier distinguishing several contained objects of the same type. None means the default instance.
    """
    private: bool = True
    """
    Whether values are stored under a hidden name rather than under the external name.
    """

    def __post_init__(self):
        if self.instance is None:
            object.__setattr__(self, "instance", DEFAULT_INSTANCE)
        else:
            validate_identifier(self.instance, "instance qualifier")
        if self.fmt is not None and not callable(self.fmt):
            raise ConfigurationError(message=f"fmt must be callable, got {self.fmt!r}")

    def entry(self, contained: Type, attr: str, explicit: Optional[str] = None) -> ShadowEntry:
        """
        :param contained: The contained type.
        :param attr: The contained attribute name.
        :param explicit: An explicit external name.
        :return: The names the container uses for the attribute.
        """
        external_name = resolve_external_name(attr, explicit, self.fmt)
        internal_name = resolve_internal_name(
            contained, attr, self.instance, self.private, external_name
        )
        return ShadowEntry(internal_name, external_name)


def _default_registry(registry: Optional[ShadowRegistry]) -> ShadowRegistry:
    return GlobalShadowRegistry() if registry is None else registry


def _requested_attributes(
    contained: Type, attrs: Optional[AttributeSpec]
) -> Dict[str, Optional[str]]:
    """
    Normalize the requested attributes into an ordered mapping from attribute name to explicit external name.
    """
    if attrs is None:
        if not isinstance(contained, SupportsShadowableAttributes):
            raise MissingShadowableAttributes(contained)
        attrs = list(contained.shadowable_attrs())
        if not attrs:
            raise MissingShadowableAttributes(contained)
    if isinstance(attrs, str):
        attrs = [attrs]
    pairs = attrs.items() if isinstance(attrs, Mapping) else ((attr, None) for attr in attrs)
    requested: Dict[str, Optional[str]] = {}
    for attr, explicit in pairs:
        requested.setdefault(validate_identifier(attr), explicit)
    if not requested:
        raise ConfigurationError(message=f"no attributes of {contained.__name__} to shadow")
    return requested


def _check_unique(entries: ShadowMap, container: Type):
    for kind, names in (
        ("internal", [e.internal_name for e in entries.values()]),
        ("external", [e.external_name for e in entries.values()]),
    ):
        seen = set()
        for name in names:
            if name in seen:
                raise ShadowNameCollision(name, container, kind)
            seen.add(name)


def shadow_attrs(
    contained: Type,
    attrs: Optional[AttributeSpec] = None,
    *,
    container: Type,
    fmt: Optional[NameFormatter] = None,
    instance: Optional[str] = None,
    private: bool = True,
    host: Optional[ShadowHost] = None,
    registry: Optional[ShadowRegistry] = None,
) -> ShadowMap:
    """
    Create attributes in `container` that shadow attributes of `contained`.

    Each shadowed attribute becomes an optional, read-only init argument of the container. The container must not
    have been processed by the dataclass decorator yet, see :py:func:`shadows` for the decorator form.

    :param contained: The type whose attributes are shadowed.
    :param attrs: The attribute names, or a mapping from attribute names to explicit external names. If omitted,
        the contained type's `shadowable_attrs()` are used.
    :param container: The class that receives the shadow attributes.
    :param fmt: Maps attribute names to external names for attributes without an explicit name.
    :param instance: Qualifier for containers holding several objects of the contained type.
    :param private: Whether values are stored under a hidden name rather than under the external name.
    :param host: The object system adapter, defaults to dataclasses.
    :param registry: The registry to record the names in, defaults to the global registry.
    :return: The registered mapping from contained attribute names to their shadow entries.
    """
    options = ShadowOptions(fmt=fmt, instance=instance, private=private)
    host = DataclassHost() if host is None else host
    registry = _default_registry(registry)

    entries = {
        attr: options.entry(contained, attr, explicit)
        for attr, explicit in _requested_attributes(contained, attrs).items()
    }
    _check_unique(entries, container)

    key = ShadowKey(contained, container, options.instance)
    with registry.registering(key, entries):
        for attr, entry in entries.items():
            host.declare_attribute(
                container, entry.internal_name, entry.external_name, contained, attr
            )
    logger.debug(
        f"Shadowed {', '.join(f'{a} as {e.external_name}' for a, e in entries.items())} "
        f"of {contained.__name__} in {container.__name__}."
    )
    return entries


def shadows(
    contained: Type,
    attrs: Optional[AttributeSpec] = None,
    *,
    delegate: Optional[str] = None,
    **options,
) -> Callable[[T], T]:
    """
    Class decorator form of :py:func:`shadow_attrs`. It has to be applied beneath the dataclass decorator.

    :param contained: The type whose attributes are shadowed.
    :param attrs: The attributes to shadow, see :py:func:`shadow_attrs`.
    :param delegate: If given, the name of the container attribute holding the contained object. Reading a shadow
        attribute is then forwarded to that object.
    :param options: Further keyword arguments of :py:func:`shadow_attrs`.
    """

    def decorator(container: T) -> T:
        shadow_attrs(contained, attrs, container=container, **options)
        if delegate is not None:
            delegate_shadowed(
                container,
                delegate,
                shadowed_attrs(
                    contained,
                    container,
                    instance=options.get("instance"),
                    registry=options.get("registry"),
                ),
            )
        return container

    return decorator


def _calling_container(stacklevel: int) -> Type:
    """
    Find the container type from the `self` or `cls` of a calling method.

    :param stacklevel: How many frames above the caller of this function to look.
    """
    frame = inspect.currentframe()
    try:
        for _ in range(stacklevel + 1):
            frame = frame.f_back
        local_variables = frame.f_locals if frame is not None else {}
    finally:
        del frame
    if "self" in local_variables:
        return type(local_variables["self"])
    if isinstance(local_variables.get("cls"), type):
        return local_variables["cls"]
    raise TypeError("container must be given when not called from a method of the container")


def shadowed_attrs(
    contained: Type,
    container: Optional[Type] = None,
    *,
    instance: Optional[str] = None,
    registry: Optional[ShadowRegistry] = None,
) -> Dict[str, str]:
    """
    Map the external names of shadowed attributes to the attribute names of the contained type.

    The result is a forwarding table: a container attribute named after a key reads the contained attribute named
    after the value.

    :param contained: The contained type.
    :param container: The container type, defaults to the type of the calling method's `self` or `cls`.
    :param instance: The instance qualifier.
    :param registry: The registry to look in, defaults to the global registry.
    :return: A mapping from external names to contained attribute names.
    """
    if container is None:
        container = _calling_container(1)
    entries = _default_registry(registry).lookup_for(
        contained, container, ShadowOptions(instance=instance).instance
    )
    return {entry.external_name: attr for attr, entry in entries.items()}


def delegate_shadowed(container: T, via: str, mapping: Mapping[str, str]) -> T:
    """
    Forward reads of container attributes to the contained object stored in `via`.

    :param container: The container type.
    :param via: The name of the container attribute holding the contained object.
    :param mapping: A mapping from container attribute names to contained attribute names,
        usually the result of :py:func:`shadowed_attrs`.
    :return: The container type.
    """
    for external_name, attr in mapping.items():
        descriptor = inspect.getattr_static(container, external_name, None)
        if isinstance(descriptor, ShadowAttribute):
            if descriptor.owner is not container:
                descriptor = copy.copy(descriptor)
                setattr(container, external_name, descriptor)
                descriptor.__set_name__(container, external_name)
            descriptor.forward(via, attr)
        else:
            setattr(container, external_name, _forwarding_property(via, attr))
        logger.debug(f"Forwarding {container.__name__}.{external_name} to {via}.{attr}.")
    return container


def _forwarding_property(via: str, attr: str) -> property:
    return property(lambda self: getattr(getattr(self, via), attr))


def xtract_attrs(
    contained: Type,
    container_instance: Any,
    *,
    instance: Optional[str] = None,
    host: Optional[ShadowHost] = None,
    registry: Optional[ShadowRegistry] = None,
) -> Dict[str, Any]:
    """
    Extract the values supplied to a container for the shadowed attributes of a contained type.

    Attributes that were not supplied are left out, so the contained type can apply its own defaults.

    :param contained: The contained type.
    :param container_instance: The container object. If a type is given, only the registration is checked.
    :param instance: The instance qualifier.
    :param host: The object system adapter, defaults to dataclasses.
    :param registry: The registry to look in, defaults to the global registry.
    :return: A mapping from contained attribute names to the supplied values.
    """
    host = DataclassHost() if host is None else host
    is_type = isinstance(container_instance, type)
    container = container_instance if is_type else type(container_instance)
    entries = _default_registry(registry).lookup_for(
        contained, container, ShadowOptions(instance=instance).instance
    )
    if is_type:
        return {}
    result = {}
    for attr, entry in entries.items():
        value = host.stored_value(container_instance, entry.internal_name)
        if value is not UNSET:
            result[attr] = value
    return result
