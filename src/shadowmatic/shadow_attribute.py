from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from dataclasses import dataclass

from typing_extensions import Any, Optional, Type

from .failures import ContainerAlreadyProcessed, ReadOnlyShadowAttribute, ShadowNameCollision


class _Unset:
    """
    Marker type for values that were not supplied.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "UNSET"

    def __bool__(self):
        return False

    def __reduce__(self):
        return "UNSET"


UNSET = _Unset()
"""
Returned by a host for shadow attributes that were not supplied to a container instance.
"""


class ShadowAttribute:
    """
    Descriptor installed on a container class under the external name of a shadowed attribute.

    The dataclass machinery uses the descriptor itself as the field default, so the generated `__init__` accepts
    the external name as an optional argument. A supplied value is stored once on the instance under the internal
    name, after which the attribute is read-only. Reading an attribute that was not supplied gives UNSET, unless
    the attribute is forwarded to a contained object with :py:meth:`forward`.
    """

    def __init__(self, internal_name: str, contained: Optional[Type] = None, attr: Optional[str] = None):
        self.internal_name: str = internal_name
        """
        The key of the stored value in the instance dictionary.
        """
        self.contained: Optional[Type] = contained
        self.attr: Optional[str] = attr
        self.external_name: Optional[str] = None
        self.owner: Optional[Type] = None
        self.via: Optional[str] = None
        """
        The container attribute holding the contained object that reads are forwarded to.
        """
        self.target: Optional[str] = None
        """
        The attribute of the contained object that reads are forwarded to.
        """

    def __set_name__(self, owner: Type, name: str):
        self.owner = owner
        self.external_name = name

    def __repr__(self):
        if self.contained is None:
            return f"{self.__class__.__name__}({self.internal_name!r})"
        return f"{self.__class__.__name__}({self.contained.__name__}.{self.attr})"

    def forward(self, via: str, target: str):
        """
        Forward reads of this attribute to `getattr(getattr(instance, via), target)`.

        :param via: The container attribute holding the contained object.
        :param target: The attribute of the contained object.
        """
        self.via = via
        self.target = target

    def is_set(self, obj) -> bool:
        """
        :param obj: The container instance.
        :return: Whether a value was supplied for this attribute.
        """
        return self.internal_name in vars(obj)

    def __get__(self, obj, objtype=None):
        if obj is None:
            return self
        if self.via is not None:
            return getattr(getattr(obj, self.via), self.target)
        return vars(obj).get(self.internal_name, UNSET)

    def __set__(self, obj, value):
        if isinstance(value, ShadowAttribute) or value is UNSET:
            return
        if self.is_set(obj):
            raise ReadOnlyShadowAttribute(type(obj), self.external_name)
        vars(obj)[self.internal_name] = value

    def __delete__(self, obj):
        raise ReadOnlyShadowAttribute(type(obj), self.external_name)


@dataclass
class ShadowHost(ABC):
    """
    Strategy through which shadowing reaches into the object system of container classes.
    """

    @abstractmethod
    def declare_attribute(
        self,
        container: Type,
        internal_name: str,
        external_name: str,
        contained: Optional[Type] = None,
        attr: Optional[str] = None,
    ):
        """
        Create a read-only attribute on `container` that is initialized through `external_name`, stored under
        `internal_name` and remembers whether a value was supplied.
        """
        raise NotImplementedError

    @abstractmethod
    def stored_value(self, instance: Any, internal_name: str) -> Any:
        """
        :return: The value supplied for the attribute stored under `internal_name`, or UNSET if none was supplied.
        """
        raise NotImplementedError


@dataclass
class DataclassHost(ShadowHost):
    """
    Declare shadow attributes as fields of classes that are about to be processed by the dataclass decorator.
    """

    def declare_attribute(
        self,
        container: Type,
        internal_name: str,
        external_name: str,
        contained: Optional[Type] = None,
        attr: Optional[str] = None,
    ):
        if "__dataclass_fields__" in container.__dict__:
            raise ContainerAlreadyProcessed(container)
        annotations = dict(inspect.get_annotations(container))
        inherited_fields = getattr(container, "__dataclass_fields__", {})
        if (
            external_name in annotations
            or external_name in inherited_fields
            or any(external_name in klass.__dict__ for klass in container.__mro__)
        ):
            raise ShadowNameCollision(external_name, container)
        descriptor = ShadowAttribute(internal_name, contained, attr)
        setattr(container, external_name, descriptor)
        descriptor.__set_name__(container, external_name)
        annotations[external_name] = Any
        container.__annotations__ = annotations

    def stored_value(self, instance: Any, internal_name: str) -> Any:
        return vars(instance).get(internal_name, UNSET)
