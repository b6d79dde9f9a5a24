"""
This module defines the exception types raised by the shadowmatic package.
"""

from __future__ import annotations

from dataclasses import dataclass

from typing_extensions import Any, Iterable, Optional, Type

from .utils import DataclassException, type_name


@dataclass
class ConfigurationError(DataclassException, ValueError):
    """
    Raised at registration time when the shadowing of attributes is misconfigured.
    """


@dataclass
class MissingShadowableAttributes(ConfigurationError):
    """
    Raised when no attributes are given and the contained type does not declare its shadowable attributes.
    """

    contained: Type

    def __post_init__(self):
        self.message = (
            f"must specify attrs or declare shadowable attributes in {type_name(self.contained)}"
        )
        super().__post_init__()


@dataclass
class InvalidFormatter(ConfigurationError):
    """
    Raised when a name formatter fails or does not return a usable attribute name.
    """

    attribute_name: str
    result: Any = None
    error: Optional[Exception] = None

    def __post_init__(self):
        if self.error is not None:
            self.message = f"formatter failed for attribute '{self.attribute_name}': {self.error}"
        else:
            self.message = (
                f"formatter returned {self.result!r} for attribute '{self.attribute_name}', "
                f"expected a valid attribute name"
            )
        super().__post_init__()


@dataclass
class InvalidAttributeName(ConfigurationError):
    """
    Raised when an attribute name or instance qualifier is not a valid python identifier.
    """

    name: Any
    kind: str = "attribute name"

    def __post_init__(self):
        self.message = f"invalid {self.kind}: {self.name!r}"
        super().__post_init__()


@dataclass
class OverlappingShadowRegistration(ConfigurationError):
    """
    Raised when attributes of a contained type are shadowed more than once under the same container and instance.
    """

    contained: Type
    container: Type
    instance: str
    attributes: Iterable[str]

    def __post_init__(self):
        self.message = (
            f"attributes {sorted(self.attributes)} of {type_name(self.contained)} are already shadowed "
            f"in {type_name(self.container)} for instance '{self.instance}'"
        )
        super().__post_init__()


@dataclass
class ShadowNameCollision(ConfigurationError):
    """
    Raised when a computed internal or external name is already in use.
    """

    name: str
    container: Type
    kind: str = "external"

    def __post_init__(self):
        self.message = f"{self.kind} name '{self.name}' is already used in {type_name(self.container)}"
        super().__post_init__()


@dataclass
class ContainerAlreadyProcessed(ConfigurationError):
    """
    Raised when attributes are shadowed in a class that the dataclass decorator has already processed.
    The shadowing must be applied beneath the @dataclass decorator.
    """

    container: Type

    def __post_init__(self):
        self.message = (
            f"{type_name(self.container)} is already a dataclass, shadow its attributes "
            f"before applying the dataclass decorator"
        )
        super().__post_init__()


@dataclass
class AttributesNotShadowed(DataclassException, LookupError):
    """
    Raised when a lookup references a (contained, container, instance) combination that was never registered.
    """

    contained: Type
    container: Type
    instance: str

    def __post_init__(self):
        self.message = (
            f"attributes must first be shadowed: no attributes of {type_name(self.contained)} "
            f"are shadowed in {type_name(self.container)} for instance '{self.instance}'"
        )
        super().__post_init__()


@dataclass
class ReadOnlyShadowAttribute(DataclassException, AttributeError):
    """
    Raised when a shadow attribute is assigned after the container was initialized.
    """

    container: Type
    attribute_name: str

    def __post_init__(self):
        self.message = f"shadow attribute '{self.attribute_name}' of {type_name(self.container)} is read-only"
        super().__post_init__()
