from __future__ import annotations

from typing_extensions import Callable, Optional, Type

from .failures import InvalidAttributeName, InvalidFormatter
from .utils import get_full_class_name

NameFormatter = Callable[[str], str]
"""
Type alias for functions that map a contained attribute name to the name exposed by the container.
"""

DEFAULT_INSTANCE = "__default__"
"""
The instance qualifier used when a container holds a single instance of a contained type.
"""

SHADOW_PREFIX = "_shadow"
"""
The prefix of the private storage names of shadow attributes.
"""


def validate_identifier(name, kind: str = "attribute name") -> str:
    """
    :param name: The name to check.
    :param kind: What the name is, used in the error message.
    :return: The name if it is a valid python identifier.
    """
    if not isinstance(name, str) or not name.isidentifier():
        raise InvalidAttributeName(name, kind)
    return name


def resolve_external_name(
    attr: str,
    explicit: Optional[str] = None,
    fmt: Optional[NameFormatter] = None,
) -> str:
    """
    Compute the name under which the container accepts the value of a contained attribute.

    An explicit rename wins, otherwise the formatter is applied, otherwise the attribute keeps its own name.

    :param attr: The name of the attribute on the contained type.
    :param explicit: An explicit rename, empty or None means no rename.
    :param fmt: A function mapping the attribute name to the external name.
    :return: The external name.
    """
    if explicit:
        return validate_identifier(explicit, "external name")
    if fmt is None:
        return attr
    try:
        external = fmt(attr)
    except Exception as e:
        raise InvalidFormatter(attr, error=e) from e
    if not isinstance(external, str) or not external.isidentifier():
        raise InvalidFormatter(attr, result=external)
    return external


def resolve_internal_name(
    contained: Type,
    attr: str,
    instance: str = DEFAULT_INSTANCE,
    private: bool = True,
    external_name: Optional[str] = None,
) -> str:
    """
    Compute the name under which the container stores the value of a shadowed attribute.

    Private names join the prefix, the full name of the contained type, the instance qualifier and the attribute
    name with dots. The qualifier and the attribute name are identifiers, so distinct inputs never share a name.

    :param contained: The contained type.
    :param attr: The name of the attribute on the contained type.
    :param instance: The instance qualifier.
    :param private: If False, the value is stored under the external name.
    :param external_name: The external name of the attribute, defaults to the attribute name.
    """
    if not private:
        return external_name or attr
    return ".".join([SHADOW_PREFIX, get_full_class_name(contained), instance, attr])


def prefix_with(prefix: str) -> NameFormatter:
    """
    :param prefix: The prefix to prepend.
    :return: A formatter that prepends `prefix` to attribute names.
    """
    return lambda attr: f"{prefix}{attr}"


def suffix_with(suffix: str) -> NameFormatter:
    """
    :param suffix: The suffix to append.
    :return: A formatter that appends `suffix` to attribute names.
    """
    return lambda attr: f"{attr}{suffix}"
