from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class DataclassException(Exception):
    """
    A base exception class for dataclass-based exceptions.
    The way this is used is by inheriting from it and setting the `message` field in the __post_init__ method,
    then calling the super().__post_init__() method.
    """

    message: str = field(kw_only=True, default=None)

    def __post_init__(self):
        super().__init__(self.message)


def type_name(obj) -> str:
    """
    :param obj: A class or any other object used as a type identifier.
    :return: The bare name used to identify it inside generated attribute names.
    """
    return getattr(obj, "__name__", str(obj))


def get_full_class_name(cls) -> str:
    """
    Returns the full name of a class, including the module name.

    :param cls: The class.
    :return: The full name of the class
    """
    return f"{cls.__module__}.{getattr(cls, '__qualname__', cls.__name__)}"
