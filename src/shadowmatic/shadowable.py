from __future__ import annotations

from dataclasses import fields, is_dataclass

from typing_extensions import Any, Callable, ClassVar, Dict, Iterable, Optional, Tuple, Type, TypeVar

from . import shadowing
from .registry import ShadowRegistry
from .shadowing import SupportsShadowableAttributes

T = TypeVar("T", bound=type)
S = TypeVar("S", bound="Shadowable")


class Shadowable:
    """
    Mixin for contained classes that declare which of their attributes containers may shadow.

    The attributes are given as a class keyword; without it, the init fields of the dataclass are shadowable.

    Example:
        >>> from dataclasses import dataclass
        >>> from functools import cached_property
        >>> @dataclass
        ... class Foo(Shadowable, shadowable=("a", "b")):
        ...     a: int = 1
        ...     b: int = 2
        ...     c: int = 3
        ...
        >>> @dataclass
        ... @Foo.shadow(fmt=lambda name: f"foo_{name}")
        ... class Bar:
        ...     @cached_property
        ...     def foo(self) -> Foo:
        ...         return Foo.from_container(self)
        ...
        >>> Bar(foo_b=5).foo
        Foo(a=1, b=5, c=3)
    """

    _shadowable_attrs: ClassVar[Optional[Tuple[str, ...]]] = None
    """
    The attributes declared shadowable through the class keyword.
    """

    def __init_subclass__(cls, shadowable: Optional[Iterable[str]] = None, **kwargs):
        super().__init_subclass__(**kwargs)
        if shadowable is not None:
            if isinstance(shadowable, str):
                shadowable = (shadowable,)
            cls._shadowable_attrs = tuple(dict.fromkeys(shadowable))

    @classmethod
    def shadowable_attrs(cls) -> Tuple[str, ...]:
        """
        :return: The names of the attributes containers may shadow.
        """
        if cls._shadowable_attrs is not None:
            return cls._shadowable_attrs
        if is_dataclass(cls):
            return tuple(f.name for f in fields(cls) if f.init)
        return ()

    @classmethod
    def shadow(cls, attrs=None, **options) -> Callable[[T], T]:
        """
        Class decorator shadowing this class' attributes in a container, see :py:func:`shadowmatic.shadows`.
        """
        return shadowing.shadows(cls, attrs, **options)

    @classmethod
    def shadowed_attrs(cls, container: Optional[Type] = None, **options) -> Dict[str, str]:
        """
        See :py:func:`shadowmatic.shadowed_attrs`.
        """
        if container is None:
            container = shadowing._calling_container(1)
        return shadowing.shadowed_attrs(cls, container, **options)

    @classmethod
    def xtract_attrs(cls, container_instance: Any, **options) -> Dict[str, Any]:
        """
        See :py:func:`shadowmatic.xtract_attrs`.
        """
        return shadowing.xtract_attrs(cls, container_instance, **options)

    @classmethod
    def from_container(
        cls: Type[S],
        container_instance: Any,
        instance: Optional[str] = None,
        registry: Optional[ShadowRegistry] = None,
        **overrides,
    ) -> S:
        """
        Create an object from the values supplied to a container.

        :param container_instance: The container object.
        :param instance: The instance qualifier.
        :param registry: The registry to look in, defaults to the global registry.
        :param overrides: Constructor arguments taking precedence over the extracted ones.
        """
        kwargs = shadowing.xtract_attrs(
            cls, container_instance, instance=instance, registry=registry
        )
        kwargs.update(overrides)
        return cls(**kwargs)
