"""
``strbuilder.categories``: Deciding how a value gets rendered
=============================================================

Every type falls into exactly one :class:`Category`. The category is derived
from what the type can do (its *shape*) rather than from a fixed list of
types. The tests are tried in a fixed order and the first one that matches
wins:

1. :attr:`Category.STREAMABLE`: the value has its own text conversion.
2. :attr:`Category.PAIRING`: the value exposes ``first`` and ``second``, and
   nothing else.
3. :attr:`Category.TUPLE`: the value is a :class:`tuple`.
4. :attr:`Category.SEQUENCE`: the value can be iterated over.
5. :attr:`Category.UNRENDERABLE`: none of the above.

Only the type is inspected, never the value itself. Attributes that are only
assigned in ``__init__`` are invisible: a pairing has to declare ``first`` and
``second`` (as dataclass fields, named tuple fields, ``__slots__`` or
properties) or be a :class:`Pair`.

    >>> classify(str)
    <Category.STREAMABLE: 5>
    >>> classify(Pair)
    <Category.PAIRING: 4>
    >>> classify(list)
    <Category.SEQUENCE: 2>

"""
from __future__ import annotations

import collections.abc
import dataclasses
import enum
import inspect
import logging
import numbers
import types
import typing
import weakref
from typing import Any, Callable, Final, NamedTuple, Type, TypeAlias, TypeVar

T = TypeVar("T")

Converter: TypeAlias = Callable[[T], str]

__all__ = (
    "Category",
    "Pair",
    "UnrenderableError",
    "classify",
    "check_renderable",
    "register",
)

logger = logging.getLogger(__name__)


class Category(enum.Enum):
    "How values of a given type are turned into text"

    #: None of the other categories apply.
    UNRENDERABLE = enum.auto()

    #: Iterable: rendered as ``[a, b, c]``.
    SEQUENCE = enum.auto()

    #: Fixed size tuple: rendered as ``(a, b, c)``.
    TUPLE = enum.auto()

    #: Has a ``first`` and a ``second``: rendered as ``(first, second)``.
    PAIRING = enum.auto()

    #: Has its own text conversion: rendered verbatim.
    STREAMABLE = enum.auto()


class Pair(NamedTuple):
    """A two element container.

    :class:`Pair` is a :class:`tuple` but it is classified as a
    :attr:`~Category.PAIRING` rather than as a :attr:`~Category.TUPLE`.

        >>> p = Pair(1, "a")
        >>> p.first, p.second
        (1, 'a')
    """

    first: Any
    second: Any


class UnrenderableError(TypeError):
    "Raised when trying to render a value that belongs to no category"


#: Types that are rendered with :class:`str`, as well as all their subclasses.
NATIVE_STREAMABLE: Final = (
    str,
    bytes,
    bytearray,
    numbers.Number,
    types.NoneType,
)

#: The attributes a pairing has to expose.
PAIR_FIELDS: Final = ("first", "second")

# Converters registered via `register`. They are looked up by exact type.
DISPATCH_TABLE = weakref.WeakKeyDictionary[Type[Any], Converter[Any]]()

# type -> category. Cleared whenever `DISPATCH_TABLE` changes.
CATEGORY_CACHE = weakref.WeakKeyDictionary[Type[Any], Category]()


def _infer_converter_type(f: Converter[T]) -> Type[T]:
    values = list(inspect.signature(f, eval_str=True).parameters.values())
    if len(values) != 1:
        raise ValueError(
            "The registered function should take only one argument"
        )
    [arg] = values
    ty: Type[T] | None = arg.annotation
    origin = typing.get_origin(ty)
    if origin is not None:
        ty = origin
    if ty is inspect.Parameter.empty or ty is None:
        raise ValueError(
            f"Cannot infer which type {f.__name__!r} converts: its argument "
            "is not annotated"
        )
    return ty


@typing.overload
def register(function: Converter[T], /) -> Converter[T]:  # pragma: no cover
    ...


@typing.overload
def register(
    *, type: Type[T] | None = None
) -> Callable[[Converter[T]], Converter[T]]:  # pragma: no cover
    ...


def register(
    function: Converter[T] | None = None,
    /,
    *,
    type: Type[T] | None = None,
) -> Converter[T] | Callable[[Converter[T]], Converter[T]]:
    """Register the function used to turn values of a given type into text.

    Values whose type has a registered converter are
    :attr:`~Category.STREAMABLE`; the text they render to is whatever
    *function* returns. The lookup is done on the exact type of the value,
    subclasses are not affected.

    This is also the way to render types the classification cannot see
    through, such as a plain class that only sets ``self.first`` and
    ``self.second`` in its ``__init__``.

    If *type* is not specified, :func:`register` uses the type annotation on
    the first argument to deduce which type to register *function* for.

    Here are three equivalent ways to render :class:`range` objects as their
    bounds::

        >>> @register
        ... def _range_to_text(r: range):
        ...   return f"{r.start}..{r.stop}"

        >>> @register()
        ... def _range_to_text(r: range):
        ...   return f"{r.start}..{r.stop}"

        >>> @register(type=range)
        ... def _range_to_text(r):
        ...   return f"{r.start}..{r.stop}"

    .. doctest::
       :hide:

        >>> del DISPATCH_TABLE[range]
        >>> CATEGORY_CACHE.clear()

    Args:

      function: The converter we are registering. It takes one value and
        returns a :class:`str`.

      type: The type we are registering the function for.

    """

    def wrapper(function: Converter[T]) -> Converter[T]:
        cls = _infer_converter_type(function) if type is None else type
        DISPATCH_TABLE[cls] = function
        CATEGORY_CACHE.clear()
        logger.debug("Registered converter %r for %s", function, cls)
        return function

    if function is None:
        return wrapper
    return wrapper(function)


def get_converter(ty: Type[T]) -> Converter[T] | None:
    """Get the converter registered for a given type (if any)."""
    return DISPATCH_TABLE.get(ty)


MISSING = object()


def _defines_str(ty: type) -> bool:
    return any(
        "__str__" in vars(cls) for cls in ty.__mro__ if cls is not object
    )


def _has_field(ty: type, name: str) -> bool:
    "Does *ty* expose *name* as a data attribute (rather than a method)?"
    if name in getattr(ty, "__dataclass_fields__", ()):
        return True
    for cls in ty.__mro__:
        attr = vars(cls).get(name, MISSING)
        if attr is not MISSING:
            # Properties, slots and named tuple fields are not callable
            return not callable(attr)
    return False


def is_streamable(ty: type) -> bool:
    return (
        ty in DISPATCH_TABLE
        or issubclass(ty, NATIVE_STREAMABLE)
        or _defines_str(ty)
    )


def _declared_fields(ty: type) -> set[str] | None:
    "The data fields *ty* declares, None if it does not declare them"
    if dataclasses.is_dataclass(ty):
        return {f.name for f in dataclasses.fields(ty)}
    if issubclass(ty, tuple):
        # Plain tuples (and subclasses without `_fields`) have no fixed size
        return set(getattr(ty, "_fields", ()))
    slots = set[str]()
    for cls in ty.__mro__:
        names = vars(cls).get("__slots__", ())
        slots.update((names,) if isinstance(names, str) else names)
    slots -= {"__dict__", "__weakref__"}
    return slots or None


def is_pairing(ty: type) -> bool:
    fields = _declared_fields(ty)
    # Anything holding more than `first` and `second` is not a pair
    if fields is not None and fields != set(PAIR_FIELDS):
        return False
    return all(_has_field(ty, name) for name in PAIR_FIELDS)


def is_tuple(ty: type) -> bool:
    return issubclass(ty, tuple)


def is_sequence(ty: type) -> bool:
    return issubclass(ty, collections.abc.Iterable)


def _compute_category(ty: type) -> Category:
    if is_streamable(ty):
        return Category.STREAMABLE
    if is_pairing(ty):
        return Category.PAIRING
    if is_tuple(ty):
        return Category.TUPLE
    if is_sequence(ty):
        return Category.SEQUENCE
    return Category.UNRENDERABLE


def classify(ty: type) -> Category:
    """Get the :class:`Category` of a type.

    The result is computed once per type and then cached.

    Args:
      ty: The type of the values we want to render.
    """
    category = CATEGORY_CACHE.get(ty)
    if category is None:
        category = CATEGORY_CACHE[ty] = _compute_category(ty)
        logger.debug("Classified %s as %s", ty.__qualname__, category.name)
    return category


def check_renderable(value: Any) -> Category:
    """Get the category of *value*, raise if it cannot be rendered.

    Only *value* itself is checked: its elements are checked when they are
    rendered.

    Raises:
      UnrenderableError: *value*'s type is :attr:`~Category.UNRENDERABLE`.
    """
    ty = type(value)
    category = classify(ty)
    if category is Category.UNRENDERABLE:
        raise UnrenderableError(
            f"Object of type {ty.__name__} cannot be rendered by `strbuilder`"
        )
    return category
