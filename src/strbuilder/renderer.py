"""
``strbuilder.renderer``: Turning values into text
=================================================

Values are rendered according to their :class:`~strbuilder.Category`:

+ :attr:`~strbuilder.Category.STREAMABLE`: ``str(value)`` (or the output of
  the converter registered for its type).
+ :attr:`~strbuilder.Category.PAIRING`: ``(first, second)``
+ :attr:`~strbuilder.Category.TUPLE`: ``(a, b, c)``
+ :attr:`~strbuilder.Category.SEQUENCE`: ``[a, b, c]``

Elements are rendered recursively, each according to its own category:

    >>> to_string([(1, "a"), (2, "b")], {"k": [None]})
    '[(1, a), (2, b)][(k, [None])]'

"""
from __future__ import annotations

import collections.abc
import io
from typing import Any, Callable, Final, Iterable, Protocol, TypeVar

from .categories import Category, check_renderable, get_converter

__all__ = ("Sink", "Renderer", "render", "to_string")

#: Put between the elements of pairings, tuples and sequences.
SEPARATOR: Final = ", "

TUPLE_DELIMITERS: Final = ("(", ")")
SEQUENCE_DELIMITERS: Final = ("[", "]")


class Sink(Protocol):
    """Where the text goes.

    Anything with a ``write`` method that accepts a :class:`str` will do:
    :class:`io.StringIO`, :data:`sys.stdout`, a file opened in text mode...
    """

    def write(self, text: str, /) -> object:  # pragma: no cover
        ...


S = TypeVar("S", bound=Sink)


def _elements(value: Any) -> Iterable[Any]:
    # Mappings are sequences of their (key, value) pairs
    if isinstance(value, collections.abc.Mapping):
        return value.items()
    iterable: Iterable[Any] = value
    return iterable


class Renderer:
    "Render values, passing the text to *write* one fragment at a time."

    write: Callable[[str], object]

    def __init__(self, write: Callable[[str], object]) -> None:
        self.write = write

    def format_list(
        self,
        values: Iterable[Any],
        *,
        sep: str = SEPARATOR,
        opar: str = "(",
        cpar: str = ")",
    ) -> None:
        write = self.write
        write(opar)
        first = True
        for value in values:
            if not first:
                write(sep)
            else:
                first = False
            self.render(value)
        write(cpar)

    def streamable(self, value: Any) -> None:
        converter = get_converter(type(value))
        if converter is None:
            self.write(str(value))
            return
        text = converter(value)
        if not isinstance(text, str):
            raise TypeError(
                f"Converter {converter!r} returned "
                f"{type(text).__name__}, expected str"
            )
        self.write(text)

    def pairing(self, value: Any) -> None:
        self.format_list((value.first, value.second))

    def fixed_tuple(self, value: tuple[Any, ...]) -> None:
        opar, cpar = TUPLE_DELIMITERS
        self.format_list(value, opar=opar, cpar=cpar)

    def sequence(self, value: Iterable[Any]) -> None:
        opar, cpar = SEQUENCE_DELIMITERS
        self.format_list(_elements(value), opar=opar, cpar=cpar)

    def render(self, value: Any) -> None:
        match check_renderable(value):
            case Category.STREAMABLE:
                self.streamable(value)
            case Category.PAIRING:
                self.pairing(value)
            case Category.TUPLE:
                self.fixed_tuple(value)
            case Category.SEQUENCE:
                self.sequence(value)


def render_to_text(*values: Any) -> str:
    """Render *values* back to back and return the text.

    Nothing is returned (or written anywhere) unless every value, including
    all their elements, could be rendered.
    """
    for value in values:
        check_renderable(value)
    parts: list[str] = []
    renderer = Renderer(parts.append)
    for value in values:
        renderer.render(value)
    return "".join(parts)


def render(stream: S, *values: Any) -> S:
    """Render *values* to *stream*.

    The values are written one after the other, without anything in between:

      >>> import sys
      >>> _ = render(sys.stdout, 1, "x", [1, 2])
      1x[1, 2]

    If any of the values (or any of their elements) cannot be rendered
    nothing gets written.

    Args:
      stream: The sink the text is written to.
      *values: The values to render.

    Returns:
      *stream*, so calls can be chained.

    Raises:
      UnrenderableError: One of the values, or one of their elements, is
        :attr:`~strbuilder.Category.UNRENDERABLE`.
    """
    stream.write(render_to_text(*values))
    return stream


def to_string(*values: Any) -> str:
    """Render *values* to a string.

      >>> to_string(1, "x", [1, 2])
      '1x[1, 2]'
      >>> to_string((), [], ("a",))
      '()[](a)'

    Args:
      *values: The values to render.
    """
    out = io.StringIO()
    render(out, *values)
    return out.getvalue()
