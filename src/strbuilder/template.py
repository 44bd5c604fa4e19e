"""
``strbuilder.template``: ``%s`` templates
=========================================

A very small subset of ``printf``-style formatting. A template is a literal
string where:

+ ``%s`` is replaced by the next value, rendered with
  :func:`~strbuilder.to_string`
+ ``%%`` is replaced by a single ``%``

Anything else following a ``%`` is an error, and so is a mismatch between the
number of ``%s`` and the number of values.

    >>> format_string("%s and %s", 1, [2, 3])
    '1 and [2, 3]'
    >>> format_string("100%% done, %s left", 5)
    '100% done, 5 left'

"""
from __future__ import annotations

import io
from typing import Any, Final, Iterator

from .renderer import S, render_to_text

__all__ = (
    "FormatError",
    "scan",
    "count_slots",
    "render_format",
    "format_string",
)

#: The character that starts a placeholder
MARKER: Final = "%"

#: Follows :data:`MARKER` in placeholders that get substituted
SUBSTITUTION: Final = "s"


class FormatError(ValueError):
    "Raised for malformed templates or when the values do not match the slots"


def scan(template: str) -> Iterator[str | None]:
    """Split a template in literal text and substitution slots.

    Literal text is yielded as strings, slots as :const:`None`:

      >>> list(scan("a%sb%%c"))
      ['a', None, 'b', '%', 'c']

    The template is scanned lazily: all the parts before a malformed
    placeholder are yielded before :class:`FormatError` is raised.
    """
    begin = 0
    end = len(template)
    while begin < end:
        marker = template.find(MARKER, begin)
        if marker == -1:
            yield template[begin:]
            return
        if marker > begin:
            yield template[begin:marker]
        begin = marker + 1
        if begin == end:
            raise FormatError(
                f"format strings must not end on an unmatched {MARKER!r}"
            )
        specifier = template[begin]
        if specifier == MARKER:
            yield MARKER
        elif specifier == SUBSTITUTION:
            yield None
        else:
            raise FormatError(
                "format string contains an illegal format specifier: "
                f"{MARKER + specifier!r}"
            )
        begin += 1


def count_slots(template: str) -> int:
    """Number of values a template expects.

      >>> count_slots("%s%%s %s")
      2
    """
    return sum(1 for part in scan(template) if part is None)


def render_format(stream: S, template: str, *values: Any) -> S:
    """Fill *template* with *values* and write the result to *stream*.

    All the values are rendered before anything is written so an
    unrenderable value leaves *stream* untouched. Literal text is written as
    the template gets scanned: when the template turns out to be malformed,
    the text preceding the error is already in *stream*.

    Args:
      stream: The sink the text is written to.
      template: The literal text, with ``%s`` where values go.
      *values: The values to substitute, in order.

    Returns:
      *stream*, so calls can be chained.

    Raises:
      FormatError: *template* is malformed or does not have exactly one
        ``%s`` per value.
      UnrenderableError: One of the values cannot be rendered.
    """
    rendered = [render_to_text(value) for value in values]
    pending = iter(rendered)
    for part in scan(template):
        if part is None:
            part = next(pending, None)
            if part is None:
                raise FormatError(
                    "format string requests more arguments than provided "
                    f"({len(rendered)})"
                )
        stream.write(part)
    leftover = sum(1 for _ in pending)
    if leftover:
        raise FormatError(
            f"{leftover} argument(s) left over after filling the format "
            f"string {template!r}"
        )
    return stream


def format_string(template: str, *values: Any) -> str:
    """Fill *template* with *values*.

      >>> format_string("%s: %s", "point", (1, 2))
      'point: (1, 2)'

    Args:
      template: The literal text, with ``%s`` where values go.
      *values: The values to substitute, in order.

    Raises:
      FormatError: *template* is malformed or does not have exactly one
        ``%s`` per value.
    """
    out = io.StringIO()
    render_format(out, template, *values)
    return out.getvalue()
