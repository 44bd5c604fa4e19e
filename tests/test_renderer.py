from __future__ import annotations

import collections
import decimal
import enum
import fractions
import io
import pathlib

import pytest

from strbuilder import (
    Pair,
    Renderer,
    UnrenderableError,
    categories,
    register,
    render,
    to_string,
)

from . import value_utils
from .value_utils import Point


@pytest.fixture(autouse=True)
def _auto_clean(monkeypatch):
    monkeypatch.setattr(
        categories, "DISPATCH_TABLE", categories.DISPATCH_TABLE.copy()
    )
    monkeypatch.setattr(
        categories, "CATEGORY_CACHE", categories.CATEGORY_CACHE.copy()
    )


class Color(enum.Enum):
    RED = 1


@pytest.mark.parametrize(
    "value",
    (
        0,
        -12,
        2**80,
        1.5,
        float("nan"),
        1 + 2j,
        True,
        None,
        "",
        "hello, world",
        b"bytes",
        decimal.Decimal("1.10"),
        fractions.Fraction(1, 3),
        Color.RED,
        pathlib.PurePosixPath("/tmp/x"),
        KeyError("k"),
        value_utils.Celsius(21),
    ),
)
def test_streamable(value):
    assert to_string(value) == str(value)


def test_strings_are_not_sequences():
    assert to_string("abc") == "abc"
    assert to_string(["ab", "c"]) == "[ab, c]"
    assert to_string(value_utils.Tagged([1, 2])) == "tagged2"


def test_pairing():
    assert to_string(Pair(1, "a")) == "(1, a)"
    assert to_string(value_utils.Edge("x", [1])) == "(x, [1])"
    assert to_string(value_utils.SlotPair(None, ())) == "(None, ())"
    assert to_string(value_utils.Interval(0, 2.5)) == "(0, 2.5)"


def test_more_than_two_fields():
    assert to_string(value_utils.Triple(1, 2, 3)) == "(1, 2, 3)"
    assert to_string(value_utils.SlotTripleBag("a", "b", 0.5)) == (
        "[a, b, 0.5]"
    )
    with pytest.raises(UnrenderableError, match="WeightedEdge"):
        to_string(value_utils.WeightedEdge("a", "b", 0.5))


def test_tuple():
    assert to_string(()) == "()"
    assert to_string((1,)) == "(1)"
    assert to_string((1, "a", 2.5)) == "(1, a, 2.5)"
    assert to_string(value_utils.Coord(3, 4)) == "(3, 4)"


def test_sequence():
    assert to_string([]) == "[]"
    assert to_string([1]) == "[1]"
    assert to_string([1, 2, 3]) == "[1, 2, 3]"
    assert to_string({7}) == "[7]"
    assert to_string(range(3)) == "[0, 1, 2]"
    assert to_string(x * x for x in range(4)) == "[0, 1, 4, 9]"
    assert to_string(collections.deque("ab")) == "[a, b]"
    assert to_string(value_utils.Bag()) == "[]"
    assert to_string(value_utils.Ranking(2, 1)) == "[2, 1]"


def test_mapping():
    assert to_string({}) == "[]"
    assert to_string({"a": 1, "b": [2]}) == "[(a, 1), (b, [2])]"
    assert (
        to_string(collections.OrderedDict(x=Pair(1, 2))) == "[(x, (1, 2))]"
    )


def test_nested():
    assert to_string([(1, 2), (3, 4)]) == "[(1, 2), (3, 4)]"
    assert (
        to_string([Pair([1], (2, "x")), Pair({}, ())])
        == "[([1], (2, x)), ([], ())]"
    )
    assert to_string(((), [()], [[]])) == "((), [()], [[]])"

    deep: list = []
    for _ in range(50):
        deep = [deep]
    assert to_string(deep) == "[" * 51 + "]" * 51


def test_concatenation():
    assert to_string() == ""
    assert to_string(1, "x", [1, 2]) == "1x[1, 2]"
    assert to_string("a", "b") == "ab"


def test_fragments():
    parts = []
    renderer = Renderer(parts.append)
    renderer.render([1, Pair("a", ())])
    assert parts == ["[", "1", ", ", "(", "a", ", ", "(", ")", ")", "]"]


def test_render_to_stream():
    out = io.StringIO()
    assert render(out, 1, [2]) is out
    assert render(render(out, "-"), (3,)) is out
    assert out.getvalue() == "1[2]-(3)"


def test_render_one_write():
    sink = value_utils.RecordingSink()
    render(sink, [1, 2], "x")
    assert sink.writes == ["[1, 2]x"]


@pytest.mark.parametrize(
    "values",
    (
        (object(),),
        (1, object()),
        ([1, 2, Point(1, 2)],),
        ("ok", {"k": [lambda: 0]}),
        (Pair(1, ...),),
    ),
)
def test_unrenderable(values):
    sink = value_utils.RecordingSink()
    with pytest.raises(UnrenderableError, match="cannot be rendered"):
        render(sink, *values)
    assert sink.writes == []


def test_sink_errors_propagate():
    with pytest.raises(OSError, match="disk full"):
        render(value_utils.BrokenSink(), 1)


def test_registered_converter():
    @register
    def _point(p: Point) -> str:
        return f"<{p.x}, {p.y}>"

    assert to_string(Point(1, 2)) == "<1, 2>"
    assert to_string([Point(0, 0), Pair(Point(1, 1), 2)]) == (
        "[<0, 0>, (<1, 1>, 2)]"
    )


def test_register_overrides_str():
    register(type=value_utils.Celsius)(lambda c: f"{c.degrees} degrees")
    assert to_string(value_utils.Celsius(3)) == "3 degrees"


def test_converter_must_return_str():
    register(type=Point)(lambda p: p.x)
    with pytest.raises(TypeError, match="returned int, expected str"):
        to_string(Point(1, 2))
