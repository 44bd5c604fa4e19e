from __future__ import annotations

import io

import pytest

from strbuilder import (
    FormatError,
    Pair,
    UnrenderableError,
    format_string,
    render_format,
    template,
)

from . import value_utils


def test_substitution():
    assert format_string("%s and %s", 1, 2) == "1 and 2"
    assert format_string("%s", [Pair(1, "a")]) == "[(1, a)]"
    assert format_string("(%s)%s", (), "") == "(())"
    assert format_string("no slots") == "no slots"
    assert format_string("") == ""


def test_escape():
    assert format_string("100%% done, %s left", 5) == "100% done, 5 left"
    assert format_string("%%s") == "%s"
    assert format_string("%%%s%%", 7) == "%7%"


@pytest.mark.parametrize(
    "fmt, values, msg",
    (
        ("%s", (), "more arguments than provided"),
        ("%s %s", (1,), "more arguments than provided"),
        ("x", (1,), "1 argument"),
        ("%s", (1, 2, 3), "2 argument"),
        ("50%", (), "unmatched '%'"),
        ("%s%", (1,), "unmatched '%'"),
        ("%d", (1,), "illegal format specifier: '%d'"),
        ("%S", (1,), "illegal format specifier"),
    ),
)
def test_errors(fmt, values, msg):
    with pytest.raises(FormatError, match=msg):
        format_string(fmt, *values)


def test_format_error_is_value_error():
    with pytest.raises(ValueError):
        format_string("%")


def test_no_rollback():
    out = io.StringIO()
    with pytest.raises(FormatError):
        render_format(out, "abc %d", 1)
    assert out.getvalue() == "abc "

    out = io.StringIO()
    with pytest.raises(FormatError):
        render_format(out, "a%sb%s", 1)
    assert out.getvalue() == "a1b"

    out = io.StringIO()
    with pytest.raises(FormatError):
        render_format(out, "x", 1)
    assert out.getvalue() == "x"


def test_unrenderable_before_output():
    sink = value_utils.RecordingSink()
    with pytest.raises(UnrenderableError):
        render_format(sink, "a %s b %s", 1, [object()])
    assert sink.writes == []


def test_render_format_returns_stream():
    out = io.StringIO()
    assert render_format(out, "%s", 1) is out
    assert render_format(out, "-%s", [2]) is out
    assert out.getvalue() == "1-[2]"


def test_scan():
    assert list(template.scan("")) == []
    assert list(template.scan("abc")) == ["abc"]
    assert list(template.scan("%s%s")) == [None, None]
    assert list(template.scan("a%%b%sc")) == ["a", "%", "b", None, "c"]

    parts = template.scan("ok %q")
    assert next(parts) == "ok "
    with pytest.raises(FormatError):
        next(parts)


def test_count_slots():
    assert template.count_slots("") == 0
    assert template.count_slots("%s, %s and %%s") == 2
    with pytest.raises(FormatError):
        template.count_slots("%s%")
