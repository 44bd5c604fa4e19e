"""A flake8 plugin that catches rendering errors before the code runs.

Calls to :func:`~strbuilder.to_string`, :func:`~strbuilder.render`,
:func:`~strbuilder.format_string` and :func:`~strbuilder.render_format` are
checked for:

+ ``SB1``: malformed literal templates
+ ``SB2``: literal templates whose number of ``%s`` doesn't match the number
  of values passed
+ ``SB3``: values that can never be rendered (``lambda``, ``...``,
  ``object()``)

Only calls that resolve to :mod:`strbuilder` are checked: names imported with
``from strbuilder import ...`` and attributes of a module imported with
``import strbuilder``. Functions with the same names from other libraries are
left alone.

The plugin is registered under the ``SB`` prefix.
"""

from __future__ import annotations

import ast
import importlib.metadata
from typing import Any, Final, Iterator, Type

from .template import FormatError, count_slots

#: function name -> index of the first value in the positional arguments
RENDER_FUNCTIONS: Final = {"to_string": 0, "render": 1}

#: function name -> index of the template in the positional arguments
FORMAT_FUNCTIONS: Final = {"format_string": 0, "render_format": 1}

CHECKED_FUNCTIONS: Final = RENDER_FUNCTIONS.keys() | FORMAT_FUNCTIONS.keys()


def _is_strbuilder(module: str) -> bool:
    return module == "strbuilder" or module.startswith("strbuilder.")


def _unrenderable_kind(node: ast.expr) -> str | None:
    "What *node* is, if it evaluates to something that cannot be rendered"
    match node:
        case ast.Lambda():
            return "lambda"
        case ast.Constant(value) if value is Ellipsis:
            return "ellipsis"
        case ast.Call(ast.Name("object"), [], []):
            return "object"
    return None


class RenderCallFinder(ast.NodeVisitor):
    errors: list[tuple[int, int, str]]
    # local name -> strbuilder function it is bound to
    functions: dict[str, str]
    # local names bound to strbuilder (or one of its modules)
    modules: set[str]

    def __init__(self) -> None:
        self.errors = []
        self.functions = {}
        self.modules = set()

    def collect_imports(self, tree: ast.AST) -> None:
        for node in ast.walk(tree):
            match node:
                case ast.Import(aliases):
                    for alias in aliases:
                        if not _is_strbuilder(alias.name):
                            continue
                        if alias.asname is not None:
                            self.modules.add(alias.asname)
                        else:
                            self.modules.add(alias.name.split(".", 1)[0])
                case ast.ImportFrom(
                    module=str(module), names=aliases, level=0
                ) if _is_strbuilder(module):
                    for alias in aliases:
                        local = alias.asname or alias.name
                        if alias.name in CHECKED_FUNCTIONS:
                            self.functions[local] = alias.name
                        else:
                            self.modules.add(local)

    def _resolve(self, func: ast.expr) -> str:
        "The strbuilder function *func* refers to (empty if it is not one)"
        match func:
            case ast.Name(name):
                return self.functions.get(name, "")
            case ast.Attribute(value, attr) if attr in CHECKED_FUNCTIONS:
                while isinstance(value, ast.Attribute):
                    value = value.value
                if isinstance(value, ast.Name) and value.id in self.modules:
                    return attr
        return ""

    def _error(self, node: ast.expr, msg: str) -> None:
        self.errors.append((node.lineno, node.col_offset, msg))

    def _check_values(self, values: list[ast.expr]) -> None:
        for value in values:
            kind = _unrenderable_kind(value)
            if kind is not None:
                self._error(value, f"SB3 {kind} values cannot be rendered")

    def _check_template(
        self, template: ast.expr, values: list[ast.expr]
    ) -> None:
        match template:
            case ast.Constant(str(text)):
                pass
            case _:
                return
        try:
            expected = count_slots(text)
        except FormatError as e:
            self._error(template, f"SB1 malformed format string: {e}")
            return
        if any(isinstance(v, ast.Starred) for v in values):
            return
        if expected != len(values):
            self._error(
                template,
                f"SB2 format string expects {expected} value(s), "
                f"got {len(values)}",
            )

    def visit_Call(self, node: ast.Call) -> None:
        name = self._resolve(node.func)
        if name in RENDER_FUNCTIONS:
            self._check_values(node.args[RENDER_FUNCTIONS[name] :])
        elif name in FORMAT_FUNCTIONS:
            idx = FORMAT_FUNCTIONS[name]
            if len(node.args) > idx and not any(
                isinstance(arg, ast.Starred) for arg in node.args[: idx + 1]
            ):
                values = node.args[idx + 1 :]
                self._check_template(node.args[idx], values)
                self._check_values(values)
        self.generic_visit(node)


class CheckRenderable:
    options = None
    name = __name__
    version = importlib.metadata.version("strbuilder")

    def __init__(self, tree: ast.Module, filename: str) -> None:
        self._tree = tree
        self._filename = filename

    def run(self) -> Iterator[tuple[int, int, str, Type[Any]]]:
        v = RenderCallFinder()
        v.collect_imports(self._tree)
        v.visit(self._tree)
        for line, col, msg in v.errors:
            yield (line, col, msg, type(self))
