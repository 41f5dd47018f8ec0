"""Test suite for ast_utils module.

This module tests the AST helper functions used by the templates and the
import collector that orders generated imports.
"""

import ast

import pytest

from shapesmith.codegen.ast_utils import (
    ImportCollector,
    _all,
    _argument,
    _annotation,
    _assign,
    _attr,
    _call,
    _class,
    _classmethod,
    _import,
    _method,
    _name,
    _optional_expr,
    _property,
    _return,
    _union_expr,
)


def render(node):
    return ast.unparse(ast.fix_missing_locations(node))


class TestExpressions:
    """Tests for the expression helpers."""

    def test_name(self):
        """Test that _name creates a Name node with Load context."""
        result = _name('foo')
        assert isinstance(result, ast.Name)
        assert isinstance(result.ctx, ast.Load)

    def test_attr_accepts_string_or_node(self):
        assert render(_attr('self', '_value')) == 'self._value'
        assert render(_attr(_call(_name('super')), 'build')) == 'super().build'

    def test_union(self):
        assert render(_union_expr([_name('A'), _name('B'), _name('C')])) == 'A | B | C'
        assert render(_optional_expr(_name('str'))) == 'str | None'

    def test_union_requires_types(self):
        with pytest.raises(ValueError):
            _union_expr([])

    @pytest.mark.parametrize(
        'hint,optional,expected',
        [
            ('str', False, 'str'),
            ('list[str]', True, 'list[str] | None'),
            ('Mapping[str, tuple[bytes, ...]]', False, 'Mapping[str, tuple[bytes, ...]]'),
            ('SimpleStruct.Builder', False, 'SimpleStruct.Builder'),
        ],
    )
    def test_annotation(self, hint, optional, expected):
        """Test that type hints parse into annotation expressions."""
        assert render(_annotation(hint, optional=optional)) == expected


class TestStatements:
    """Tests for the statement helpers."""

    def test_assign_uses_store_context(self):
        node = _assign(_name('x'), ast.Constant(value=1))
        assert isinstance(node.targets[0].ctx, ast.Store)
        assert render(node) == 'x = 1'

    def test_relative_import(self):
        node = _import('.simple_struct', ['SimpleStruct'])
        assert node.level == 1
        assert render(node) == 'from .simple_struct import SimpleStruct'

    def test_absolute_import(self):
        assert _import('shapesmith.runtime', ['ShapeModel']).level == 0

    def test_all(self):
        assert render(_all(['A', 'B'])) == "__all__ = ('A', 'B')"

    def test_method_and_decorators(self):
        prop = _property('value', _name('str'), [_return(_attr('self', '_value'))])
        factory = _classmethod('builder', [], [_return(_call(_name('cls')))])
        cls = _class('Thing', [_name('Base')], [prop, factory], docstring='A thing.')
        source = render(cls)
        assert '@property\n    def value(self) -> str:' in source
        assert '@classmethod\n    def builder(cls):' in source
        assert source.startswith("class Thing(Base):\n    \"\"\"A thing.\"\"\"")

    def test_method_defaults(self):
        method = _method('f', [_argument('x')], [ast.Pass()], defaults=[ast.Constant(value=None)])
        assert render(method) == 'def f(self, x=None):\n    pass'

    def test_empty_class_gets_pass(self):
        assert render(_class('Empty', [], [])) == 'class Empty:\n    pass'


class TestImportCollector:
    """Tests for ImportCollector."""

    def test_sorting_by_category(self):
        collector = ImportCollector()
        collector.add_import('.sibling', 'Sibling')
        collector.add_import('shapesmith.runtime', 'ShapeModel')
        collector.add_import('typing', 'Any')
        collector.add_import('__future__', 'annotations')
        modules = [node.module for node in collector.to_ast()]
        assert modules == ['__future__', 'typing', 'shapesmith.runtime', 'sibling']

    def test_names_are_merged_and_sorted(self):
        collector = ImportCollector()
        collector.add_imports({'typing': {'TYPE_CHECKING'}})
        collector.add_imports({'typing': ['Any', 'TYPE_CHECKING']})
        assert render(collector.to_ast()[0]) == 'from typing import Any, TYPE_CHECKING'

    def test_has_imports(self):
        collector = ImportCollector()
        assert not collector.has_imports()
        collector.add_import('decimal', 'Decimal')
        assert collector.has_imports()
