"""AST utilities and import collection for code generation.

This module provides helper functions for building Python AST nodes
and utilities for collecting and organizing imports during code generation.
"""

import ast
import sys
from collections.abc import Iterable

__all__ = [
    # AST helpers
    '_name',
    '_attr',
    '_union_expr',
    '_optional_expr',
    '_annotation',
    '_argument',
    '_assign',
    '_import',
    '_call',
    '_func',
    '_method',
    '_property',
    '_classmethod',
    '_class',
    '_return',
    '_docstring',
    '_constant_tuple',
    '_all',
    # Import collection
    'ImportCollector',
]


def _name(name: str) -> ast.Name:
    return ast.Name(id=name, ctx=ast.Load())


def _attr(value: str | ast.expr, attr: str) -> ast.Attribute:
    return ast.Attribute(
        value=_name(value) if isinstance(value, str) else value,
        attr=attr,
        ctx=ast.Load(),
    )


def _union_expr(types: list[ast.expr]) -> ast.expr:
    # A | B | C (using pipe operator instead of Union[A, B, C])
    if not types:
        raise ValueError('_union_expr requires at least one type')
    if len(types) == 1:
        return types[0]
    result = types[0]
    for t in types[1:]:
        result = ast.BinOp(left=result, op=ast.BitOr(), right=t)
    return result


def _optional_expr(inner: ast.expr) -> ast.expr:
    return _union_expr([inner, ast.Constant(value=None)])


def _annotation(hint: str, optional: bool = False) -> ast.expr:
    """Parse a type hint such as ``'list[str]'`` into an expression node."""
    expr = ast.parse(hint, mode='eval').body
    return _optional_expr(expr) if optional else expr


def _argument(name: str, value: ast.expr | None = None) -> ast.arg:
    return ast.arg(
        arg=name,
        annotation=value,
    )


def _assign(target: ast.expr, value: ast.expr) -> ast.Assign:
    # Ensure target has Store context
    if isinstance(target, ast.Name):
        target = ast.Name(id=target.id, ctx=ast.Store())
    elif isinstance(target, ast.Attribute):
        # For attributes, only the outermost needs Store context
        target.ctx = ast.Store()
    return ast.Assign(
        targets=[target],
        value=value,
    )


def _import(module: str, names: list[str]) -> ast.ImportFrom:
    level = len(module) - len(module.lstrip('.'))
    return ast.ImportFrom(
        module=module.lstrip('.') or None,
        names=[ast.alias(name=name) for name in names],
        level=level,
    )


def _call(
    func: ast.expr,
    args: list[ast.expr] | None = None,
    keywords: list[ast.keyword] | None = None,
) -> ast.Call:
    return ast.Call(
        func=func,
        args=args or [],
        keywords=keywords or [],
    )


def _func(
    name: str,
    args: list[ast.arg],
    body: list[ast.stmt],
    returns: ast.expr | None = None,
    kwargs: ast.arg = None,
    kwonlyargs: list[ast.arg] = None,
    kw_defaults: list[ast.expr] = None,
    defaults: list[ast.expr] = None,
    decorators: list[ast.expr] = None,
) -> ast.FunctionDef:
    return ast.FunctionDef(
        name=name,
        args=ast.arguments(
            posonlyargs=[],
            args=args,
            kwarg=kwargs,
            kwonlyargs=kwonlyargs or [],
            kw_defaults=kw_defaults or [],
            defaults=defaults or [],
        ),
        body=body,
        decorator_list=decorators or [],
        returns=returns,
        type_params=[],
    )


def _method(
    name: str,
    args: list[ast.arg],
    body: list[ast.stmt],
    returns: ast.expr | None = None,
    defaults: list[ast.expr] = None,
    decorators: list[ast.expr] = None,
    first: str = 'self',
) -> ast.FunctionDef:
    """Build a method; ``first`` is the implicit ``self``/``cls`` argument."""
    return _func(
        name,
        [_argument(first), *args],
        body,
        returns=returns,
        defaults=defaults,
        decorators=decorators,
    )


def _property(name: str, returns: ast.expr, body: list[ast.stmt]) -> ast.FunctionDef:
    return _method(name, [], body, returns=returns, decorators=[_name('property')])


def _classmethod(
    name: str, args: list[ast.arg], body: list[ast.stmt], returns: ast.expr | None = None
) -> ast.FunctionDef:
    return _method(
        name, args, body, returns=returns, decorators=[_name('classmethod')], first='cls'
    )


def _class(
    name: str,
    bases: list[ast.expr],
    body: list[ast.stmt],
    docstring: str | None = None,
) -> ast.ClassDef:
    statements = list(body)
    if docstring:
        statements.insert(0, _docstring(docstring))
    return ast.ClassDef(
        name=name,
        bases=bases,
        keywords=[],
        body=statements or [ast.Pass()],
        decorator_list=[],
        type_params=[],
    )


def _return(value: ast.expr | None = None) -> ast.Return:
    return ast.Return(value=value)


def _docstring(text: str) -> ast.Expr:
    return ast.Expr(value=ast.Constant(value=text.strip()))


def _constant_tuple(values: Iterable[str]) -> ast.Tuple:
    return ast.Tuple(elts=[ast.Constant(value=value) for value in values], ctx=ast.Load())


def _all(names: Iterable[str]) -> ast.Assign:
    return _assign(target=_name('__all__'), value=_constant_tuple(names))


# =============================================================================
# Import Collection
# =============================================================================


class ImportCollector:
    """Collects and manages imports for generated Python code.

    This class provides a centralized way to collect imports from various
    sources during code generation and convert them to AST import statements.
    It automatically deduplicates imports and sorts them for consistent output.

    Example:
        >>> collector = ImportCollector()
        >>> collector.add_imports({'typing': {'BinaryIO'}})
        >>> collector.add_import('.simple_struct', 'SimpleStruct')
        >>> imports = collector.to_ast()
        >>> # Returns [ImportFrom(module='typing', ...), ImportFrom(module='simple_struct', level=1, ...)]
    """

    def __init__(self):
        """Initialize an empty import collector."""
        self._imports: dict[str, set[str]] = {}

    def add_imports(self, imports: dict[str, Iterable[str]]) -> None:
        """Add imports from a dictionary mapping modules to sets of names.

        Args:
            imports: Dictionary mapping module names to sets of imported names.
                    Example: {'typing': {'BinaryIO'}, 'shapesmith.runtime': {'ShapeModel'}}
        """
        for module, names in imports.items():
            if module not in self._imports:
                self._imports[module] = set()
            self._imports[module].update(names)

    def add_import(self, module: str, name: str) -> None:
        """Add a single import.

        Args:
            module: The module to import from (e.g., 'typing', '.simple_struct').
            name: The name to import (e.g., 'BinaryIO', 'SimpleStruct').
        """
        if module not in self._imports:
            self._imports[module] = set()
        self._imports[module].add(name)

    def _get_import_category(self, module: str) -> int:
        """Get the sort category for a module.

        Uses sys.stdlib_module_names to dynamically detect standard library modules.

        Returns:
            0 for __future__, 1 for standard library, 2 for third-party,
            3 for local/relative imports.
        """
        if module == '__future__':
            return 0
        if module.startswith('.'):
            return 3

        base_module = module.split('.')[0]
        if base_module in sys.stdlib_module_names:
            return 1

        return 2

    def to_ast(self) -> list[ast.ImportFrom]:
        """Convert collected imports to AST ImportFrom statements.

        Imports are sorted according to Python conventions:
        1. ``from __future__`` imports
        2. Standard library imports
        3. Third-party imports
        4. Local/relative imports

        Within each category, imports are sorted alphabetically by module name.
        Names within each import are also sorted alphabetically.

        Returns:
            List of ast.ImportFrom statements, properly sorted.
        """
        sorted_modules = sorted(
            self._imports.items(),
            key=lambda x: (self._get_import_category(x[0]), x[0]),
        )
        return [_import(module, sorted(names)) for module, names in sorted_modules]

    def has_imports(self) -> bool:
        """Check if any imports have been collected.

        Returns:
            True if imports exist, False otherwise.
        """
        return bool(self._imports)
