"""AST templates, one per kind of generated class.

Each template is a pure function ``CodeModel -> ast.Module``. The emitter
looks templates up by ``CodeModelKind``; replacing an entry changes how that
kind of class is rendered without touching the others.

Every structure-like template renders the same skeleton::

    class Name(Supertype):
        SHAPE_NAME = ...
        MEMBERS = (...)

        def __init__(self, builder): ...
        @property
        def member(self): ...
        def to_builder(self): ...
        @classmethod
        def builder(cls): ...

        class Builder(Supertype.Builder):
            def __init__(self, model=None): ...
            def inherited_member(self, value): ...   # covariant re-declaration
            def member(self, value): ...
            def get_member(self): ...
            def build(self): ...

and adds what its kind needs on top (error constants, event variants, ...).
"""

import ast
from collections.abc import Callable

from shapesmith.codegen.ast_utils import (
    ImportCollector,
    _all,
    _annotation,
    _argument,
    _assign,
    _attr,
    _call,
    _class,
    _classmethod,
    _constant_tuple,
    _docstring,
    _method,
    _name,
    _property,
    _return,
)
from shapesmith.codegen.code_model import (
    RUNTIME_MODULE,
    CodeModel,
    CodeModelKind,
    CopyPlan,
    FieldModel,
)
from shapesmith.runtime.enums import UNKNOWN_ENUM_VALUE

__all__ = [
    'Template',
    'DEFAULT_TEMPLATES',
    'render_structure',
    'render_exception',
    'render_event_union',
    'render_event_member',
    'render_enum',
    'render_base_exception',
    'render_base_request',
    'render_base_response',
]

Template = Callable[[CodeModel], ast.Module]

# Runtime bases that have no nested Builder of their own.
_PLAIN_BASES = frozenset({'ShapeModel', 'EventMember'})


# =============================================================================
# Expressions
# =============================================================================


def _copy_callable(plan: CopyPlan) -> ast.expr:
    """The plan as a one-argument callable, for use as an ``item`` copier."""
    if plan.item is None:
        return _name(plan.function)
    return _call(
        _name('partial'),
        [_name(plan.function)],
        [ast.keyword(arg='item', value=_copy_callable(plan.item))],
    )


def _apply(plan: CopyPlan | None, value: ast.expr) -> ast.expr:
    if plan is None:
        return value
    args = [value]
    if plan.item is not None:
        args.append(_copy_callable(plan.item))
    return _call(_name(plan.function), args)


def _plan_needs_partial(plan: CopyPlan | None) -> bool:
    return plan is not None and plan.depth > 2


def _self_attr(name: str) -> ast.Attribute:
    return _attr('self', name)


def _builder_ref(model: CodeModel) -> ast.expr:
    return _annotation(f'{model.class_name}.Builder')


def _super_call(method: str, args: list[ast.expr]) -> ast.Expr:
    return ast.Expr(value=_call(_attr(_call(_name('super')), method), args))


def _field_doc(field: FieldModel) -> str | None:
    lines = []
    if field.documentation:
        lines.append(field.documentation.strip())
    if field.deprecated:
        lines.append('Deprecated.')
    if field.streaming:
        lines.append('Streaming payload; the stream is passed through without copying.')
    return '\n\n'.join(lines) or None


def _class_doc(model: CodeModel) -> str | None:
    lines = []
    if model.documentation:
        lines.append(model.documentation.strip())
    if model.deprecated:
        lines.append('Deprecated.')
    return '\n\n'.join(lines) or None


def _with_doc(doc: str | None, body: list[ast.stmt]) -> list[ast.stmt]:
    return [_docstring(doc), *body] if doc else body


# =============================================================================
# Class body
# =============================================================================


def _constants(model: CodeModel) -> list[ast.stmt]:
    return [
        _assign(_name('SHAPE_NAME'), ast.Constant(value=model.shape_name)),
        _assign(_name('MEMBERS'), _constant_tuple(model.members)),
    ]


def _service_constants(model: CodeModel) -> list[ast.stmt]:
    return [_assign(_name('SERVICE_NAME'), ast.Constant(value=model.service_name))]


def _error_constants(model: CodeModel) -> list[ast.stmt]:
    body = [_assign(_name('ERROR_CODE'), ast.Constant(value=model.error_code))]
    if model.http_status_code is not None:
        body.append(
            _assign(_name('HTTP_STATUS_CODE'), ast.Constant(value=model.http_status_code))
        )
    if model.sender_fault:
        body.append(_assign(_name('SENDER_FAULT'), ast.Constant(value=True)))
    return body


def _polymorphic_constants(model: CodeModel) -> list[ast.stmt]:
    if not model.subtypes:
        return []
    body = [_assign(_name('SUBTYPES'), _constant_tuple(model.subtypes))]
    if model.discriminator:
        body.append(_assign(_name('DISCRIMINATOR'), ast.Constant(value=model.discriminator)))
    return body


def _variant_constants(model: CodeModel) -> list[ast.stmt]:
    variants = ast.Dict(
        keys=[ast.Constant(value=tag) for tag, _ in model.variants],
        values=[ast.Constant(value=attr) for _, attr in model.variants],
    )
    return [_assign(_name('VARIANTS'), _call(_name('MappingProxyType'), [variants]))]


def _value_init(model: CodeModel) -> ast.FunctionDef:
    body: list[ast.stmt] = []
    if model.inherited or model.kind == CodeModelKind.EVENT_UNION:
        body.append(_super_call('__init__', [_name('builder')]))
    for field in model.fields:
        value = _call(_attr('builder', field.getter_name))
        body.append(
            ast.Expr(
                value=_call(
                    _self_attr('_init_member'),
                    [ast.Constant(value=field.attribute), _apply(field.value_copy, value)],
                )
            )
        )
    return _method(
        '__init__',
        [_argument('builder', _builder_ref(model))],
        body or [ast.Pass()],
        returns=ast.Constant(value=None),
    )


def _value_property(field: FieldModel) -> ast.FunctionDef:
    return _property(
        field.attribute,
        _annotation(field.value_hint, optional=True),
        _with_doc(
            _field_doc(field),
            [_return(_apply(field.read_copy, _self_attr(field.private_name)))],
        ),
    )


def _builder_factories(model: CodeModel) -> list[ast.stmt]:
    builder_cls = _attr(model.class_name, 'Builder')
    return [
        _method(
            'to_builder',
            [],
            [_return(_call(builder_cls, [_name('self')]))],
            returns=_builder_ref(model),
        ),
        _classmethod(
            'builder',
            [],
            [_return(_call(_attr(model.class_name, 'Builder')))],
            returns=_builder_ref(model),
        ),
    ]


def _builder_base(model: CodeModel) -> ast.expr:
    supertype = model.supertype
    if supertype.is_runtime and supertype.name in _PLAIN_BASES:
        return _name('ShapeBuilder')
    return _attr(supertype.name, 'Builder')


def _builder_init(model: CodeModel) -> ast.FunctionDef:
    body: list[ast.stmt] = [_super_call('__init__', [_name('model')])]
    for field in model.fields:
        body.append(
            ast.AnnAssign(
                target=ast.Attribute(
                    value=_name('self'), attr=field.private_name, ctx=ast.Store()
                ),
                annotation=_annotation(field.builder_hint, optional=True),
                value=ast.Constant(value=None),
                simple=0,
            )
        )
    if model.fields:
        body.append(
            ast.If(
                test=ast.Compare(
                    left=_name('model'), ops=[ast.IsNot()], comparators=[ast.Constant(value=None)]
                ),
                body=[
                    _assign(
                        _self_attr(field.private_name),
                        _apply(field.builder_copy, _attr('model', field.attribute)),
                    )
                    for field in model.fields
                ],
                orelse=[],
            )
        )
    return _method(
        '__init__',
        [_argument('model', _annotation(model.class_name, optional=True))],
        body,
        returns=ast.Constant(value=None),
        defaults=[ast.Constant(value=None)],
    )


def _redeclared_setter(model: CodeModel, field: FieldModel) -> ast.FunctionDef:
    return _method(
        field.attribute,
        [_argument(field.attribute, _annotation(field.input_hint, optional=True))],
        [_super_call(field.attribute, [_name(field.attribute)]), _return(_name('self'))],
        returns=_builder_ref(model),
    )


def _setter(model: CodeModel, field: FieldModel) -> ast.FunctionDef:
    return _method(
        field.attribute,
        [_argument(field.attribute, _annotation(field.input_hint, optional=True))],
        _with_doc(
            _field_doc(field),
            [
                _assign(
                    _self_attr(field.private_name),
                    _apply(field.builder_copy, _name(field.attribute)),
                ),
                _return(_name('self')),
            ],
        ),
        returns=_builder_ref(model),
    )


def _getter(field: FieldModel) -> ast.FunctionDef:
    return _method(
        field.getter_name,
        [],
        [_return(_self_attr(field.private_name))],
        returns=_annotation(field.builder_hint, optional=True),
    )


def _unknown_setter(model: CodeModel) -> ast.FunctionDef:
    return _method(
        'unknown',
        [_argument('tag', _name('str')), _argument('payload', _name('Any'))],
        [_super_call('unknown', [_name('tag'), _name('payload')]), _return(_name('self'))],
        returns=_builder_ref(model),
        defaults=[ast.Constant(value=None)],
    )


def _members_dict(fields: tuple[FieldModel, ...]) -> ast.Dict:
    return ast.Dict(
        keys=[ast.Constant(value=f.attribute) for f in fields],
        values=[_self_attr(f.private_name) for f in fields],
    )


def _build_method(model: CodeModel) -> ast.FunctionDef:
    body: list[ast.stmt] = []
    token = model.idempotency_field
    if token is not None and model.auto_fill_idempotency_token:
        body.append(
            ast.If(
                test=ast.Compare(
                    left=_self_attr(token.private_name),
                    ops=[ast.Is()],
                    comparators=[ast.Constant(value=None)],
                ),
                body=[
                    _assign(_self_attr(token.private_name), _call(_name('new_idempotency_token')))
                ],
                orelse=[],
            )
        )
    if model.kind == CodeModelKind.EVENT_UNION:
        body.append(
            ast.Expr(
                value=_call(
                    _self_attr('_check_single_variant'),
                    [ast.Constant(value=model.shape_name), _members_dict(model.fields)],
                )
            )
        )
    elif model.enforce_required and model.required_fields:
        body.append(
            ast.Expr(
                value=_call(
                    _name('check_required'),
                    [ast.Constant(value=model.shape_name), _members_dict(model.required_fields)],
                )
            )
        )
    body.append(_return(_call(_name(model.class_name), [_name('self')])))
    return _method('build', [], body, returns=_name(model.class_name))


def _builder_class(model: CodeModel) -> ast.ClassDef:
    body: list[ast.stmt] = [_builder_init(model)]
    body += [_redeclared_setter(model, field) for field in model.inherited]
    if model.kind == CodeModelKind.EVENT_UNION:
        body.append(_unknown_setter(model))
    for field in model.fields:
        body += [_setter(model, field), _getter(field)]
    if model.is_buildable:
        body.append(_build_method(model))
    return _class('Builder', [_builder_base(model)], body)


def _structure_class(model: CodeModel, constants: list[ast.stmt] | None = None) -> ast.ClassDef:
    body = _constants(model) + (constants or [])
    body.append(_value_init(model))
    body += [_value_property(field) for field in model.fields]
    if model.is_buildable:
        body += _builder_factories(model)
    body.append(_builder_class(model))
    return _class(
        model.class_name,
        [_name(model.supertype.name)],
        body,
        docstring=_class_doc(model),
    )


# =============================================================================
# Imports and module
# =============================================================================


def _runtime_names(model: CodeModel) -> set[str]:
    names = set()
    for field in model.fields:
        for plan in (field.builder_copy, field.value_copy, field.read_copy):
            if plan is not None:
                names |= plan.functions
    if model.is_buildable:
        if model.enforce_required and model.required_fields \
                and model.kind != CodeModelKind.EVENT_UNION:
            names.add('check_required')
        if model.idempotency_field is not None and model.auto_fill_idempotency_token:
            names.add('new_idempotency_token')
    if model.supertype.is_runtime and model.supertype.name in _PLAIN_BASES:
        names.add('ShapeBuilder')
    return names


def _module(model: CodeModel, cls: ast.ClassDef, extra_imports=None) -> ast.Module:
    imports = ImportCollector()
    imports.add_import('__future__', 'annotations')
    imports.add_import(model.supertype.module, model.supertype.name)
    for field in model.all_fields:
        imports.add_imports(field.imports)
    for name in _runtime_names(model):
        imports.add_import(RUNTIME_MODULE, name)
    if any(
        _plan_needs_partial(plan)
        for field in model.fields
        for plan in (field.builder_copy, field.value_copy)
    ):
        imports.add_import('functools', 'partial')
    imports.add_imports(extra_imports or {})

    type_only = ImportCollector()
    for ref in sorted(model.references, key=lambda r: r.name):
        if ref != model.supertype:
            type_only.add_import(ref.module, ref.name)
    body: list[ast.stmt] = []
    if type_only.has_imports():
        imports.add_import('typing', 'TYPE_CHECKING')

    body += imports.to_ast()
    if type_only.has_imports():
        body.append(ast.If(test=_name('TYPE_CHECKING'), body=type_only.to_ast(), orelse=[]))
    body.append(_all([model.class_name]))
    body.append(cls)
    return ast.Module(body=body, type_ignores=[])


# =============================================================================
# Templates
# =============================================================================


def render_structure(model: CodeModel) -> ast.Module:
    return _module(model, _structure_class(model, _polymorphic_constants(model)))


def render_event_member(model: CodeModel) -> ast.Module:
    return _module(model, _structure_class(model, _polymorphic_constants(model)))


def render_exception(model: CodeModel) -> ast.Module:
    return _module(model, _structure_class(model, _error_constants(model)))


def render_base_exception(model: CodeModel) -> ast.Module:
    return _module(model, _structure_class(model, _service_constants(model)))


def render_base_request(model: CodeModel) -> ast.Module:
    """Abstract per-service request; no ``build()`` and no builder factories."""
    return _module(model, _structure_class(model))


def render_base_response(model: CodeModel) -> ast.Module:
    """Abstract per-service response; no ``build()`` and no builder factories."""
    return _module(model, _structure_class(model))


def render_event_union(model: CodeModel) -> ast.Module:
    return _module(
        model,
        _structure_class(model, _variant_constants(model)),
        extra_imports={'types': {'MappingProxyType'}, 'typing': {'Any'}},
    )


def render_enum(model: CodeModel) -> ast.Module:
    body = [
        _assign(_name(constant.name), ast.Constant(value=constant.value))
        for constant in model.enum_constants
    ]
    body.append(_assign(_name(UNKNOWN_ENUM_VALUE), ast.Constant(value=UNKNOWN_ENUM_VALUE)))
    cls = _class(
        model.class_name,
        [_name(model.supertype.name)],
        body,
        docstring=_class_doc(model),
    )
    return _module(model, cls)


DEFAULT_TEMPLATES: dict[CodeModelKind, Template] = {
    CodeModelKind.STRUCTURE: render_structure,
    CodeModelKind.EXCEPTION: render_exception,
    CodeModelKind.EVENT_UNION: render_event_union,
    CodeModelKind.EVENT_MEMBER: render_event_member,
    CodeModelKind.ENUM: render_enum,
    CodeModelKind.BASE_EXCEPTION: render_base_exception,
    CodeModelKind.BASE_REQUEST: render_base_request,
    CodeModelKind.BASE_RESPONSE: render_base_response,
}

