"""
Immutable query clauses value and its translation to a SQLModel select.

A ``QuerySpec`` is built up by fluent calls, each returning a new value, and
is applied once to a fresh statement by ``build_select``. Clause order on
apply is fixed: eager-loads, wheres, where-ins, order-bys, limit, offset,
then scopes.
"""

import operator as _op
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Iterable, Optional, Sequence, Tuple, Type, Union

from sqlalchemy.orm import load_only, selectinload
from sqlmodel import SQLModel, select
from sqlmodel.sql.expression import Select, SelectOfScalar

MISSING = object()

OPERATORS: Dict[str, Callable[[Any, Any], Any]] = {
    "=": _op.eq,
    "==": _op.eq,
    "!=": _op.ne,
    "<>": _op.ne,
    "<": _op.lt,
    "<=": _op.le,
    ">": _op.gt,
    ">=": _op.ge,
    "like": lambda column, value: column.like(value),
    "not like": lambda column, value: column.not_like(value),
    "ilike": lambda column, value: column.ilike(value),
}

DIRECTIONS = ("asc", "desc")


@dataclass(frozen=True)
class WhereClause:
    column: str
    operator: str
    value: Any


@dataclass(frozen=True)
class QuerySpec:
    wheres: Tuple[WhereClause, ...] = ()
    where_ins: Tuple[Tuple[str, Tuple[Any, ...]], ...] = ()
    order_bys: Tuple[Tuple[str, str], ...] = ()
    limit: Optional[int] = None
    offset: Optional[int] = None
    per_page: Optional[int] = None
    relations: Tuple[str, ...] = ()
    scopes: Tuple[Tuple[str, Tuple[Any, ...]], ...] = ()

    def where(self, column: str, operator: Any, value: Any = MISSING) -> "QuerySpec":
        if value is MISSING:
            operator, value = "=", operator
        if not isinstance(operator, str) or operator.lower() not in OPERATORS:
            raise ValueError(f"Unsupported where operator: {operator!r}")
        clause = WhereClause(column, operator.lower(), value)
        return replace(self, wheres=self.wheres + (clause,))

    def where_in(self, column: str, values: Any) -> "QuerySpec":
        if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
            values = (values,)
        return replace(self, where_ins=self.where_ins + ((column, tuple(values)),))

    def order_by(self, column: str, direction: str = "asc") -> "QuerySpec":
        direction = direction.lower()
        if direction not in DIRECTIONS:
            raise ValueError(f"Order direction must be 'asc' or 'desc', got {direction!r}")
        return replace(self, order_bys=self.order_bys + ((column, direction),))

    def take(self, limit: int) -> "QuerySpec":
        return replace(self, limit=limit)

    def skip(self, offset: int) -> "QuerySpec":
        return replace(self, offset=offset)

    def paginate_by(self, per_page: int) -> "QuerySpec":
        return replace(self, per_page=per_page)

    def with_(self, relations: Union[str, Sequence[str]]) -> "QuerySpec":
        # Replaces previously requested relations, it does not add to them
        if isinstance(relations, str):
            relations = [relations]
        return replace(self, relations=tuple(dict.fromkeys(relations)))

    def scope(self, name: str, *args: Any) -> "QuerySpec":
        scopes = dict(self.scopes)
        scopes[name] = tuple(args)
        return replace(self, scopes=tuple(scopes.items()))

    def without_clauses(self) -> "QuerySpec":
        """Keep only the eager-loads."""
        return QuerySpec(relations=self.relations)

    @property
    def is_empty(self) -> bool:
        return self == QuerySpec()


def resolve_column(model: Type[SQLModel], name: str):
    column = getattr(model, name, None)
    if column is None or not hasattr(column, "property"):
        raise ValueError(f"{model.__name__} has no column or relation named {name!r}")
    return column


def eager_load_options(model: Type[SQLModel], relations: Sequence[str]) -> list:
    """selectinload options for relation names; dotted names load nested relations."""
    options = []
    for relation in relations:
        current_model = model
        loader = None
        for part in relation.split("."):
            attribute = resolve_column(current_model, part)
            loader = selectinload(attribute) if loader is None else loader.selectinload(attribute)
            current_model = attribute.property.mapper.class_
        options.append(loader)
    return options


def apply_filters(statement: SelectOfScalar, model: Type[SQLModel], spec: QuerySpec) -> SelectOfScalar:
    for clause in spec.wheres:
        column = resolve_column(model, clause.column)
        statement = statement.where(OPERATORS[clause.operator](column, clause.value))
    for column_name, values in spec.where_ins:
        statement = statement.where(resolve_column(model, column_name).in_(values))
    return statement


def apply_scopes(statement: SelectOfScalar, model: Type[SQLModel], spec: QuerySpec) -> SelectOfScalar:
    for name, args in spec.scopes:
        method = getattr(model, f"scope_{name}", None)
        if method is None:
            raise ValueError(f"{model.__name__} defines no scope named {name!r}")
        statement = method(statement, *args)
    return statement


def build_select(
    model: Type[SQLModel],
    spec: QuerySpec,
    *,
    eager: bool = True,
    ordering: bool = True,
    limits: bool = True,
    columns: Optional[Sequence[str]] = None,
) -> Union[Select, SelectOfScalar]:
    """Apply ``spec`` to a fresh ``select(model)``."""
    statement = select(model)
    if eager and spec.relations:
        statement = statement.options(*eager_load_options(model, spec.relations))
    if columns and list(columns) != ["*"]:
        statement = statement.options(load_only(*[resolve_column(model, name) for name in columns]))
    statement = apply_filters(statement, model, spec)
    if ordering:
        for column_name, direction in spec.order_bys:
            column = resolve_column(model, column_name)
            statement = statement.order_by(column.desc() if direction == "desc" else column.asc())
    if limits:
        if spec.limit is not None:
            statement = statement.limit(spec.limit)
        if spec.offset is not None:
            statement = statement.offset(spec.offset)
    return apply_scopes(statement, model, spec)
