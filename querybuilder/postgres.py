"""SQL statement builders for PostgreSQL and helpers for its errors."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping, Optional, Sequence

from querybuilder.models import (
    Chaining,
    Field,
    Fields,
    ForeignKeyViolation,
    NotNullViolation,
    Operator,
    Order,
    Pagination,
    QueryBuilderError,
    SortField,
    SortFields,
    UniqueViolation,
)

FIELDS_ARE_EMPTY_MESSAGE = "FAILED! YOU NEED TO SEND FIELDS"
DEFAULT_MAX_LIMIT = 20

_NO_PARAM_OPERATORS = (Operator.IN, Operator.IS_NULL, Operator.IS_NOT_NULL)

_ERROR_CODES = {
    "23505": UniqueViolation,
    "23503": ForeignKeyViolation,
    "23502": NotNullViolation,
}


class FieldsAreEmptyError(QueryBuilderError, ValueError):
    """A statement was requested without any column."""

    def __init__(self, message: str = FIELDS_ARE_EMPTY_MESSAGE) -> None:
        super().__init__(message)


class RowCountError(QueryBuilderError):
    """A statement did not affect exactly one row."""

    def __init__(self, rows_affected: int) -> None:
        self.rows_affected = rows_affected
        super().__init__(f"psql: expected 1 row affected, got {rows_affected}")


def _sql_error_code(err: BaseException) -> Optional[str]:
    for attribute in ("pgcode", "sqlstate"):
        code = getattr(err, attribute, None)
        if code:
            return str(code)
    return None


def _constraint_name(err: BaseException) -> Optional[str]:
    diag = getattr(err, "diag", None)
    name = getattr(diag, "constraint_name", None) if diag is not None else None
    if name is None:
        name = getattr(err, "constraint_name", None)
    return name


def check_constraint(
    constraints: Mapping[str, BaseException], err: BaseException
) -> BaseException:
    """Return the error registered for the violated constraint, else ``err``."""
    name = _constraint_name(err)
    if name is None:
        return err
    return constraints.get(name, err)


def check_error(err: BaseException) -> Optional[QueryBuilderError]:
    """Map a PostgreSQL integrity error to a constraint violation, or None."""
    code = _sql_error_code(err)
    violation = _ERROR_CODES.get(code) if code else None
    return violation() if violation else None


def exec_affecting_one_row(cursor: Any, query: str, *args: Any) -> None:
    """Execute ``query`` on a DB-API cursor, requiring exactly one affected row."""
    try:
        cursor.execute(query, args)
    except Exception as exc:
        raise QueryBuilderError(f"psql: could not execute statement {exc}") from exc

    rows_affected = getattr(cursor, "rowcount", -1)
    if rows_affected is None or rows_affected < 0:
        raise QueryBuilderError("psql: could not get rows affected")
    if rows_affected != 1:
        raise RowCountError(rows_affected)


def _require_fields(fields: Sequence[str]) -> None:
    if not fields:
        raise FieldsAreEmptyError()


def _placeholders(start: int, count: int) -> str:
    return ", ".join(f"${n}" for n in range(start, start + count))


def build_sql_insert(table: str, fields: Sequence[str]) -> str:
    """Build an INSERT returning the generated id and creation time."""
    _require_fields(fields)
    return (
        f"INSERT INTO {table} ({', '.join(fields)}) "
        f"VALUES ({_placeholders(1, len(fields))}) RETURNING id, created_at"
    )


def build_sql_insert_with_id(table: str, fields: Sequence[str]) -> str:
    """Build an INSERT whose first parameter is the row id."""
    _require_fields(fields)
    columns = ["id", *fields]
    return (
        f"INSERT INTO {table} ({', '.join(columns)}) "
        f"VALUES ({_placeholders(1, len(columns))}) RETURNING created_at"
    )


def build_sql_update_by_id(table: str, fields: Sequence[str]) -> str:
    """Build an UPDATE by id that also refreshes ``updated_at``."""
    _require_fields(fields)
    assignments = "".join(
        f"{name} = ${position}, " for position, name in enumerate(fields, start=1)
    )
    return (
        f"UPDATE {table} SET {assignments}updated_at = now() "
        f"WHERE id = ${len(fields) + 1}"
    )


def build_sql_select(table: str, fields: Sequence[str]) -> str:
    """Build a SELECT of the given columns plus id and timestamps."""
    _require_fields(fields)
    columns = "".join(f"{name}, " for name in fields)
    return f"SELECT id, {columns}created_at, updated_at FROM {table}"


def build_sql_select_fields(table: str, fields: Sequence[str]) -> str:
    """Build a SELECT of exactly the given columns."""
    _require_fields(fields)
    return f"SELECT {', '.join(fields)} FROM {table}"


def _with_defaults(field: Field) -> Field:
    name = field.name
    if field.source:
        name = f"{field.source}.{name}"
    if field.group_open:
        name = f"({name}"

    value_column = field.name_value_from_table
    if field.source_name_value_from_table:
        value_column = f"{field.source_name_value_from_table}.{value_column}"

    return replace(
        field,
        name=name,
        name_value_from_table=value_column,
        operator=Operator(field.operator) if field.operator else Operator.EQUALS,
        chaining_key=Chaining(field.chaining_key) if field.chaining_key else Chaining.AND,
    )


def build_sql_where(fields: Sequence[Field]) -> tuple[str, list]:
    """Build a WHERE clause and the list of its positional arguments."""
    if not fields:
        return "", []

    parts = ["WHERE "]
    last_index = len(fields) - 1
    open_groups = 0
    args: list = []
    sequence = 1

    for index, original in enumerate(fields):
        field = _with_defaults(original)
        operator = field.operator
        name = field.name.lower()

        if field.group_open:
            open_groups += 1

        if operator is Operator.IN:
            parts.append(build_in(field))
        elif operator in (Operator.IS_NULL, Operator.IS_NOT_NULL):
            parts.append(f"{name} {operator.value}")
        elif operator is Operator.BETWEEN:
            field.validate_from_and_to_values()
            parts.append(f"{name} {operator.value} ${sequence} AND ${sequence + 1}")
            sequence += 1
        elif field.is_value_from_table:
            parts.append(
                f"{name} {operator.value} {field.name_value_from_table.lower()}"
            )
        else:
            parts.append(f"{name} {operator.value} ${sequence}")

        if open_groups > 0 and field.group_close:
            open_groups -= 1
            parts.append(")")

        if open_groups > 0 and index == last_index:
            parts.append(")" * open_groups)

        if index != last_index:
            parts.append(f" {field.chaining_key.value} ")

        if operator in _NO_PARAM_OPERATORS or field.is_value_from_table:
            continue

        if field.value is not None:
            args.append(field.value)
        if operator is Operator.BETWEEN:
            args.extend((field.from_value, field.to_value))

        sequence += 1

    return "".join(parts), args


def _sort_term(sort: SortField) -> str:
    order = Order(sort.order) if sort.order else Order.ASC
    name = f"{sort.source}.{sort.name}" if sort.source else sort.name
    return f"{name.lower()} {order.value}"


def build_sql_order_by(sorts: Sequence[SortField]) -> str:
    """Build an ORDER BY clause; columns default to ascending order."""
    if not sorts:
        return ""
    return "ORDER BY " + ", ".join(_sort_term(sort) for sort in sorts)


def build_sql_pagination(pag: Pagination) -> str:
    """Build a LIMIT/OFFSET clause, or an empty string without pagination."""
    if pag.limit == 0 and pag.page == 0:
        return ""

    max_limit = pag.max_limit or DEFAULT_MAX_LIMIT
    limit = pag.limit
    if limit == 0 or limit > max_limit:
        limit = max_limit
    page = pag.page or 1

    offset = page * limit - limit
    return f"LIMIT {limit} OFFSET {offset}"


def build_query_args_and_pagination(
    initial_sql: str,
    filters: Sequence[Field],
    sorts: Sequence[SortField],
    pag: Pagination,
) -> tuple[str, list]:
    """Append filters, sorting and pagination to ``initial_sql``."""
    conditions, args = build_sql_where(filters)
    query = f"{initial_sql} {conditions}"
    query += " " + build_sql_order_by(sorts)
    query += " " + build_sql_pagination(pag)
    return query, args


def build_sql_delete(table: str) -> str:
    """Build a DELETE by id."""
    return f"DELETE FROM {table} WHERE id = $1"


def columns_aliased(fields: Sequence[str], aliased: str) -> str:
    """List the columns qualified by ``aliased``, plus id and timestamps."""
    if not fields:
        return ""
    columns = "".join(f"{aliased}.{name}, " for name in fields)
    return f"{aliased}.id, {columns}{aliased}.created_at, {aliased}.updated_at"


def columns_aliased_with_default(fields: Sequence[str], aliased: str) -> str:
    """List the columns qualified by ``aliased``, plus id and timestamps."""
    return columns_aliased(fields, aliased)


def _is_int(item: Any) -> bool:
    return isinstance(item, int) and not isinstance(item, bool)


def build_in(field: Field) -> str:
    """Build an IN condition from a list of integers or strings.

    Anything else, or an empty list, gives a condition that matches nothing.
    """
    name = field.name.lower()
    mistake = f"{name} = 0"

    items = field.value
    if not isinstance(items, (list, tuple)) or not items:
        return mistake

    if all(_is_int(item) for item in items):
        rendered = ",".join(str(item) for item in items)
    elif all(isinstance(item, str) for item in items):
        rendered = ",".join(f"'{item}'" for item in items)
    else:
        return mistake

    return f"{name} IN ({rendered})"


__all__ = [
    "FIELDS_ARE_EMPTY_MESSAGE",
    "FieldsAreEmptyError",
    "RowCountError",
    "check_constraint",
    "check_error",
    "exec_affecting_one_row",
    "build_sql_insert",
    "build_sql_insert_with_id",
    "build_sql_update_by_id",
    "build_sql_select",
    "build_sql_select_fields",
    "build_sql_where",
    "build_sql_order_by",
    "build_sql_pagination",
    "build_query_args_and_pagination",
    "build_sql_delete",
    "columns_aliased",
    "columns_aliased_with_default",
    "build_in",
    "Fields",
    "SortFields",
]