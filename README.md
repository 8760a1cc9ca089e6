# querybuilder

Small helpers that turn plain descriptions of filters, sort orders and
pagination into PostgreSQL query text with numbered `$n` placeholders,
plus the list of arguments to pass alongside. There are no dependencies
beyond the standard library.

## Installing

```
pip install .
```

## Describing a query

The types live in `querybuilder.models`:

- `Field`: one filter condition (`name`, `operator`, `value`,
  `from_value`/`to_value` for `BETWEEN`, `chaining_key`, `source`,
  `group_open`, `group_close`, `is_value_from_table`,
  `name_value_from_table`, `source_name_value_from_table`).
- `Fields`: a list of `Field` with `is_empty`, `push`, `validate_names`,
  `validate_sources`, `find_field` and `error_message`.
- `SortField` and `SortFields` (with `is_empty` and `validate_names`).
- `Pagination` (`page`, `limit`, `max_limit`); a negative number raises
  `InvalidPaginationError`.
- `FieldsSpecification`: filters, sorts and pagination together.
- The enums `Operator`, `Chaining` and `Order`.

```python
from querybuilder.models import (
    Chaining, Field, Fields, Operator, Order, Pagination, SortField, SortFields,
)
from querybuilder.postgres import build_query_args_and_pagination

filters = Fields([
    Field(name="employer_id", value=1),
    Field(name="is_active", value=True, chaining_key=Chaining.OR, group_open=True),
    Field(name="is_staff", value=False, group_close=True),
    Field(name="id", value=[1, 4, 9], operator=Operator.IN),
])
sorts = SortFields([SortField(name="id", order=Order.DESC)])
page = Pagination(page=2, limit=10, max_limit=20)

query, args = build_query_args_and_pagination("SELECT * FROM users", filters, sorts, page)
# query == "SELECT * FROM users WHERE employer_id = $1 AND (is_active = $2 OR is_staff = $3)"
#          " AND id IN (1,4,9) ORDER BY id DESC LIMIT 10 OFFSET 10"
# args == [1, True, False]
```

Fields default to `=` and are chained with `AND`; column names are
lower-cased. A field's `source` prefixes its name (`c.hire_date`);
`is_value_from_table` compares against another column instead of a value;
`Operator.IN` writes integer or string lists inline (an empty or unsupported
value gives `name = 0`); `Operator.BETWEEN` takes `from_value` and `to_value`
of the same type and raises `FromValueEmptyError`, `ToValueEmptyError` or
`FromToMismatchError` otherwise. Groups left open are closed after the last
field. Sorting defaults to `ASC`. Pagination with neither page nor limit adds
nothing; otherwise the limit falls back to `max_limit` (20 when unset) and
the page to 1.

`Fields.validate_names` and `Fields.validate_sources` compare names and
sources case-insensitively against allowed lists and raise
`FieldNotAllowedError` or `SourceNotAllowedError`.

## Statement helpers

`querybuilder.postgres` also provides `build_sql_insert`,
`build_sql_insert_with_id`, `build_sql_update_by_id`, `build_sql_select`,
`build_sql_select_fields`, `build_sql_delete`, `columns_aliased`,
`columns_aliased_with_default`, `build_in`, `build_sql_where`,
`build_sql_order_by` and `build_sql_pagination`. Passing an empty field list
to the statement builders raises `FieldsAreEmptyError`.

`check_error` maps an exception carrying a PostgreSQL error code (in a
`pgcode` or `sqlstate` attribute) to `UniqueViolation`,
`ForeignKeyViolation` or `NotNullViolation`, and returns `None` for anything
else. `check_constraint` looks up the constraint name (from
`err.diag.constraint_name` or `err.constraint_name`) in a mapping of your
own errors and returns the match, or the original error.

`exec_affecting_one_row(cursor, query, *args)` runs a statement on a DB-API
cursor you supply and raises `RowCountError` unless exactly one row was
affected.

## Nullable values

`querybuilder.nullhandler` wraps values in a frozen `NullValue(value, valid)`
that is marked invalid for zero or empty input: `time_to_null`,
`parse_date_to_time` (for `HH:MM:SS` strings), `int64_to_null`,
`string_to_null`, `float64_to_null` and `bool_to_null`.

## What it does not do

The package only builds text and argument lists. It opens no database
connections, ships no driver and does not quote or escape identifiers or
the strings written inline by `build_in`; pass only trusted names.

## Tests

```
pip install ".[test]"
pytest
```