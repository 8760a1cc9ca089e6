"""Query description types: filters, sorting, pagination and their errors."""

from __future__ import annotations

from dataclasses import dataclass, field as dc_field
from enum import Enum
from typing import Any, Iterable, Optional


class QueryBuilderError(Exception):
    """Base class for every error raised by the query builder."""


class InvalidPaginationError(QueryBuilderError, ValueError):
    """Pagination parameters are not valid."""

    def __init__(self, message: str = "invalid pagination parameters") -> None:
        super().__init__(message)


class FromValueEmptyError(QueryBuilderError, ValueError):
    """The lower bound of a BETWEEN filter is missing."""

    def __init__(self, message: str = "`from` value is empty") -> None:
        super().__init__(message)


class ToValueEmptyError(QueryBuilderError, ValueError):
    """The upper bound of a BETWEEN filter is missing."""

    def __init__(self, message: str = "`to` value is empty") -> None:
        super().__init__(message)


class FromToMismatchError(QueryBuilderError, TypeError):
    """The bounds of a BETWEEN filter have different types."""

    def __init__(
        self, message: str = "`from` and `to` values are missmatch"
    ) -> None:
        super().__init__(message)


class FieldNotAllowedError(QueryBuilderError, ValueError):
    """A field name is not in the list of allowed fields."""

    def __init__(self, name: str, purpose: str = "query") -> None:
        self.name = name
        self.purpose = purpose
        super().__init__(f"the field {name} is not allowed for {purpose}")


class SourceNotAllowedError(QueryBuilderError, ValueError):
    """A field source is not in the list of allowed sources."""

    def __init__(self, source: str) -> None:
        self.source = source
        super().__init__(f"the source {source} is not allowed for query")


class ConstraintViolation(QueryBuilderError):
    """A database constraint was violated."""

    default_message = "Constraint violation"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)


class UniqueViolation(ConstraintViolation):
    """A unique constraint was violated."""

    default_message = "Unique violation"


class ForeignKeyViolation(ConstraintViolation):
    """A foreign key constraint was violated."""

    default_message = "Foreign key violation"


class NotNullViolation(ConstraintViolation):
    """A not-null constraint was violated."""

    default_message = "Not Null violation"


class Operator(str, Enum):
    """Comparison operators usable in a filter."""

    EQUALS = "="
    NOT_EQUAL_TO = "<>"
    LESS_THAN = "<"
    GREATER_THAN = ">"
    LESS_THAN_OR_EQUAL_TO = "<="
    GREATER_THAN_OR_EQUAL_TO = ">="
    ILIKE = "ILIKE"
    IN = "IN"
    IS_NULL = "IS NULL"
    IS_NOT_NULL = "IS NOT NULL"
    BETWEEN = "BETWEEN"

    def __str__(self) -> str:
        return self.value


class Chaining(str, Enum):
    """Keyword joining a filter to the next one."""

    AND = "AND"
    OR = "OR"

    def __str__(self) -> str:
        return self.value


class Order(str, Enum):
    """Sort direction."""

    ASC = "ASC"
    DESC = "DESC"

    def __str__(self) -> str:
        return self.value


@dataclass
class Field:
    """One filter condition of a query.

    ``from_value`` and ``to_value`` are used only with ``Operator.BETWEEN``.
    ``source`` qualifies the column with a table or alias, useful with joins.
    ``group_open``/``group_close`` open and close a parenthesised group.
    With ``is_value_from_table`` the column is compared against
    ``name_value_from_table`` (qualified by ``source_name_value_from_table``)
    instead of ``value``.
    """

    name: str = ""
    operator: Optional[Operator] = None
    value: Any = None
    from_value: Any = None
    to_value: Any = None
    chaining_key: Optional[Chaining] = None
    source: str = ""
    group_open: bool = False
    group_close: bool = False
    is_value_from_table: bool = False
    name_value_from_table: str = ""
    source_name_value_from_table: str = ""

    def validate_from_and_to_values(self) -> None:
        """Raise if the BETWEEN bounds are missing or of different types."""
        if self.from_value is None:
            raise FromValueEmptyError()
        if self.to_value is None:
            raise ToValueEmptyError()
        if type(self.from_value) is not type(self.to_value):
            raise FromToMismatchError()


def _allowed(value: str, allowed: Iterable[str]) -> bool:
    folded = value.casefold()
    return any(candidate.casefold() == folded for candidate in allowed)


class Fields(list):
    """A list of filter fields."""

    def is_empty(self) -> bool:
        return not self

    def push(self, *args: Field) -> None:
        """Append one or more fields."""
        self.extend(args)

    def validate_names(self, allowed_fields: Iterable[str]) -> None:
        """Raise if any field name is not allowed (case-insensitive)."""
        allowed = list(allowed_fields)
        for item in self:
            if not _allowed(item.name, allowed):
                raise FieldNotAllowedError(item.name, "query")

    def validate_sources(self, sources_allowed: Iterable[str]) -> None:
        """Raise if any field source is not allowed (case-insensitive)."""
        allowed = list(sources_allowed)
        for item in self:
            if not _allowed(item.source, allowed):
                raise SourceNotAllowedError(item.source)

    def find_field(self, input_field: str) -> Optional[Field]:
        """Return the first field whose name matches, ignoring case, or None."""
        folded = input_field.casefold()
        return next((f for f in self if f.name.casefold() == folded), None)

    def error_message(self) -> str:
        """Describe the fields and their values as a 'not found' message."""
        message = "not found"
        for item in self:
            message = f"{item.name}: {item.value}, {message}"
        return message


@dataclass
class SortField:
    """Sorting of one column; ``source`` qualifies it with a table or alias."""

    name: str = ""
    order: Optional[Order] = None
    source: str = ""


class SortFields(list):
    """A list of sort fields."""

    def is_empty(self) -> bool:
        return not self

    def validate_names(self, allowed_fields: Iterable[str]) -> None:
        """Raise if any sort field name is not allowed (case-insensitive)."""
        allowed = list(allowed_fields)
        for item in self:
            if not _allowed(item.name, allowed):
                raise FieldNotAllowedError(item.name, "ordering")


@dataclass
class Pagination:
    """Page number, page size and the largest page size accepted."""

    page: int = 0
    limit: int = 0
    max_limit: int = 0

    def __post_init__(self) -> None:
        if min(self.page, self.limit, self.max_limit) < 0:
            raise InvalidPaginationError()


@dataclass
class FieldsSpecification:
    """Filters, sorting and pagination of a query, taken together."""

    filters: Fields = dc_field(default_factory=Fields)
    sorts: SortFields = dc_field(default_factory=SortFields)
    pagination: Pagination = dc_field(default_factory=Pagination)