# This file turns raw list-endpoint query parameters into a typed filter, projection, sort, and page request.
# It exists so the grammar (`field`, `field[op]`, reserved `select`/`sort`/`page`/`limit`) is parsed in one place
# against a whitelist of fields, each with its own value coercion.
# The structured filter uses `$op` keys (`{"price": {"$gte": 10.0}}`) and is compiled to SQLAlchemy clauses here too.

from __future__ import annotations

import math
import operator
import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.sql.elements import ColumnElement

from marketplace.api.db_models import BookingRecord, ServiceRecord
from marketplace.api.domain import INTEGER_MAX, PAGE_MAX, SERVICE_CATEGORIES, is_record_id
from marketplace.api.error_handlers import ValidationFailed

RESERVED_PARAMS = frozenset({"select", "sort", "page", "limit"})
COMPARISON_OPERATORS: dict[str, str] = {
    "gt": "$gt",
    "gte": "$gte",
    "lt": "$lt",
    "lte": "$lte",
    "in": "$in",
}
RANGE_OPERATORS = frozenset({"$gt", "$gte", "$lt", "$lte"})
DEFAULT_PAGE = 1

_KEY_RE = re.compile(r"^(?P<field>[A-Za-z_][A-Za-z0-9_]*)(?:\[(?P<op>[A-Za-z]+)\])?$")

_CLAUSE_BUILDERS: dict[str, Callable[[Any, Any], ColumnElement[bool]]] = {
    "$eq": operator.eq,
    "$gt": operator.gt,
    "$gte": operator.ge,
    "$lt": operator.lt,
    "$lte": operator.le,
    "$in": lambda column, values: column.in_(values),
}


@dataclass(frozen=True)
class FieldSpec:
    name: str
    column: Any
    coerce: Callable[[str], Any] | None = None
    ranged: bool = False
    sortable: bool = True

    @property
    def filterable(self) -> bool:
        return self.coerce is not None


@dataclass(frozen=True)
class SortKey:
    field: str
    descending: bool

    @property
    def as_text(self) -> str:
        return f"-{self.field}" if self.descending else self.field


@dataclass(frozen=True)
class PageRequest:
    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class Projection:
    fields: tuple[str, ...]
    exclude: bool = False

    def includes(self, field: str) -> bool:
        if field == "id":
            return True
        return (field in self.fields) != self.exclude


@dataclass(frozen=True)
class ListQuery:
    filter: dict[str, Any]
    projection: Projection | None
    sort: tuple[SortKey, ...]
    pagination: PageRequest

    @property
    def skip(self) -> int:
        return self.pagination.skip

    @property
    def limit(self) -> int:
        return self.pagination.limit


def _as_number(raw: str) -> float:
    value = float(raw.strip())
    if not math.isfinite(value):
        raise ValueError("number must be finite")
    return value


def _as_integer(raw: str) -> int:
    value = int(raw.strip())
    if abs(value) > INTEGER_MAX:
        raise ValueError("integer out of range")
    return value


def _as_text(raw: str) -> str:
    return raw


def _as_category(raw: str) -> str:
    value = raw.strip()
    if value not in SERVICE_CATEGORIES:
        raise ValueError("unknown category")
    return value


def _as_record_id(raw: str) -> str:
    value = raw.strip()
    if not is_record_id(value):
        raise ValueError("malformed id")
    return value


def _as_datetime(raw: str) -> datetime:
    value = datetime.fromisoformat(raw.strip())
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value


def _coerce(spec: FieldSpec, raw: str) -> Any:
    try:
        return spec.coerce(raw)
    except ValueError as exc:
        raise ValidationFailed(f"Invalid value for '{spec.name}': {raw!r}") from exc


def _split_key(key: str) -> tuple[str, str | None]:
    match = _KEY_RE.match(key)
    if match is None:
        raise ValidationFailed(f"Invalid query parameter '{key}'")
    return match.group("field"), match.group("op")


def _field_spec(fields: Mapping[str, FieldSpec], name: str) -> FieldSpec:
    spec = fields.get(name)
    if spec is None or not spec.filterable:
        supported = ", ".join(sorted(n for n, s in fields.items() if s.filterable))
        raise ValidationFailed(
            f"Unsupported filter field '{name}'. Supported fields: {supported}"
        )
    return spec


def parse_filter(
    params: Iterable[tuple[str, str]], *, fields: Mapping[str, FieldSpec]
) -> dict[str, Any]:
    """Build the structured filter from every non-reserved parameter."""

    equalities: dict[str, list[Any]] = {}
    comparisons: dict[str, dict[str, Any]] = {}

    for key, raw in params:
        if key in RESERVED_PARAMS:
            continue
        name, op = _split_key(key)
        spec = _field_spec(fields, name)

        if op is None:
            equalities.setdefault(name, []).append(_coerce(spec, raw))
            continue

        db_operator = COMPARISON_OPERATORS.get(op.lower())
        if db_operator is None:
            supported = ", ".join(COMPARISON_OPERATORS)
            raise ValidationFailed(f"Unsupported operator '{op}'. Supported operators: {supported}")
        if db_operator in RANGE_OPERATORS and not spec.ranged:
            raise ValidationFailed(f"Operator '{op}' is not supported for field '{name}'")

        conditions = comparisons.setdefault(name, {})
        if db_operator == "$in":
            values = [_coerce(spec, item) for item in raw.split(",") if item.strip()]
            if not values:
                raise ValidationFailed(f"Operator 'in' needs at least one value for '{name}'")
            conditions["$in"] = [*conditions.get("$in", []), *values]
        else:
            conditions[db_operator] = _coerce(spec, raw)

    result: dict[str, Any] = dict(comparisons)
    for name, values in equalities.items():
        if name in comparisons:
            raise ValidationFailed(
                f"Cannot combine equality and comparison filters on '{name}'"
            )
        result[name] = values[0] if len(values) == 1 else {"$in": values}
    return result


def parse_projection(raw: str | None, *, fields: Mapping[str, FieldSpec]) -> Projection | None:
    if raw is None or not raw.strip():
        return None

    names = [item.strip() for item in raw.split(",") if item.strip()]
    excluded = [name.startswith("-") for name in names]
    if any(excluded) and not all(excluded):
        raise ValidationFailed("select cannot mix included and excluded fields")

    cleaned = [name.lstrip("-") for name in names]
    unknown = [name for name in cleaned if name not in fields]
    if unknown:
        raise ValidationFailed(f"Unsupported select field '{unknown[0]}'")

    if all(excluded):
        return Projection(fields=tuple(n for n in cleaned if n != "id"), exclude=True)
    return Projection(fields=tuple(dict.fromkeys(["id", *cleaned])), exclude=False)


def parse_sort(raw: str | None, *, default_sort: str, fields: Mapping[str, FieldSpec]) -> tuple[SortKey, ...]:
    """Parse `field,-other` into sort keys, appending `id` as a tiebreaker."""

    text = raw if raw is not None and raw.strip() else default_sort
    keys: list[SortKey] = []
    for item in text.split(","):
        token = item.strip()
        if not token:
            continue
        descending = token.startswith("-")
        name = token.lstrip("-+")
        spec = fields.get(name)
        if spec is None or not spec.sortable:
            supported = ", ".join(sorted(n for n, s in fields.items() if s.sortable))
            raise ValidationFailed(f"Unsupported sort field '{name}'. Supported fields: {supported}")
        keys.append(SortKey(field=name, descending=descending))

    if not any(key.field == "id" for key in keys) and "id" in fields:
        keys.append(SortKey(field="id", descending=False))
    return tuple(keys)


def _positive_int(raw: str | None, default: int) -> int:
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        return 1
    return max(1, value)


def parse_page_request(
    *, page: str | None, limit: str | None, default_limit: int, max_limit: int
) -> PageRequest:
    resolved_limit = min(_positive_int(limit, default_limit), max_limit)
    resolved_page = min(_positive_int(page, DEFAULT_PAGE), PAGE_MAX)
    return PageRequest(page=resolved_page, limit=resolved_limit)


def translate_query(
    params: Iterable[tuple[str, str]],
    *,
    fields: Mapping[str, FieldSpec],
    default_sort: str,
    default_limit: int,
    max_limit: int,
) -> ListQuery:
    """Translate query parameters (as key/value pairs, repeats allowed) into a ListQuery."""

    items = list(params)
    reserved = {key: value for key, value in items if key in RESERVED_PARAMS}

    return ListQuery(
        filter=parse_filter(items, fields=fields),
        projection=parse_projection(reserved.get("select"), fields=fields),
        sort=parse_sort(reserved.get("sort"), default_sort=default_sort, fields=fields),
        pagination=parse_page_request(
            page=reserved.get("page"),
            limit=reserved.get("limit"),
            default_limit=default_limit,
            max_limit=max_limit,
        ),
    )


def build_page_links(*, page: int, limit: int, returned: int) -> dict[str, dict[str, int]]:
    """`next` when the page came back full, `prev` when not on the first page."""

    links: dict[str, dict[str, int]] = {}
    if returned == limit:
        links["next"] = {"page": page + 1, "limit": limit}
    if page > 1:
        links["prev"] = {"page": page - 1, "limit": limit}
    return links


def compile_conditions(
    filter_spec: Mapping[str, Any], *, fields: Mapping[str, FieldSpec]
) -> list[ColumnElement[bool]]:
    clauses: list[ColumnElement[bool]] = []
    for name, condition in filter_spec.items():
        column = fields[name].column
        if isinstance(condition, Mapping):
            for db_operator, value in condition.items():
                clauses.append(_CLAUSE_BUILDERS[db_operator](column, value))
        else:
            clauses.append(column == condition)
    return clauses


def compile_order_by(sort: Iterable[SortKey], *, fields: Mapping[str, FieldSpec]) -> list[Any]:
    return [
        fields[key.field].column.desc() if key.descending else fields[key.field].column.asc()
        for key in sort
    ]


SERVICE_QUERY_FIELDS: dict[str, FieldSpec] = {
    "id": FieldSpec("id", ServiceRecord.id, _as_record_id),
    "title": FieldSpec("title", ServiceRecord.title, _as_text),
    "description": FieldSpec("description", ServiceRecord.description, _as_text, sortable=False),
    "category": FieldSpec("category", ServiceRecord.category, _as_category),
    "price": FieldSpec("price", ServiceRecord.price, _as_number, ranged=True),
    "duration": FieldSpec("duration", ServiceRecord.duration, _as_integer, ranged=True),
    "rating": FieldSpec("rating", ServiceRecord.rating, _as_number, ranged=True),
    "provider": FieldSpec("provider", ServiceRecord.provider_id, _as_record_id),
    "availability": FieldSpec("availability", None, sortable=False),
    "image": FieldSpec("image", ServiceRecord.image, sortable=False),
    "createdAt": FieldSpec("createdAt", ServiceRecord.created_at, _as_datetime, ranged=True),
    "updatedAt": FieldSpec("updatedAt", ServiceRecord.updated_at, _as_datetime, ranged=True),
}

BOOKING_SCOPE_FIELDS: dict[str, FieldSpec] = {
    "user": FieldSpec("user", BookingRecord.user_id, _as_record_id),
    "provider": FieldSpec("provider", BookingRecord.provider_id, _as_record_id),
    "status": FieldSpec("status", BookingRecord.status, _as_text),
}


def translate_service_query(
    params: Iterable[tuple[str, str]],
    *,
    default_sort: str = "-createdAt",
    default_limit: int = 10,
    max_limit: int = 100,
) -> ListQuery:
    return translate_query(
        params,
        fields=SERVICE_QUERY_FIELDS,
        default_sort=default_sort,
        default_limit=default_limit,
        max_limit=max_limit,
    )
