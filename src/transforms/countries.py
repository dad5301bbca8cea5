from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from transforms.alpha2 import Normalizer, reference_table_for, resolve_alpha2
from utils.errors import MalformedRecord, UnknownCountry


class CountryIn(BaseModel):
    # capital, currencies, alpha2Code, ... pass through untouched
    model_config = ConfigDict(extra="allow")

    name: str

    @field_validator("name")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("name must be non-empty")
        return v


@dataclass(frozen=True)
class CountryLookup:
    table: dict[str, str] = field(default_factory=dict)
    unresolved: list[str] = field(default_factory=list)


def _reason(err: ValidationError) -> str:
    first = err.errors()[0]
    loc = ".".join(str(p) for p in first.get("loc", ())) or "record"
    return f"{loc}: {first.get('msg', 'invalid')}"


def extract_country_names(records: Sequence[Any]) -> list[str]:
    """
    RAW records -> country names, same order and length.

    Fails fast with MalformedRecord(index) on the first record without a usable
    `name`; no partial list is returned.
    """
    names: list[str] = []
    for idx, item in enumerate(records):
        if not isinstance(item, Mapping):
            raise MalformedRecord(idx, f"expected an object, got {type(item).__name__}")
        try:
            c = CountryIn.model_validate(dict(item))
        except ValidationError as e:
            raise MalformedRecord(idx, _reason(e)) from e
        names.append(c.name)
    return names


def build_country_lookup(
    items: Iterable[Any],
    *,
    table: Mapping[str, str] | None = None,
    normalizer: Normalizer | None = None,
) -> CountryLookup:
    """
    Names (or raw records) -> name:alpha2 table + unresolved names.

    Input order is kept; duplicates collapse to the first occurrence.
    Unknown names are collected, never raised. Without an explicit `table`
    the reference table keyed through `normalizer` is used.
    """
    items = list(items)
    if table is None:
        table = reference_table_for(normalizer)

    if all(isinstance(i, str) for i in items):
        names = items
    else:
        names = extract_country_names(items)

    resolved: dict[str, str] = {}
    unresolved: list[str] = []
    seen: set[str] = set()

    for name in names:
        if name in seen:
            continue
        seen.add(name)
        try:
            resolved[name] = resolve_alpha2(name, table=table, normalizer=normalizer)
        except UnknownCountry:
            unresolved.append(name)

    return CountryLookup(table=resolved, unresolved=unresolved)
