from __future__ import annotations

from collections.abc import Callable, Mapping
from functools import lru_cache
from types import MappingProxyType

import pycountry

from utils.errors import UnknownCountry


Normalizer = Callable[[str], str]


def normalize_name(name: str) -> str:
    """Trim and capitalise each word: "  united   kingdom " -> "United Kingdom"."""
    return " ".join(w[:1].upper() + w[1:].lower() for w in name.split())


def build_reference_table(normalizer: Normalizer | None = None) -> Mapping[str, str]:
    """
    ISO 3166-1 name -> alpha-2, read-only.

    Each entry contributes its short name and, where pycountry has them, its
    common name ("Bolivia" alongside "Bolivia, Plurinational State of") and
    official name ("United States of America").
    Short and common names are added before any official name; on key
    collisions the first entry (by alpha-2 order) wins.
    """
    table: dict[str, str] = {}
    countries = sorted(pycountry.countries, key=lambda c: c.alpha_2)
    for attrs in (("name", "common_name"), ("official_name",)):
        for country in countries:
            for attr in attrs:
                name = getattr(country, attr, None)
                if not name:
                    continue
                key = normalizer(name) if normalizer else name
                table.setdefault(key, country.alpha_2)
    return MappingProxyType(table)


REFERENCE_TABLE: Mapping[str, str] = build_reference_table()


@lru_cache(maxsize=8)
def reference_table_for(normalizer: Normalizer | None = None) -> Mapping[str, str]:
    """The default table, keyed through `normalizer`; built once per normalizer."""
    if normalizer is None:
        return REFERENCE_TABLE
    return build_reference_table(normalizer=normalizer)


def resolve_alpha2(
    name: str,
    *,
    table: Mapping[str, str] | None = None,
    normalizer: Normalizer | None = None,
) -> str:
    # Exact match only; an explicit table must be keyed through the same normalizer.
    if table is None:
        table = reference_table_for(normalizer)
    key = normalizer(name) if normalizer else name
    try:
        return table[key]
    except KeyError:
        raise UnknownCountry(name) from None


def lookup_alpha2(
    name: str,
    *,
    table: Mapping[str, str] | None = None,
    normalizer: Normalizer | None = None,
) -> str | None:
    try:
        return resolve_alpha2(name, table=table, normalizer=normalizer)
    except UnknownCountry:
        return None
