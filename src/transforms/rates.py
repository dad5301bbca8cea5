from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class RatesIn(BaseModel):
    base: str | None = None
    date: str | None = None
    rates: dict[str, float] | None = None


def transform_rates(envelope: dict[str, Any]) -> list[dict[str, Any]]:
    """
    Latest-rates payload -> one row per currency, sorted by currency code.
    """
    r = RatesIn.model_validate(envelope or {})
    return [
        {"base": r.base, "date": r.date, "currency": cur, "rate": rate}
        for cur, rate in sorted((r.rates or {}).items())
    ]
