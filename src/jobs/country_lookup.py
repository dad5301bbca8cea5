from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from typing import Any

from collector.api_client import APIClient, APIResult, MalformedPayload
from transforms.alpha2 import Normalizer
from transforms.countries import build_country_lookup
from transforms.rates import transform_rates
from utils.config import APIConfig
from utils.errors import CountryLookupError, TransportFailure
from utils.logging import get_logger


logger = get_logger(component="jobs_country_lookup")


@dataclass(frozen=True)
class CountryLookupResult:
    table: dict[str, str]
    unresolved: list[str] = field(default_factory=list)
    record_count: int = 0
    status_code: int = 200

    @property
    def resolved_count(self) -> int:
        return len(self.table)

    @property
    def is_complete(self) -> bool:
        return not self.unresolved

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _records_from(data: Any, records_key: str | None) -> list[Any]:
    if data is None:
        # 204: nothing to look up
        return []
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        key = records_key or "response"
        records = data.get(key)
        if isinstance(records, list):
            return records
        raise MalformedPayload(f"Payload object has no list under {key!r}")
    raise MalformedPayload(f"Unexpected payload type: {type(data).__name__}")


def assemble_country_lookup(
    result: APIResult,
    *,
    records_key: str | None = None,
    table: Mapping[str, str] | None = None,
    normalizer: Normalizer | None = None,
) -> CountryLookupResult:
    """
    Fetched payload -> CountryLookupResult.

    The payload is either a JSON array of country records or an object holding
    that array under `records_key` (default "response"). Without an explicit
    `table` the reference table keyed through `normalizer` is used.
    """
    records = _records_from(result.data, records_key)
    lookup = build_country_lookup(records, table=table, normalizer=normalizer)
    return CountryLookupResult(
        table=lookup.table,
        unresolved=lookup.unresolved,
        record_count=len(records),
        status_code=result.status_code,
    )


async def run_country_lookup(
    *,
    client: APIClient,
    endpoint: str,
    params: dict[str, Any] | None = None,
    records_key: str | None = None,
    table: Mapping[str, str] | None = None,
    normalizer: Normalizer | None = None,
) -> CountryLookupResult:
    # Failures propagate as-is; nothing is assembled from a failed fetch.
    try:
        res = await client.get(endpoint, params=params or {})
        out = assemble_country_lookup(res, records_key=records_key, table=table, normalizer=normalizer)
    except CountryLookupError as e:
        logger.error("country_lookup_failed", endpoint=endpoint, error_type=type(e).__name__, err=str(e))
        raise

    if out.unresolved:
        logger.warning("country_lookup_unresolved", endpoint=endpoint, names=out.unresolved)
    logger.info(
        "country_lookup_complete",
        endpoint=endpoint,
        records=out.record_count,
        resolved=out.resolved_count,
        unresolved=len(out.unresolved),
    )
    return out


async def run_country_lookup_from_config(cfg: APIConfig, *, client: APIClient | None = None) -> CountryLookupResult:
    owned = client is None
    api = client or APIClient(base_url=cfg.base_url, timeout_seconds=cfg.timeout_seconds)
    try:
        return await run_country_lookup(client=api, endpoint=cfg.countries_endpoint, params=cfg.countries_params)
    finally:
        if owned:
            await api.aclose()


async def run_latest_rates(*, client: APIClient, endpoint: str) -> list[dict[str, Any]]:
    try:
        res = await client.get(endpoint)
    except TransportFailure as e:
        logger.error("latest_rates_failed", endpoint=endpoint, error_type=type(e).__name__, err=str(e))
        raise

    if res.data is not None and not isinstance(res.data, dict):
        raise MalformedPayload(f"Unexpected rates payload type: {type(res.data).__name__}")
    rows = transform_rates(res.data or {})
    logger.info("latest_rates_complete", endpoint=endpoint, rows=len(rows))
    return rows
