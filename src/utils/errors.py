from __future__ import annotations


class CountryLookupError(Exception):
    pass


class TransportFailure(CountryLookupError):
    """Network/HTTP-level failure while fetching reference data."""


class MalformedRecord(CountryLookupError):
    def __init__(self, index: int, reason: str = "missing 'name' field") -> None:
        super().__init__(f"Malformed country record at index {index}: {reason}")
        self.index = index
        self.reason = reason


class UnknownCountry(CountryLookupError, LookupError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown country name: {name!r}")
        self.name = name
