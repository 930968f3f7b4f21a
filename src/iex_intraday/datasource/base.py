"""Request descriptor protocol shared by every IEX Cloud operation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, TypeVar

T_co = TypeVar("T_co", covariant=True)


@dataclass(frozen=True)
class HTTPRequest:
    """Wire-level description of an outbound call."""

    method: str
    url: str


class IEXRequest(Protocol[T_co]):
    """A request kind that knows how to build and decode itself."""

    @property
    def op(self) -> str:
        """Human readable label used in errors and logs."""

    def build_request(self, base_url: str) -> HTTPRequest:
        """Return the HTTP request to issue against ``base_url``."""

    def decode(self, body: bytes) -> T_co:
        """Translate a successful response body into the typed result."""


__all__ = ["HTTPRequest", "IEXRequest"]
