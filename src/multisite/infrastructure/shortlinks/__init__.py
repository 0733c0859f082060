"""Short-link resolvers and the candidate-link dispatcher."""

from __future__ import annotations

from .clicka import ClickaResolver
from .dispatcher import LinkDispatcher, encode_link_payload, parse_link_payload
from .uprot import UprotResolver

__all__ = [
    "ClickaResolver",
    "LinkDispatcher",
    "UprotResolver",
    "encode_link_payload",
    "parse_link_payload",
]
