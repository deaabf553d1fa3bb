"""Header key and gRPC metadata helpers shared by both interceptors."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple, Union

logger = logging.getLogger(__name__)

# W3C Trace Context header used to carry the span context between services.
TRACEPARENT_HEADER = "traceparent"

MetadataValue = Union[str, bytes]
Metadata = Iterable[Tuple[str, MetadataValue]]


def _pairs(metadata: Optional[Metadata]) -> List[Tuple[str, MetadataValue]]:
    """
    Normalize gRPC metadata into a list of (key, value) tuples.

    Accepts None, sequences of tuples, grpc ``_Metadatum`` entries
    (which expose ``key``/``value``) and ``grpc.aio.Metadata``.
    """
    if metadata is None:
        return []
    pairs = []
    for item in metadata:
        if hasattr(item, "key") and hasattr(item, "value"):
            pairs.append((item.key, item.value))
        else:
            key, value = item
            pairs.append((key, value))
    return pairs


def get_metadata_value(metadata: Optional[Metadata], key: str) -> Optional[str]:
    """
    Return the first value stored under ``key`` (case-insensitive) as text.

    Byte values are decoded as ASCII; anything that does not decode is
    treated as absent.
    """
    wanted = key.lower()
    for name, value in _pairs(metadata):
        if name.lower() != wanted:
            continue
        if isinstance(value, bytes):
            try:
                return value.decode("ascii")
            except UnicodeDecodeError:
                logger.debug("Ignoring non-ASCII %s metadata value", key)
                return None
        return value
    return None


def set_metadata_value(
    metadata: Optional[Metadata], key: str, value: str
) -> List[Tuple[str, MetadataValue]]:
    """Return a new metadata list with every ``key`` entry replaced by ``value``."""
    wanted = key.lower()
    pairs = [(name, v) for name, v in _pairs(metadata) if name.lower() != wanted]
    pairs.append((wanted, value))
    return pairs
