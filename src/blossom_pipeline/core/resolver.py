"""Resolve canonical URLs from raw Blossom upload responses.

A raw response is expected to be a list of tags such as
``[["url", "https://..."], ["x", "<sha256>"], ["m", "image/png"]]``. Anything
else is treated as malformed. Resolution never raises.
"""

from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union


@dataclass(frozen=True)
class Tags:
    """A well-formed response: an ordered sequence of tag entries."""

    entries: Tuple[Tuple[Any, ...], ...]


@dataclass(frozen=True)
class Malformed:
    """A response that is not shaped like a list of tags."""

    raw: Any


Response = Union[Tags, Malformed]


def parse_response(raw: Any) -> Response:
    """Classify a raw upload response.

    Entries that are not themselves sequences are dropped, as a tag lookup
    would skip them anyway.
    """
    if not isinstance(raw, (list, tuple)):
        return Malformed(raw)
    entries = tuple(tuple(tag) for tag in raw if isinstance(tag, (list, tuple)))
    return Tags(entries)


def resolve_url(raw: Any) -> Optional[str]:
    """Return the URL of the first ``["url", <value>]`` tag, or None."""
    response = raw if isinstance(raw, (Tags, Malformed)) else parse_response(raw)
    if isinstance(response, Malformed):
        return None
    for tag in response.entries:
        if len(tag) >= 2 and tag[0] == "url" and isinstance(tag[1], str):
            return tag[1]
    return None
