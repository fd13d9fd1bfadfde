import enum
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

from inventory.contract import SCHEME, PATH_INVENTORY


class UriKind(str, enum.Enum):
    """Kinds of content URI recognized by the data layer."""
    COLLECTION = "collection"
    ITEM = "item"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class UriMatch:
    """
    Result of classifying a content URI.

    Attributes:
        kind: What the URI points at
        row_id: Product ID, set only for ITEM matches
    """
    kind: UriKind
    row_id: Optional[int] = None


NO_MATCH = UriMatch(UriKind.UNKNOWN)

# Row IDs are signed 64-bit integers
MAX_ROW_ID = 2 ** 63 - 1


def path_segments(uri: str) -> list[str]:
    """Return the non-empty path segments of a URI."""
    return [segment for segment in urlsplit(uri).path.split("/") if segment]


def match_uri(uri: str, authority: str) -> UriMatch:
    """
    Classify a content URI.

    Args:
        uri: URI to classify
        authority: Content authority the data layer answers for

    Returns:
        COLLECTION for ``content://<authority>/inventory``,
        ITEM(id) for ``content://<authority>/inventory/<id>``,
        UNKNOWN for anything else
    """
    if not isinstance(uri, str):
        return NO_MATCH

    parts = urlsplit(uri)
    if parts.scheme != SCHEME or parts.netloc != authority:
        return NO_MATCH
    if parts.query or parts.fragment:
        return NO_MATCH

    segments = path_segments(uri)
    if not segments or segments[0] != PATH_INVENTORY:
        return NO_MATCH

    if len(segments) == 1:
        return UriMatch(UriKind.COLLECTION)

    # Only ASCII digits, so "+3" or "٣" never match
    if len(segments) == 2 and segments[1].isascii() and segments[1].isdigit():
        row_id = int(segments[1])
        if row_id <= MAX_ROW_ID:
            return UriMatch(UriKind.ITEM, row_id)

    return NO_MATCH
