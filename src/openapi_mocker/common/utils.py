"""
OpenAPI Mocker Common Utilities

Header and media type helpers shared by the selector and the synthesizer.
"""

from typing import Dict, Iterable, List, Tuple


def group_headers(headers: Iterable[Tuple[str, str]]) -> Dict[str, List[str]]:
    """
    Group raw header pairs by lower-cased name.

    Repeated headers keep every value in order of appearance.

    Example:
        group_headers([('X-Name', 'tyrion'), ('x-name', 'jon')])
        # {'x-name': ['tyrion', 'jon']}
    """
    grouped: Dict[str, List[str]] = {}
    for name, value in headers:
        grouped.setdefault(name.lower(), []).append(value.strip())
    return grouped


def parse_accept_header(accept: str) -> List[str]:
    """
    Parse an Accept header into media ranges, most preferred first.

    Ranges are ordered by q-value, then by position. Parameters other
    than q are dropped and ranges with q=0 are excluded.

    Args:
        accept: Raw Accept header value

    Returns:
        Lower-cased media ranges
    """
    ranked = []
    for position, part in enumerate(accept.split(',')):
        media_range, *params = [p.strip() for p in part.split(';')]
        if not media_range:
            continue

        quality = 1.0
        for param in params:
            name, _, value = param.partition('=')
            if name.strip().lower() == 'q':
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0

        if quality > 0:
            ranked.append((-quality, position, media_range.lower()))

    ranked.sort()
    return [media_range for _, _, media_range in ranked]


def media_type_essence(content_type: str) -> str:
    """Strip parameters: "application/json; charset=utf-8" -> "application/json"."""
    return content_type.split(';', 1)[0].strip().lower()


def is_json_media_type(content_type: str) -> bool:
    """True for application/json and structured "+json" types."""
    essence = media_type_essence(content_type)
    return essence == 'application/json' or essence.endswith('+json')
