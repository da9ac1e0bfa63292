"""
OpenAPI Mocker Common Utilities

Shared utilities and helpers used across OpenAPI Mocker modules.
"""

from .utils import group_headers, parse_accept_header, media_type_essence, is_json_media_type
from .url_utils import URLNormalizer, NormalizedRequest, OVERSIZED_STATUS

__all__ = [
    'group_headers',
    'parse_accept_header',
    'media_type_essence',
    'is_json_media_type',
    'URLNormalizer',
    'NormalizedRequest',
    'OVERSIZED_STATUS'
]
