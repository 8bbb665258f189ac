"""Media payload helpers."""

from .data_uri import (
    DataURIError,
    MediaPayload,
    encode_data_uri,
    is_supported_mime_type,
    parse_data_uri,
    read_data_uri_mime_type,
    supported_mime_types,
)

__all__ = [
    "DataURIError",
    "MediaPayload",
    "encode_data_uri",
    "is_supported_mime_type",
    "parse_data_uri",
    "read_data_uri_mime_type",
    "supported_mime_types",
]
