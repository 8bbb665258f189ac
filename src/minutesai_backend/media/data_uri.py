"""Helpers for media passed around as base64 ``data:`` URIs."""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass

# MIME types accepted by the transcription endpoint, with the file extension
# used when uploading the payload.
_MIME_EXTENSIONS: dict[str, str] = {
    "audio/mpeg": ".mp3",
    "audio/mp3": ".mp3",
    "audio/mpga": ".mpga",
    "audio/wav": ".wav",
    "audio/x-wav": ".wav",
    "audio/wave": ".wav",
    "audio/mp4": ".m4a",
    "audio/m4a": ".m4a",
    "audio/x-m4a": ".m4a",
    "audio/ogg": ".ogg",
    "audio/flac": ".flac",
    "audio/x-flac": ".flac",
    "audio/webm": ".webm",
    "video/mp4": ".mp4",
    "video/mpeg": ".mpeg",
    "video/webm": ".webm",
    "video/ogg": ".ogg",
}

_DATA_URI_HEADER = re.compile(
    r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)(?:;[\w.+-]+=[\w.+-]+)*;base64$"
)


class DataURIError(ValueError):
    """Raised when a media data URI cannot be accepted."""


@dataclass(frozen=True, slots=True)
class MediaPayload:
    """Decoded media content and its MIME type."""

    mime_type: str
    data: bytes

    @property
    def size_bytes(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        return _MIME_EXTENSIONS[self.mime_type]

    @property
    def filename(self) -> str:
        return f"recording{self.extension}"


def is_supported_mime_type(mime_type: str) -> bool:
    return mime_type.lower() in _MIME_EXTENSIONS


def supported_mime_types() -> list[str]:
    return sorted(_MIME_EXTENSIONS)


def _split_data_uri(uri: str) -> tuple[str, str]:
    if not isinstance(uri, str):
        raise DataURIError("media must be provided as a data URI string")

    header, separator, encoded = uri.strip().partition(",")
    match = _DATA_URI_HEADER.match(header)
    if not separator or match is None:
        raise DataURIError(
            "media must use the format 'data:<mimetype>;base64,<encoded_data>'"
        )

    mime_type = match.group("mime").lower()
    if not mime_type.startswith(("audio/", "video/")):
        raise DataURIError(f"media type {mime_type} is not audio or video")
    if not is_supported_mime_type(mime_type):
        raise DataURIError(
            f"media type {mime_type} is not supported; "
            f"supported types: {', '.join(supported_mime_types())}"
        )
    return mime_type, encoded


def read_data_uri_mime_type(uri: str) -> str:
    """Validate the data URI header without decoding the payload."""
    mime_type, _ = _split_data_uri(uri)
    return mime_type


def parse_data_uri(uri: str, *, max_bytes: int | None = None) -> MediaPayload:
    """Decode ``data:<mimetype>;base64,<encoded_data>`` into a media payload."""
    mime_type, encoded = _split_data_uri(uri)

    encoded = "".join(encoded.split())
    if max_bytes is not None and len(encoded) * 3 // 4 > max_bytes + 2:
        raise DataURIError(f"media exceeds the maximum size of {max_bytes} bytes")

    try:
        data = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DataURIError("media payload is not valid base64") from exc

    if not data:
        raise DataURIError("media payload is empty")
    if max_bytes is not None and len(data) > max_bytes:
        raise DataURIError(f"media exceeds the maximum size of {max_bytes} bytes")

    return MediaPayload(mime_type=mime_type, data=data)


def encode_data_uri(mime_type: str, data: bytes) -> str:
    """Build a base64 data URI for ``data``."""
    if not mime_type or "/" not in mime_type:
        raise DataURIError("mime_type must look like 'type/subtype'")
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type.lower()};base64,{encoded}"


__all__ = [
    "DataURIError",
    "MediaPayload",
    "encode_data_uri",
    "is_supported_mime_type",
    "parse_data_uri",
    "read_data_uri_mime_type",
    "supported_mime_types",
]
