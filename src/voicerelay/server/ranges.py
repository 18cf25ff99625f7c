"""Single-range HTTP byte serving for in-memory payloads."""

import re

from starlette.responses import Response

_RANGE_RE = re.compile(r"^bytes=(\d+)-(\d*)$")


class RangeNotSatisfiable(Exception):
    """Raised when a Range header is malformed or outside the payload."""

    def __init__(self, size: int, header: str | None = None) -> None:
        super().__init__(f"Range {header!r} not satisfiable for {size} bytes")
        self.size = size
        self.header = header

    @property
    def content_range(self) -> str:
        return f"bytes */{self.size}"


def parse_range(header: str | None, size: int) -> tuple[int, int] | None:
    """Resolve a ``bytes=<start>-<end>`` header against a payload size.

    ``<end>`` is optional and defaults to the last byte. Suffix ranges
    (``bytes=-500``) and multiple ranges are not supported.

    Args:
        header: Raw Range header value, None when absent
        size: Payload length in bytes

    Returns:
        Inclusive (start, end) offsets, or None when no header was sent

    Raises:
        RangeNotSatisfiable: If the header is malformed, inverted, or
            reaches past the end of the payload
    """
    if header is None:
        return None

    match = _RANGE_RE.match(header.strip())
    if match is None:
        raise RangeNotSatisfiable(size, header)

    start = int(match.group(1))
    end = int(match.group(2)) if match.group(2) else size - 1

    if start > end or start >= size or end >= size:
        raise RangeNotSatisfiable(size, header)
    return start, end


def byte_range_response(
    payload: bytes, range_header: str | None, media_type: str = "audio/mpeg"
) -> Response:
    """Build a 200, 206 or 416 response for ``payload``.

    Whether a Range header was sent, not what it covers, picks between 200
    and 206: a range spanning the whole payload is still a 206.
    """
    size = len(payload)
    try:
        byte_range = parse_range(range_header, size)
    except RangeNotSatisfiable as e:
        return Response(
            status_code=416,
            headers={"Content-Range": e.content_range},
        )

    if byte_range is None:
        return Response(
            content=payload,
            status_code=200,
            media_type=media_type,
            headers={"Content-Length": str(size), "Accept-Ranges": "bytes"},
        )

    start, end = byte_range
    return Response(
        content=payload[start : end + 1],
        status_code=206,
        media_type=media_type,
        headers={
            "Content-Range": f"bytes {start}-{end}/{size}",
            "Content-Length": str(end - start + 1),
            "Accept-Ranges": "bytes",
        },
    )
