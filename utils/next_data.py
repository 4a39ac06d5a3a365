"""Extraction of the embedded Next.js page payload from server-rendered HTML."""

import json
from typing import Any

from errors import ExtractionError, ParseError

NEXT_DATA_MARKER = 'id="__NEXT_DATA__" type="application/json">'
SCRIPT_CLOSE = "</script>"


def extract_next_data(html: str, marker: str = NEXT_DATA_MARKER) -> Any:
    """Locate and parse the JSON payload following the __NEXT_DATA__ marker.

    Args:
        html: Full HTML document.
        marker: Text immediately preceding the JSON payload.

    Returns:
        The decoded payload.

    Raises:
        ExtractionError: If the marker or its closing script tag is missing.
        ParseError: If the captured payload is not valid JSON.
    """
    start = html.find(marker)
    if start == -1:
        raise ExtractionError("__NEXT_DATA__ not found")

    json_start = start + len(marker)
    end = html.find(SCRIPT_CLOSE, json_start)
    if end == -1:
        raise ExtractionError("__NEXT_DATA__ script not closed")

    raw = html[json_start:end].strip()
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ParseError(f"__NEXT_DATA__ is not valid JSON: {e}") from e
