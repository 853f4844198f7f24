"""
View event payloads

Datastar sends the page signals either as a ``datastar`` query parameter
(GET) or as a JSON body (POST); widget scripts post plain JSON bodies.
"""

import json
from typing import Any, Dict

from starlette.requests import Request

from .errors import PayloadError


def _decode(raw) -> Dict[str, Any]:
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise PayloadError(f"Malformed payload: {e}") from e
    if not isinstance(data, dict):
        raise PayloadError("Payload must be a JSON object")
    return data


async def read_payload(request: Request) -> Dict[str, Any]:
    """Extract the Datastar (or plain JSON) payload from a request."""
    datastar_json_str = request.query_params.get('datastar')
    if datastar_json_str:
        return _decode(datastar_json_str)

    content_type = request.headers.get('content-type', '')
    if content_type.startswith(('application/x-www-form-urlencoded', 'multipart/form-data')):
        form_data = await request.form()
        datastar_json_str = form_data.get('datastar')
        return _decode(datastar_json_str) if datastar_json_str else dict(form_data)

    body = await request.body()
    if not body.strip():
        return {}
    return _decode(body)
