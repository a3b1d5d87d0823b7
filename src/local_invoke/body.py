"""
Request body normalization
The AWS CLI sends invoke payloads without a Content-Type header, so a body
can't be left to Flask's JSON handling alone.
"""
import json
import logging

from flask import g, request

from .exceptions import MalformedBodyError

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPES = ("application/json", "binary/octet-stream")


def _parse_declared_body():
    """Parse bodies that declare one of the JSON content types"""
    if request.mimetype not in JSON_CONTENT_TYPES:
        return None
    # force=True so binary/octet-stream goes through the JSON parser too;
    # malformed JSON raises Flask's BadRequest
    return request.get_json(force=True, silent=False, cache=True)


def normalize_body():
    """before_request hook: leave a parsed body in g.body"""
    logger.debug(f"Request: {request.method} {request.path} from {request.remote_addr}, Headers: {dict(request.headers)}")

    # read once; werkzeug caches it for get_json and the fallback below
    raw = request.get_data(cache=True)
    parsed = _parse_declared_body() if raw else None
    if request.headers.get("Content-Type") and isinstance(parsed, (dict, list)) and len(parsed) > 0:
        g.body = parsed
        return None

    body = raw.decode("utf-8", errors="replace")
    if body[:1] == "{":
        try:
            body = json.loads(body)
        except json.JSONDecodeError as e:
            logger.warning(f"Could not parse request body as JSON: {e}")
            raise MalformedBodyError() from e

    g.body = body
    return None
