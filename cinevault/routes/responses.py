"""
Request and response helpers shared by the route modules.

v1 handlers return plain DTOs; v2 handlers read an ApiRequest envelope and
answer with an ApiResponse envelope.
"""

from typing import Any, Optional, Tuple

from flask import jsonify, request
from pydantic import BaseModel, TypeAdapter

from cinevault.exceptions import BadRequestError
from cinevault.logging_context import bind_envelope
from cinevault.schemas import ApiRequest, ApiResponse


def to_jsonable(value: Any) -> Any:
    """Dump pydantic models (also inside lists) to JSON-ready structures."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, list):
        return [to_jsonable(item) for item in value]
    return value


def dto(value: Any, status_code: int = 200, headers: Optional[dict] = None):
    """Plain v1 response."""
    return jsonify(to_jsonable(value)), status_code, headers or {}


def ok(data: Any = None, message: str = "OK", status_code: int = 200, headers: Optional[dict] = None):
    """
    v2 response envelope.

    Args:
        data: Payload (pydantic model, list or plain value); omitted when None
        message: Human-readable outcome
        status_code: HTTP status code, echoed in the envelope
        headers: Extra response headers (e.g. Location)
    """
    envelope = ApiResponse(status_code=status_code, message=message, data=to_jsonable(data))
    return jsonify(envelope.to_dict()), status_code, headers or {}


def read_json_body(required: bool = True) -> Any:
    """
    Return the decoded JSON body.

    An empty body yields None; a body that is not valid JSON is rejected.
    """
    if not request.get_data(cache=True):
        if required:
            raise BadRequestError("Request body is required")
        return None
    body = request.get_json(force=True, silent=True)
    if body is None:
        raise BadRequestError("Request body must be valid JSON")
    return body


def parse_body(model):
    """Validate a v1 request body against ``model``."""
    return TypeAdapter(model).validate_python(read_json_body())


def parse_envelope(model=None, required: bool = True, fallback_to_args: bool = False) -> Tuple[ApiRequest, Any]:
    """
    Parse the v2 ApiRequest envelope and validate its ``data``.

    Envelope metadata (never the secret code) is bound to the log context.

    Args:
        model: Schema for ``data`` (a pydantic model or a typing construct
            such as ``List[int]``); None when the action takes no payload
        required: Whether ``data`` must be present
        fallback_to_args: Read criteria from the query string when the
            envelope carries no ``data`` (read-only search actions)

    Returns:
        Tuple of (envelope, validated data or None)
    """
    body = read_json_body(required=required and not fallback_to_args)
    if body is None:
        body = {}
    if not isinstance(body, dict):
        raise BadRequestError("Request body must be an ApiRequest envelope object")

    envelope = ApiRequest.model_validate(body)
    bind_envelope(envelope.username, envelope.name_of_server, str(envelope.request_id))

    if model is None:
        return envelope, None

    data = envelope.data
    if data is None and fallback_to_args:
        data = request.args.to_dict()
    if data is None:
        if required:
            raise BadRequestError("Envelope data is required")
        return envelope, None

    return envelope, TypeAdapter(model).validate_python(data)
