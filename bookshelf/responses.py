"""
Bookshelf — Response Encoder
=============================

What:  The one place that turns handler results into HTTP responses.
How:   encode_response() serializes any JSON-compatible value (Pydantic
       models included) with an application/json content type;
       error_response() wraps a message in the fixed `{"error": ...}` envelope.

The body is rendered before the status line goes out, so a value that
cannot be encoded is logged and answered with the generic 500 envelope.
"""

import logging
from typing import Any, Mapping, Optional

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "internal server error"


def error_response(
    status_code: int,
    message: str,
    headers: Optional[Mapping[str, str]] = None,
) -> JSONResponse:
    """Error envelope: `{"error": message}`."""
    return JSONResponse(
        status_code=status_code,
        content={"error": message},
        headers=dict(headers) if headers else None,
    )


def encode_response(status_code: int, value: Any) -> Response:
    """
    Serialize `value` as the JSON body of a `status_code` response.

    Falls back to a logged 500 when the value cannot be encoded.
    """
    try:
        return JSONResponse(status_code=status_code, content=jsonable_encoder(value))
    except (TypeError, ValueError) as e:
        logger.error(
            "Failed to encode %d response body: %s",
            status_code,
            e,
            exc_info=True,
        )
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)


def empty_response(status_code: int = status.HTTP_204_NO_CONTENT) -> Response:
    """A response with no body, e.g. 204 after a delete."""
    return Response(status_code=status_code)
