"""Validation and decoding of Jolokia response envelopes."""

import asyncio
import json
from typing import Any, Dict

import httpx

from ..exceptions import (
    BadStatusError,
    BodyReadError,
    DecodeError,
    HTTPStatusError,
    MissingStatusError,
)
from ..services.transport import TransportResponse

JOLOKIA_OK = 200


def decode_body(body: bytes) -> Dict[str, Any]:
    """
    Decode and check a Jolokia envelope.

    Args:
        body: Raw response body

    Returns:
        Dict[str, Any]: The whole envelope; callers take "value" from it

    Raises:
        DecodeError: Body is not a JSON object
        MissingStatusError: Envelope has no "status"
        BadStatusError: "status" is not 200
    """
    try:
        envelope = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodeError(f"Error decoding JSON response: {e}") from e

    if not isinstance(envelope, dict):
        raise DecodeError(
            f"Error decoding JSON response: expected an object, got {type(envelope).__name__}"
        )

    if "status" not in envelope:
        raise MissingStatusError()

    status = envelope["status"]
    # bool is an int subclass; True must not pass as a status
    if isinstance(status, bool) or status != JOLOKIA_OK:
        raise BadStatusError(status, envelope.get("error"))

    return envelope


async def decode_response(response: TransportResponse) -> Dict[str, Any]:
    """
    Check the HTTP status, read the body and decode the envelope.

    The response is closed in every case.

    Args:
        response: Response returned by JolokiaTransport.execute

    Returns:
        Dict[str, Any]: Decoded envelope

    Raises:
        HTTPStatusError: HTTP status is not 200
        BodyReadError: Body could not be read completely
        DecodeError, MissingStatusError, BadStatusError: see decode_body
    """
    try:
        if response.status_code != httpx.codes.OK:
            raise HTTPStatusError(
                response.status_code, response.reason_phrase, response.url
            )

        try:
            body = await response.read()
        except (httpx.HTTPError, OSError, asyncio.TimeoutError) as e:
            raise BodyReadError(
                f"Failed to read response body from {response.url}: "
                f"{type(e).__name__}: {e}"
            ) from e
    finally:
        await response.aclose()

    return decode_body(body)
