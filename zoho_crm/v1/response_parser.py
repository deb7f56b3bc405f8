"""Parsing of V1 API responses."""

import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from ..core.models import APIError
from ..core.response import Response

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResultPayload:
    """A response with a "result" section."""
    result: dict[str, Any]


@dataclass(frozen=True)
class NoDataPayload:
    """A response telling there is no data to show."""
    code: str | None
    message: str | None


@dataclass(frozen=True)
class ErrorPayload:
    """A response describing an API error."""
    code: str | None
    message: str | None


V1Payload = ResultPayload | NoDataPayload | ErrorPayload


def classify_payload(data: Any) -> V1Payload:
    """
    Classify a decoded V1 JSON response.

    Raises:
        APIError: If the payload has none of the known shapes
    """
    body = data.get("response") if isinstance(data, dict) else None

    if not isinstance(body, dict):
        raise APIError("Malformed response: missing 'response' object")

    if "error" in body:
        error = body["error"] or {}
        return ErrorPayload(code=_str_or_none(error.get("code")), message=error.get("message"))

    if "nodata" in body:
        nodata = body["nodata"] or {}
        return NoDataPayload(code=_str_or_none(nodata.get("code")), message=nodata.get("message"))

    if "result" in body:
        result = body["result"]
        return ResultPayload(result=result if isinstance(result, dict) else {})

    raise APIError("Malformed response: no 'result', 'nodata' or 'error' section")


def _str_or_none(value: Any) -> str | None:
    return None if value is None else str(value)


class ResponseParser:
    """Turns a raw V1 HTTP response into a Response with a clean content."""

    def parse(self, http_response: httpx.Response, query: Any) -> Response:
        """
        Parse an HTTP response.

        The content is produced by the method handler of the query.

        Raises:
            APIError: If the response describes an API error
        """
        raw_content = http_response.text

        try:
            data = json.loads(raw_content) if raw_content else {}
        except json.JSONDecodeError as e:
            raise APIError(f"Invalid JSON response: {e}", status_code=http_response.status_code)

        payload = classify_payload(data)
        handler = query.get_response_transformer()

        if isinstance(payload, ErrorPayload):
            raise APIError(
                f"API error {payload.code}: {payload.message}",
                status_code=http_response.status_code,
                code=payload.code,
            )

        if isinstance(payload, NoDataPayload):
            logger.debug(f"No data for {query!r}: {payload.message}")
            content = handler.get_empty_response(query)
        else:
            content = handler.transform_response(payload.result, query)

        return Response(query, content, raw_content)
