"""
functions/detectors/error_classifier.py

WHAT THIS FILE IS FOR
---------------------
This module classifies errors returned by the search engine so the HTTP
layer can pick a response without inspecting raw error bodies.

Two classifications exist:

- index_not_found: HTTP 404 AND body.error.type == "index_not_found_exception"
  (e.g. the results index has not been created yet)
- generic:         everything else

The message surfaced for either is body.error.reason when non-empty,
falling back to the error's own message.

ACCEPTED ERROR SHAPES
---------------------
- Mapping:   {"statusCode": 404, "body": {"error": {...}}, "message": "..."}
             ("status_code" is accepted as well)
- httpx.HTTPStatusError: status and JSON body are read from .response
- Any other exception: no status, str(exc) as the message

WHAT THIS FILE IS NOT FOR
-------------------------
This module MUST NOT:
- Retry or recover
- Raise (classification never fails)
- Choose HTTP status codes for the client response
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import httpx
import structlog

from functions.utils.payload_access import get_path
from schemas.output_schema import ErrorClassification

logger = structlog.get_logger(__name__)

INDEX_NOT_FOUND_ERROR_TYPE = "index_not_found_exception"


def _normalize_error(err: Any) -> Dict[str, Any]:
    """
    Reduce any accepted error shape to {"status_code", "body", "message"}.
    """
    if isinstance(err, Mapping):
        status = err.get("statusCode")
        if status is None:
            status = err.get("status_code")
        return {"status_code": status, "body": err.get("body"), "message": err.get("message")}

    if isinstance(err, httpx.HTTPStatusError):
        body: Any = None
        try:
            body = err.response.json()
        except ValueError as exc:
            logger.debug("error_body_not_json", status_code=err.response.status_code, error=str(exc))
        return {"status_code": err.response.status_code, "body": body, "message": str(err)}

    if isinstance(err, BaseException):
        return {
            "status_code": getattr(err, "status_code", None),
            "body": getattr(err, "body", None),
            "message": str(err),
        }

    return {"status_code": None, "body": None, "message": None}


def is_index_not_found_error(err: Any) -> bool:
    normalized = _normalize_error(err)
    return (
        normalized["status_code"] == 404
        and get_path(normalized["body"], ["error", "type"], "") == INDEX_NOT_FOUND_ERROR_TYPE
    )


def get_error_message(err: Any) -> Optional[str]:
    normalized = _normalize_error(err)
    reason = get_path(normalized["body"], ["error", "reason"])
    if reason:
        return str(reason)
    message = normalized["message"]
    return str(message) if message is not None else None


def classify_error(err: Any) -> ErrorClassification:
    """
    Classify an upstream error as index_not_found or generic.
    """
    normalized = _normalize_error(err)
    status = normalized["status_code"]

    classification = ErrorClassification(
        kind="index_not_found" if is_index_not_found_error(err) else "generic",
        status_code=status if isinstance(status, int) else None,
        message=get_error_message(err),
    )

    logger.info(
        "upstream_error_classified",
        kind=classification.kind,
        status_code=classification.status_code,
    )
    return classification
