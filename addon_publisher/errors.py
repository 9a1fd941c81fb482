"""
Error taxonomy for the add-on publisher.
Every failure carries the process exit code the CLI reports it with.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Optional

import requests

logger = logging.getLogger(__name__)

ERR_XPI_FILE = 1
ERR_XPI_VALIDATION_FAILED = 2
ERR_XPI_VALIDATION_TIMEOUT = 4
ERR_INVALID_INPUT = 5
ERR_VERSION_NUMBER = 6
ERR_UNKNOWN_HTTP = 254
ERR_UNKNOWN = 255

# Keep remote diagnostics readable in CI logs.
MAX_DETAIL_CHARS = 2000


def stringify(value: Any) -> str:
    """Render arbitrary payloads for humans; strings pass through unchanged."""
    if isinstance(value, str):
        return value
    try:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError):
        return str(value)


def truncate(text: str, limit: int = MAX_DETAIL_CHARS) -> str:
    if len(text) <= limit:
        return text
    return f"{text[:limit]}... ({len(text) - limit} more characters)"


class PublishError(RuntimeError):
    """Base error; `code` is the exit code surfaced by the CLI."""

    code = ERR_UNKNOWN

    def __init__(self, message: str, detail: Optional[str] = None) -> None:
        self.message = message
        self.detail = detail
        super().__init__(message)


class InputError(PublishError):
    code = ERR_INVALID_INPUT


class PackageFileError(PublishError):
    """The package file could not be opened for upload."""

    code = ERR_XPI_FILE


class ValidationFailed(PublishError):
    code = ERR_XPI_VALIDATION_FAILED

    def __init__(self, validation: Any) -> None:
        self.validation = validation
        rendered = stringify(validation)
        super().__init__(
            f"Package processed, but not valid:\n{truncate(rendered)}",
            detail=rendered,
        )


class ValidationTimeout(PublishError):
    code = ERR_XPI_VALIDATION_TIMEOUT


class ManifestVersionError(PublishError):
    code = ERR_VERSION_NUMBER


class UpstreamHttpError(PublishError):
    """The add-on service answered with an error, or never answered at all."""

    code = ERR_UNKNOWN_HTTP

    def __init__(self, message: str, status: Optional[int] = None, body: Optional[str] = None) -> None:
        self.status = status
        self.body = body
        super().__init__(message, detail=body)

    @classmethod
    def from_requests(cls, exc: requests.RequestException) -> "UpstreamHttpError":
        response = exc.response
        if response is not None:
            return cls(
                f"Add-on API server responded with error code: {response.status_code}",
                status=response.status_code,
                body=response.text,
            )
        # Incomplete request, usually an unstable network.
        return cls(str(exc) or exc.__class__.__name__)


def handle_error(error: BaseException) -> int:
    """Report an error once and return the exit code for it."""
    if isinstance(error, PublishError):
        logger.error(error.message)
        if isinstance(error, UpstreamHttpError) and error.body:
            logger.error(truncate(error.body))
        elif error.detail and not isinstance(error, ValidationFailed):
            logger.debug(error.detail)
        return error.code

    # Unknown error. This may be a bug in the publisher itself.
    logger.debug("Unhandled error", exc_info=error)
    if str(error):
        logger.error("Unknown error occurred: %s", error)
    else:
        logger.error("Unknown error occurred.")
    return ERR_UNKNOWN
