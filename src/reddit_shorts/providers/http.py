"""Shared HTTP request handling for REST providers."""

import logging
from typing import Any, Optional

import httpx

from ..constants import HTTP_RETRYABLE_STATUS_CODES, HTTP_TIMEOUT_SECONDS
from ..pipeline.base import ProviderError

_api_logger = logging.getLogger("reddit_shorts.api")


def _error_message(response: httpx.Response) -> str:
    """Pull a readable message out of an error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(body, dict):
        for key in ("message", "err_msg", "error"):
            if body.get(key):
                return str(body[key])
    return str(body)[:200]


async def request_json(
    method: str,
    url: str,
    *,
    provider: str,
    operation: str,
    headers: Optional[dict] = None,
    params: Optional[dict] = None,
    json: Optional[Any] = None,
    timeout: float = HTTP_TIMEOUT_SECONDS,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> dict:
    """Make a request and return the decoded JSON body.

    Args:
        method: HTTP method.
        url: Full URL.
        provider: Provider name for error context.
        operation: Operation name for error context.
        headers: Request headers.
        params: Query parameters.
        json: JSON request body.
        timeout: Request timeout in seconds.
        transport: Optional transport, used to stub the network in tests.

    Returns:
        JSON response as dict (empty for bodiless responses).

    Raises:
        ProviderError: On network failures and non-2xx responses.
    """
    # Host only; webhook URLs carry their token in the path
    _api_logger.info(f"{provider}.{operation} | {method} {httpx.URL(url).host}")

    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
            response = await client.request(method, url, headers=headers, params=params, json=json)
    except httpx.TimeoutException as e:
        raise ProviderError(
            f"Request timed out after {timeout}s",
            provider=provider,
            operation=operation,
            is_retryable=True,
        ) from e
    except httpx.HTTPError as e:
        raise ProviderError(
            f"Request failed: {e}",
            provider=provider,
            operation=operation,
            is_retryable=True,
        ) from e

    if response.is_error:
        message = _error_message(response)
        _api_logger.error(f"{provider}.{operation} | HTTP {response.status_code}: {message}")
        raise ProviderError(
            message,
            provider=provider,
            operation=operation,
            status_code=response.status_code,
            is_retryable=response.status_code in HTTP_RETRYABLE_STATUS_CODES,
        )

    if not response.content:
        return {}

    try:
        result = response.json()
    except ValueError as e:
        raise ProviderError(
            "Response is not valid JSON",
            provider=provider,
            operation=operation,
            status_code=response.status_code,
        ) from e

    _api_logger.info(f"{provider}.{operation} | SUCCESS")
    return result if isinstance(result, dict) else {"data": result}
