"""HTTP client for the clinical text-annotation service.

One POST per input file:
- Request body: the annotator request template with the file text injected
  as ``unstructured[0].text``
- Headers: ``Accept: application/json``, ``Content-Type: application/json``
  and ``Authorization`` when configured

5xx responses and transport failures are retried up to ``max_attempts``
total attempts. Any other non-200 status ends the file without a retry.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from typing import Any

import httpx

from acd_batch.config import BatchConfig
from acd_batch.errors import (
    AnnotationError,
    AnnotationResponseError,
    AnnotationServerError,
    AnnotationStatusError,
    AnnotationTransportError,
)

logger = logging.getLogger(__name__)


def build_request(template: dict[str, Any], text: str) -> dict[str, Any]:
    """Build a request body from the annotator template.

    The template is deep-copied, so it is never modified.

    Args:
        template: Parsed annotator configuration
        text: File content to annotate

    Returns:
        Request body with ``text`` set on the first ``unstructured`` element
    """
    body = copy.deepcopy(template)
    if not body.get("unstructured"):
        body["unstructured"] = [{}]
    body["unstructured"][0]["text"] = text
    return body


def _is_server_error(status_code: int) -> bool:
    return 500 <= status_code < 600


class AnnotationClient:
    """Submits file content to the annotation service.

    Attributes:
        config: Batch configuration (service URL, credentials, retry budget)
        template: Annotator request template shared by every request
    """

    def __init__(self, config: BatchConfig, template: dict[str, Any]) -> None:
        self.config = config
        self.template = template
        if not config.verify_tls:
            logger.warning(
                "TLS certificate verification is disabled for %s", config.url or "the service"
            )

    def build_headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if self.config.authorization:
            headers["Authorization"] = self.config.authorization
        return headers

    async def annotate(self, relative_path: str, text: str) -> dict[str, Any] | None:
        """Annotate one file's text.

        Failures are logged and absorbed so the batch can move on.

        Args:
            relative_path: File path relative to the data directory (for logging)
            text: File content

        Returns:
            The parsed response object, or None if the file could not be annotated
        """
        try:
            return await self._post_with_retry(relative_path, build_request(self.template, text))
        except AnnotationTransportError as e:
            logger.warning("%s failed with error: %s", relative_path, e)
        except AnnotationError as e:
            logger.debug("%s annotation abandoned: %s", relative_path, e)
        return None

    async def _post_with_retry(self, relative_path: str, payload: dict[str, Any]) -> dict[str, Any]:
        """POST the payload, retrying 5xx and transport failures.

        Raises:
            AnnotationServerError: If every attempt got a 5xx response
            AnnotationStatusError: On a non-200, non-5xx response
            AnnotationTransportError: If the last attempt failed in transport
            AnnotationResponseError: If a 200 body is not a JSON object, or the
                response could not be received or decoded
        """
        max_attempts = self.config.max_attempts
        headers = self.build_headers()

        async with httpx.AsyncClient(
            verify=self.config.verify_tls,
            timeout=self.config.timeout_seconds,
        ) as client:
            for attempt in range(max_attempts):
                retries_left = attempt < max_attempts - 1
                logger.info(
                    "%s: POST %s (attempt %d/%d)",
                    relative_path,
                    self.config.url,
                    attempt + 1,
                    max_attempts,
                )

                try:
                    response = await client.post(self.config.url, json=payload, headers=headers)
                except httpx.TransportError as e:
                    message = f"{type(e).__name__}: {e}"
                    if retries_left:
                        logger.warning(
                            "%s failed with error: %s... retrying ...", relative_path, message
                        )
                        await self._backoff(attempt)
                        continue
                    raise AnnotationTransportError(message) from e
                except httpx.HTTPError as e:
                    message = f"{type(e).__name__}: {e}"
                    logger.warning("%s failed with error: %s", relative_path, message)
                    raise AnnotationResponseError(message) from e

                if response.status_code == 200:
                    return self._parse_body(relative_path, response)

                retryable = _is_server_error(response.status_code)
                self._log_failure(relative_path, response, retrying=retryable and retries_left)
                if retryable and retries_left:
                    await self._backoff(attempt)
                    continue
                if retryable:
                    raise AnnotationServerError(response.status_code, response.text)
                raise AnnotationStatusError(response.status_code, response.text)

        raise AnnotationError("Unexpected end of retry loop")

    def _parse_body(self, relative_path: str, response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            logger.warning("%s failed with error: invalid JSON in response: %s", relative_path, e)
            raise AnnotationResponseError(f"Invalid JSON in response: {e}") from e

        if not isinstance(data, dict):
            logger.warning("%s failed with error: response is not a JSON object", relative_path)
            raise AnnotationResponseError("Response is not a JSON object")
        return data

    def _log_failure(self, relative_path: str, response: httpx.Response, retrying: bool) -> None:
        message = (
            f"{relative_path} failed with status {response.status_code}: "
            f"{response.text or 'No error message provided'}"
        )
        if retrying:
            message += "... retrying ..."
        logger.warning(message)
        if self.config.print_errors:
            logger.info(
                "Response for %s: status=%d headers=%s body=%s",
                relative_path,
                response.status_code,
                dict(response.headers),
                response.text,
            )

    async def _backoff(self, attempt: int) -> None:
        delay = self.config.retry_delay_seconds * (2**attempt)
        if delay > 0:
            await asyncio.sleep(delay)
