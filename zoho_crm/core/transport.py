"""HTTP transport: sends requests with retries, one by one or by concurrent batches."""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor

import httpx

from .models import APIError, BatchRequestError

logger = logging.getLogger(__name__)


class RequestSender:
    """
    Sends HTTP requests through an httpx client.

    Features:
    - Built-in retries with exponential backoff for 5xx and network errors
    - Immediate failure on 4xx responses
    - Concurrent execution of request batches on a thread pool
    - Request counting
    """

    def __init__(
        self,
        http_client: httpx.Client | None = None,
        timeout_seconds: float = 10.0,
        max_retries: int = 3,
    ):
        """
        Initialize the request sender.

        Args:
            http_client: Optional httpx client (created if None)
            timeout_seconds: Request timeout in seconds
            max_retries: Maximum attempts for each request
        """
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self.request_count = 0
        self._count_lock = threading.Lock()

        # Track if we own the HTTP client (for cleanup)
        self._owns_client = http_client is None

        if http_client is None:
            self.http_client = httpx.Client(timeout=timeout_seconds)
        else:
            self.http_client = http_client

    def close(self) -> None:
        """Close the HTTP client if we created it."""
        if self._owns_client and self.http_client:
            self.http_client.close()

    def send(self, request: httpx.Request) -> httpx.Response:
        """
        Send a request, retrying transient failures.

        Args:
            request: The request to send

        Returns:
            The successful (2xx) HTTP response

        Raises:
            APIError: On 4xx response, or when retries are exhausted
        """
        last_error = None
        for attempt in range(self.max_retries):
            with self._count_lock:
                self.request_count += 1
            try:
                response = self.http_client.send(request)

                if 200 <= response.status_code < 300:
                    return response

                # 4xx errors - don't retry, fail immediately
                if 400 <= response.status_code < 500:
                    raise APIError(
                        f"API request failed: {response.status_code} {response.text}",
                        status_code=response.status_code,
                    )

                # 5xx errors - retry
                last_error = APIError(
                    f"Server error: {response.status_code} {response.text}",
                    status_code=response.status_code,
                )

            except httpx.RequestError as e:
                # Network errors - retry
                last_error = APIError(f"Request failed: {str(e)}")

            if attempt < self.max_retries - 1:
                logger.warning(
                    f"{request.method} {request.url} failed (attempt {attempt + 1}), retrying: {last_error}"
                )
                time.sleep(2 ** attempt)

        # All retries exhausted
        raise last_error or APIError("Request failed after retries")

    def send_batch(self, requests: list[httpx.Request]) -> list[httpx.Response]:
        """
        Send several requests concurrently and wait for all of them.

        Args:
            requests: The requests to send

        Returns:
            The responses, in the same order as the requests

        Raises:
            BatchRequestError: If any request fails; it holds the index of
                the first failing request and the original exception
        """
        if not requests:
            return []

        logger.debug(f"Sending a batch of {len(requests)} requests")

        with ThreadPoolExecutor(max_workers=len(requests)) as executor:
            futures = [executor.submit(self.send, request) for request in requests]

            responses = []
            for index, future in enumerate(futures):
                try:
                    responses.append(future.result())
                except Exception as e:
                    raise BatchRequestError(index, e) from e

        return responses
