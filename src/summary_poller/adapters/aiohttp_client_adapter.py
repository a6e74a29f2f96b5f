# summary_poller/adapters/aiohttp_client_adapter.py
import asyncio
import aiohttp
from typing import Any, Dict, Optional

from summary_poller.core.interfaces.http_client import HttpClientPort
from summary_poller.core.exceptions import StatusFetchError
from summary_poller.core.settings import logger


class AioHttpClientAdapter(HttpClientPort):
    def __init__(
        self,
        total_timeout: float = 10.0,
        sock_read_timeout: float = 10.0,
        sock_connect_timeout: float = 5.0,
    ):
        self._session: Optional[aiohttp.ClientSession] = None
        self._default_sock_read = sock_read_timeout
        self._default_sock_connect = sock_connect_timeout
        # Used when callers do not pass a timeout
        self._default_client_timeout = aiohttp.ClientTimeout(
            total=total_timeout,
            sock_read=sock_read_timeout,
            sock_connect=sock_connect_timeout,
        )

    async def __aenter__(self):
        """Async context manager entry"""
        self._session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.close()
        return False

    def _client_timeout(self, timeout: float | None) -> aiohttp.ClientTimeout:
        if timeout is None:
            return self._default_client_timeout
        # Keep adapter-level sock_read/sock_connect values but apply provided total
        return aiohttp.ClientTimeout(
            total=timeout,
            sock_read=self._default_sock_read,
            sock_connect=self._default_sock_connect,
        )

    async def get(self, url: str, timeout: float | None = None) -> Dict[str, Any]:
        """Fetch JSON from URL, translating HTTP/network errors into StatusFetchError."""
        if self._session is None:
            raise RuntimeError("HTTP client not initialized. Use 'async with' context manager.")

        try:
            async with self._session.get(url, timeout=self._client_timeout(timeout)) as response:
                # Status first: error pages are rarely JSON
                response.raise_for_status()
                try:
                    return await response.json()
                except aiohttp.ContentTypeError:
                    response_text = await response.text()
                    logger.error(
                        "Invalid JSON response from summary backend. URL: %s, Content: %s",
                        url,
                        response_text[:500],
                    )
                    raise StatusFetchError(
                        "The summary backend returned a response that is not valid JSON",
                        upstream_status=502,
                        diagnostic=response_text[:100],
                    )

        except StatusFetchError:
            raise

        except asyncio.TimeoutError:
            logger.error("Timeout when requesting summary backend. URL: %s", url)
            raise StatusFetchError(
                "The request to the summary backend timed out",
                upstream_status=504,
            )

        except aiohttp.ClientResponseError as client_response_error:
            logger.warning(
                "HTTP error when requesting summary backend. URL: %s, Status: %s, Error: %s",
                url,
                client_response_error.status,
                str(client_response_error),
            )
            raise StatusFetchError(
                f"The summary backend returned an HTTP error: {client_response_error.status}",
                upstream_status=client_response_error.status,
                diagnostic=client_response_error.message,
            )

        except aiohttp.ClientError as client_error:
            logger.error(
                "Connection error when requesting summary backend. URL: %s, Error: %s",
                url,
                str(client_error),
            )
            raise StatusFetchError(
                "There was a connection error with the summary backend",
                upstream_status=502,
                diagnostic=str(client_error),
            )

        except Exception as unexpected_error:
            logger.error(
                "Unexpected error for summary backend. URL: %s, Error: %s",
                url,
                str(unexpected_error),
            )
            raise StatusFetchError(
                "An unexpected error occurred while requesting the summary status",
                upstream_status=500,
                diagnostic=str(unexpected_error),
            )

    async def close(self) -> None:
        """Close the session"""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None
