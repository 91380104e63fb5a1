"""Single state query against a Mesos instance.

The state endpoint only answers requests that carry a body, so the query is
an empty-bodied POST rather than a GET.
"""

from __future__ import annotations

import logging
from types import TracebackType

import httpx
import orjson
from pydantic import ValidationError

from mesoswatch.cluster.errors import DecodeError, NetworkError
from mesoswatch.cluster.models import ClusterSnapshot, Endpoint
from mesoswatch.config import settings

logger = logging.getLogger(__name__)


class StateQuerier:
    """Fetches and decodes cluster snapshots over HTTP.

    One outbound request per `fetch()`; retrying is left to the caller.

    Args:
        client: Preconfigured client to use. It is not closed by `aclose()`.
        connect_timeout: Connection establishment budget in seconds
        read_timeout: Budget for sending the request and reading the response
        keepalive: Idle time in seconds before a pooled connection is dropped
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        connect_timeout: float | None = None,
        read_timeout: float | None = None,
        keepalive: float | None = None,
    ) -> None:
        self.connect_timeout = (
            connect_timeout if connect_timeout is not None else settings.connect_timeout
        )
        self.read_timeout = read_timeout if read_timeout is not None else settings.read_timeout
        self.keepalive = keepalive if keepalive is not None else settings.keepalive
        self.requests = 0

        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.read_timeout, connect=self.connect_timeout),
                limits=httpx.Limits(keepalive_expiry=self.keepalive),
                trust_env=True,
            )
        return self._client

    async def fetch(self, endpoint: Endpoint) -> ClusterSnapshot:
        """Query `endpoint` once and decode its state document.

        Raises:
            NetworkError: The request could not be built or failed in transport
            DecodeError: The body is not a JSON state document
        """
        url = endpoint.url
        logger.info(f"Querying mesos endpoint @ {url}")
        self.requests += 1

        try:
            response = await self._get_client().post(url, content=b"")
        except httpx.TimeoutException as e:
            raise NetworkError(f"Timed out querying {url}: {e!r}", endpoint) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise NetworkError(f"Failed to query {url}: {e}", endpoint) from e

        logger.info(f"HTTP response code: {response.status_code} {response.reason_phrase}")
        if response.is_error:
            logger.warning(f"{url} answered {response.status_code} {response.reason_phrase}")

        return self.decode(response.content, endpoint)

    @staticmethod
    def decode(body: bytes, endpoint: Endpoint | None = None) -> ClusterSnapshot:
        """Decode a raw state document.

        Raises:
            DecodeError: Body is not JSON or lacks the leader/pid fields
        """
        try:
            data = orjson.loads(body)
        except orjson.JSONDecodeError as e:
            raise DecodeError(f"Response is not valid JSON: {e}", endpoint) from e

        try:
            return ClusterSnapshot.model_validate(data)
        except ValidationError as e:
            raise DecodeError(
                f"Response does not match the state schema: {e.error_count()} error(s)",
                endpoint,
            ) from e

    async def aclose(self) -> None:
        """Release the HTTP client if this querier created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> StateQuerier:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()
