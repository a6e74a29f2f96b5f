"""StatusFetcherPort over HTTP against the summary backend."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from pydantic import ValidationError

from summary_poller.core.exceptions import StatusFetchError
from summary_poller.core.interfaces.http_client import HttpClientPort
from summary_poller.core.interfaces.status_fetcher import StatusFetcherPort
from summary_poller.core.models.status import StatusKind, StatusRecord
from summary_poller.core.settings import logger


class HttpStatusFetcher(StatusFetcherPort):
    """GETs `{base_url}{status_path}` with the key substituted for `{key}`.

    A 404 means the backend has no summary process for the key and is
    reported as `idle`; every other failure raises StatusFetchError.
    """

    def __init__(
        self,
        http_client: HttpClientPort,
        base_url: str,
        status_path: str = "/get-summary/{key}",
        timeout: float | None = None,
    ) -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")
        self._status_path = status_path
        self._timeout = timeout

    def status_url(self, key: str) -> str:
        return self._base_url + self._status_path.format(key=quote(key, safe=""))

    async def fetch(self, key: str) -> StatusRecord:
        url = self.status_url(key)
        try:
            body = await self._http.get(url, timeout=self._timeout)
        except StatusFetchError as exc:
            if exc.upstream_status == 404:
                logger.debug(f"[fetch] no summary process key={key}; reporting idle")
                return StatusRecord(status=StatusKind.idle, meeting_id=key)
            exc.key = key
            raise
        return self._parse(key, body)

    def _parse(self, key: str, body: Any) -> StatusRecord:
        if not isinstance(body, dict):
            raise StatusFetchError(
                "Summary status response is not a JSON object",
                key=key,
                diagnostic=f"body_type={type(body).__name__}",
            )
        try:
            record = StatusRecord.model_validate(body)
        except ValidationError as ve:
            detail = "; ".join(
                f"{'.'.join(str(p) for p in err.get('loc', [])) or 'body'}: {err.get('msg', 'invalid value')}"
                for err in ve.errors()
            )
            logger.warning(f"[fetch] invalid summary status key={key} detail={detail}")
            raise StatusFetchError(
                f"Invalid summary status response: {detail}",
                key=key,
                diagnostic=detail,
            ) from ve
        if record.meeting_id is None:
            record.meeting_id = key
        return record
