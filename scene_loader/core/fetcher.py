"""
Asset fetcher: the single asynchronous boundary of a load session.

One ``GET`` per request, no redirects, no retry, no client-side timeout.
The outcome is always reported through the completion callback, exactly
once; no exception propagates past this module.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable

import httpx

from ..errors import HttpError, TransportError

logger = logging.getLogger(__name__)


class FetchStatus(str, Enum):
    success = "success"
    transport_error = "transport_error"
    http_error = "http_error"


@dataclass(frozen=True)
class FetchResult:
    address: str
    status: FetchStatus
    code: int | None = None
    payload: bytes | None = None
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.status == FetchStatus.success

    def raise_for_status(self) -> bytes:
        """Return the payload, or raise the matching ``FetchError``."""
        if self.status == FetchStatus.transport_error:
            raise TransportError(self.reason or "transport failure")
        if self.status == FetchStatus.http_error:
            raise HttpError(self.code or 0, self.reason or None)
        return self.payload or b""


FetchCallback = Callable[[FetchResult], None]


class AssetFetcher:
    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        self._transport = transport

    def fetch(self, address: str, on_complete: FetchCallback) -> asyncio.Task:
        """Start the request on the running loop and return immediately."""
        loop = asyncio.get_running_loop()
        return loop.create_task(self._run(address, on_complete), name="asset-fetch")

    async def _run(self, address: str, on_complete: FetchCallback) -> FetchResult:
        result = await self.request(address)
        on_complete(result)
        return result

    async def request(self, address: str) -> FetchResult:
        logger.info("fetch_started url=%s", address[:160])
        try:
            async with httpx.AsyncClient(
                timeout=None,
                follow_redirects=False,
                transport=self._transport,
            ) as client:
                resp = await client.get(address)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.error("fetch_failed stage=fetch reason=transport error=%s", exc)
            return FetchResult(
                address=address,
                status=FetchStatus.transport_error,
                reason=f"{type(exc).__name__}: {exc}",
            )
        except Exception as exc:
            # e.g. idna errors for hostnames httpx cannot encode
            logger.exception("fetch_failed stage=fetch reason=unexpected url=%s", address[:160])
            return FetchResult(
                address=address,
                status=FetchStatus.transport_error,
                reason=f"{type(exc).__name__}: {exc}",
            )

        if resp.status_code != 200:
            logger.error("fetch_failed stage=fetch reason=http code=%d", resp.status_code)
            return FetchResult(
                address=address,
                status=FetchStatus.http_error,
                code=resp.status_code,
                reason=f"HTTP status {resp.status_code}",
            )

        data = resp.content
        logger.info("fetch_completed url=%s bytes=%d", address[:160], len(data))
        return FetchResult(
            address=address,
            status=FetchStatus.success,
            code=resp.status_code,
            payload=data,
        )
