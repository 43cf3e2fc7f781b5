import asyncio
import json
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Tuple, Union

import aiohttp
from multidict import CIMultiDict

from airstack.config import settings
from airstack.exceptions import MalformedErrorBody, TransportError

SUCCESS_STATUS_CODE = 200

HeadersType = Union[Mapping[str, str], Iterable[Tuple[str, str]]]

def _check_timeout(timeout: float) -> float:
    # aiohttp reads a total of 0 as "no timeout at all"
    if timeout <= 0:
        raise ValueError(f"timeout must be positive, got {timeout}")
    return timeout

@dataclass(frozen=True)
class RawResponse:
    body: bytes
    status_code: int
    # Advisory only: set when a non-success body is not JSON.
    error: Optional[MalformedErrorBody] = None

class Transport:
    """One HTTP request/response exchange per call over a pooled aiohttp session."""

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = _check_timeout(settings.AIRSTACK_TIMEOUT if timeout is None else timeout)
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "Transport":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def _get_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        return self.session

    async def close(self):
        if self.session and not self.session.closed:
            await self.session.close()

    @staticmethod
    def _build_headers(headers: Optional[HeadersType]) -> CIMultiDict:
        merged: CIMultiDict = CIMultiDict()
        if not headers:
            return merged
        pairs = headers.items() if isinstance(headers, Mapping) else headers
        for key, value in pairs:
            merged.add(key, value)
        return merged

    async def send(
        self,
        method: str,
        url: str,
        headers: Optional[HeadersType] = None,
        body: bytes = b"",
        timeout: Optional[float] = None,
    ) -> RawResponse:
        """
        Perform a single request and read the whole response body.

        A non-2xx status is not an error here; it is returned alongside the body.
        Raises TransportError when the connection fails, the timeout expires or
        the body cannot be read completely, and ValueError for a non-positive
        timeout. Task cancellation propagates as asyncio.CancelledError.
        """
        request_timeout = aiohttp.ClientTimeout(
            total=self.timeout if timeout is None else _check_timeout(timeout)
        )
        session = await self._get_session()

        try:
            async with session.request(
                method,
                url,
                headers=self._build_headers(headers),
                data=body,
                timeout=request_timeout,
            ) as response:
                status_code = response.status
                content = await response.read()
        except asyncio.TimeoutError as e:
            raise TransportError(f"{method} {url} timed out") from e
        except aiohttp.ClientError as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

        error = None
        if status_code != SUCCESS_STATUS_CODE:
            try:
                json.loads(content)
            except ValueError as e:
                error = MalformedErrorBody(f"status {status_code} body is not valid JSON: {e}")

        return RawResponse(body=content, status_code=status_code, error=error)
