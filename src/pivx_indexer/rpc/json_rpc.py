# src/pivx_indexer/rpc/json_rpc.py
from typing import Any, Optional
import asyncio
import logging

import aiohttp
from pydantic import BaseModel, ValidationError

from ..exceptions import InvalidResponseError, JSONRpcError, TransportError

logger = logging.getLogger(__name__)

class JSONRpcErrorObject(BaseModel):
    code: int
    message: str
    data: Any = None

class JSONRpcResponse(BaseModel):
    result: Any = None
    error: Optional[JSONRpcErrorObject] = None
    id: Any = None

class HttpClient:
    """Minimal JSON-RPC 2.0 client over HTTP POST"""

    def __init__(
        self,
        url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: Optional[float] = None
    ):
        self.url = url
        self.auth = aiohttp.BasicAuth(username, password or "") if username else None
        self.timeout = aiohttp.ClientTimeout(total=timeout) if timeout else None
        self._session = session

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            if self.timeout is not None:
                self._session = aiohttp.ClientSession(timeout=self.timeout)
            else:
                self._session = aiohttp.ClientSession()
        return self._session

    async def request(self, method: str, *params: Any) -> Any:
        """Call method and return its result.

        Raises JSONRpcError for an error envelope, InvalidResponseError for
        anything that is not a JSON-RPC envelope and TransportError when the
        node cannot be reached.
        """
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": list(params),
            "id": 1
        }
        try:
            async with self._get_session().post(self.url, json=payload, auth=self.auth) as response:
                status = response.status
                try:
                    body = await response.json(content_type=None)
                except ValueError as e:
                    raise InvalidResponseError(
                        f"{method}: non-JSON response with status {status}"
                    ) from e
        except aiohttp.ClientError as e:
            raise TransportError(f"{method}: failed to fetch: {e}") from e
        except asyncio.TimeoutError as e:
            raise TransportError(f"{method}: timed out") from e

        if not isinstance(body, dict):
            raise InvalidResponseError(f"{method}: unexpected response with status {status}")
        try:
            envelope = JSONRpcResponse(**body)
        except ValidationError as e:
            raise InvalidResponseError(f"{method}: malformed envelope") from e

        if envelope.error is not None:
            error = envelope.error
            raise JSONRpcError(error.code, error.message, error.data)
        if envelope.result is None:
            raise InvalidResponseError(f"{method}: empty result with status {status}")
        return envelope.result

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> 'HttpClient':
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
