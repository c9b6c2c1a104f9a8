# src/pivx_indexer/rpc/pivx_rpc.py
from typing import Any, AsyncIterator, Optional, Tuple
import logging

from pydantic import ValidationError

from .json_rpc import HttpClient
from ..blockchain.types import Block
from ..exceptions import InvalidResponseError, JSONRpcError
from ..sources.block_source import IndexedBlockSource
from ..utils.config import Config

logger = logging.getLogger(__name__)

class PIVXRpc(IndexedBlockSource):
    """Block source and query client backed by a node's JSON-RPC interface.

    Blocks are requested one at a time: the next height is only asked for
    once the previous one has been consumed.
    """

    def __init__(
        self,
        url: str,
        username: str = Config.RPC_USERNAME,
        password: str = Config.RPC_PASSWORD,
        client: Optional[HttpClient] = None,
        timeout: Optional[float] = None
    ):
        self.url = url
        self.client = client or HttpClient(url, username, password, timeout=timeout)

    async def call(self, method: str, *params: Any) -> Any:
        return await self.client.request(method, *params)

    async def get_block_count(self) -> int:
        return await self.call("getblockcount")

    async def _fetch_block(self, block_hash: str, height: int) -> Optional[Block]:
        try:
            data = await self.call("getblock", block_hash, Config.RPC_BLOCK_VERBOSITY)
            if not isinstance(data, dict):
                raise InvalidResponseError(f"getblock: expected an object, got {type(data).__name__}")
            return Block.from_rpc(data)
        except (JSONRpcError, InvalidResponseError, ValidationError) as e:
            logger.warning(f"Skipping block {height}: {e}")
            return None

    async def get_blocks_indexed(self, start_from: int) -> AsyncIterator[Tuple[Block, int]]:
        height = start_from
        while True:
            try:
                block_hash = await self.call("getblockhash", height)
            except JSONRpcError as e:
                if e.code != Config.RPC_INVALID_PARAMETER:
                    raise
                logger.info(f"Block stream ended at height {height}: {e.message}")
                return
            logger.debug(f"Fetching block {height}")
            block = await self._fetch_block(block_hash, height)
            if block is not None:
                yield block, height
            height += 1

    async def close(self) -> None:
        await self.client.close()
