# File: src/pivx_indexer/explorer/explorer.py
from typing import Any, Dict, Iterable, List, Optional
import asyncio
import logging

from .models import TransactionInfo
from ..blockchain.types import Vin
from ..exceptions import IndexerError, InvalidResponseError, JSONRpcError
from ..index.address_index import AddressIndex
from ..rpc.pivx_rpc import PIVXRpc
from ..utils.config import Config

logger = logging.getLogger(__name__)

class Explorer:
    """Application context: the address index plus the node client.

    Built once at startup and handed to request handlers and to the
    background sync task.
    """

    def __init__(self, address_index: AddressIndex, rpc: PIVXRpc):
        self.address_index = address_index
        self.rpc = rpc
        self._sync_task: Optional[asyncio.Task] = None

    async def get_block(self, block_height: int) -> Dict[str, Any]:
        """Get the verbose block at a height."""
        block_hash = await self.rpc.call("getblockhash", block_height)
        return await self.rpc.call("getblock", block_hash, Config.RPC_BLOCK_VERBOSITY)

    async def get_block_count(self) -> int:
        return await self.rpc.get_block_count()

    async def get_transaction(self, txid: str) -> TransactionInfo:
        """Get a confirmed raw transaction with its block height and time."""
        tx = await self.rpc.call("getrawtransaction", txid, True)
        try:
            if tx["confirmations"] == 0:
                raise InvalidResponseError(f"transaction {txid} is unconfirmed")
            block = await self.rpc.call("getblock", tx["blockhash"])
            return TransactionInfo(
                txid=txid,
                hex=tx["hex"],
                height=block["height"],
                time=block["time"]
            )
        except (KeyError, TypeError) as e:
            raise InvalidResponseError(f"incomplete transaction data for {txid}") from e

    async def get_txs(self, addresses: Iterable[str]) -> List[TransactionInfo]:
        """Get all confirmed transactions paying to any of the addresses."""
        txs = []
        for address in addresses:
            for txid in await self.address_index.get_transactions_for_address(address):
                try:
                    txs.append(await self.get_transaction(txid))
                except (JSONRpcError, InvalidResponseError) as e:
                    logger.warning(f"Could not load transaction {txid}: {e}")
        return txs

    async def get_tx_from_vin(self, vin: Vin) -> Optional[TransactionInfo]:
        """Get the transaction spending a previous output, if indexed."""
        txid = await self.address_index.get_spender(vin)
        if txid is None:
            return None
        try:
            return await self.get_transaction(txid)
        except (JSONRpcError, InvalidResponseError) as e:
            logger.warning(f"Could not load spender {txid}: {e}")
            return None

    async def send_transaction(self, transaction_hex: str) -> str:
        return await self.rpc.call("sendrawtransaction", transaction_hex)

    async def sync(self) -> int:
        return await self.address_index.sync()

    def start_background_sync(self) -> asyncio.Task:
        """Run one sync pass as a task; failures are logged, not raised."""
        async def run():
            try:
                await self.sync()
            except IndexerError as e:
                logger.warning(f"Syncing failed with error {e}")

        self._sync_task = asyncio.create_task(run())
        return self._sync_task

    async def close(self) -> None:
        if self._sync_task is not None and not self._sync_task.done():
            self._sync_task.cancel()
            try:
                await self._sync_task
            except asyncio.CancelledError:
                pass
        await self.rpc.close()
        await self.address_index.database.close()
