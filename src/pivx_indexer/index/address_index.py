# File: src/pivx_indexer/index/address_index.py
from typing import AsyncIterator, Iterable, List, Optional, TypeVar
import logging

from ..blockchain.types import Block, Vin
from ..exceptions import SyncInProgressError
from ..sources.block_source import BlockSource, BlockSourceType, Indexed, IndexedBlockSource
from ..storage.database import Database
from ..utils.config import Config

logger = logging.getLogger(__name__)

T = TypeVar('T')

async def chunks(items: AsyncIterator[T], size: int) -> AsyncIterator[List[T]]:
    """Group an async stream into lists of at most size items"""
    batch: List[T] = []
    async for item in items:
        batch.append(item)
        if len(batch) >= size:
            yield batch
            batch = []
    if batch:
        yield batch

class AddressIndex:
    """Keeps an index store in step with a block source.

    Regular sources are replayed from the start in large batches. Indexed
    sources resume from the stored progress marker, in small batches, and
    the marker is advanced after each committed batch.
    """

    def __init__(
        self,
        database: Database,
        block_source: BlockSource,
        regular_batch_size: int = Config.REGULAR_BATCH_SIZE,
        indexed_batch_size: int = Config.INDEXED_BATCH_SIZE
    ):
        self.database = database
        self.block_source: BlockSourceType = block_source.instantiate()
        self.regular_batch_size = regular_batch_size
        self.indexed_batch_size = indexed_batch_size
        self._syncing = False

    async def sync(self) -> int:
        """Run one pass to the current end of the block stream.

        Returns the number of blocks written.
        """
        if self._syncing:
            raise SyncInProgressError("a sync pass is already running")
        self._syncing = True
        try:
            source = self.block_source
            logger.info(f"Starting sync from {type(source.source).__name__}")
            if isinstance(source, Indexed):
                count = await self._sync_indexed(source.source)
            else:
                count = await self._sync_regular(source.source)
            logger.info(f"Sync finished, {count} blocks processed")
            return count
        finally:
            self._syncing = False

    async def _sync_regular(self, block_source: BlockSource) -> int:
        count = 0
        async for blocks in chunks(block_source.get_blocks(), self.regular_batch_size):
            await self._store_blocks(blocks)
            count += len(blocks)
            logger.info(f"Indexed {count} blocks")
        return count

    async def _sync_indexed(self, block_source: IndexedBlockSource) -> int:
        start = await self.database.get_progress_marker()
        logger.info(f"Resuming indexed sync at height {start}")
        count = 0
        async for batch in chunks(block_source.get_blocks_indexed(start), self.indexed_batch_size):
            await self._store_blocks(block for block, _ in batch)
            highest = batch[-1][1]
            await self.database.advance_progress_marker(highest)
            count += len(batch)
            logger.info(f"Indexed up to height {highest}")
        return count

    async def _store_blocks(self, blocks: Iterable[Block]) -> None:
        await self.database.store_transactions(
            tx for block in blocks for tx in block.txs
        )

    async def get_transactions_for_address(self, address: str) -> List[str]:
        return await self.database.get_transactions_for_address(address)

    async def get_spender(self, vin: Vin) -> Optional[str]:
        return await self.database.get_spender(vin)

    def switch_source(self, block_source: BlockSource) -> None:
        """Replace the block source. A pass already running keeps its source."""
        self.block_source = block_source.instantiate()
        logger.info(f"Switched block source to {type(block_source).__name__}")
