# src/pivx_indexer/storage/database.py
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from ..blockchain.types import Transaction, Vin

class Database(ABC):
    """Durable storage consumed by the address index.

    Writes must be idempotent: storing the same transaction twice leaves a
    single (txid, address) entry and a single spender per outpoint.
    """

    @abstractmethod
    async def get_transactions_for_address(self, address: str) -> List[str]:
        """Return the txids paying to address, in the order they were stored"""

    @abstractmethod
    async def get_spender(self, vin: Vin) -> Optional[str]:
        """Return the txid that spent the given previous output, if known"""

    @abstractmethod
    async def store_transaction(self, tx: Transaction) -> None:
        """Store a single transaction"""

    async def store_transactions(self, txs: Iterable[Transaction]) -> None:
        """Store a batch. Override if there is a more efficient, atomic way."""
        for tx in txs:
            await self.store_transaction(tx)

    async def get_progress_marker(self) -> int:
        """Return a lower bound on the last indexed block height"""
        return 0

    async def advance_progress_marker(self, block_count: int) -> None:
        """Record a new lower bound. Values not above the current one are ignored."""
        pass

    async def close(self) -> None:
        pass
