# src/pivx_indexer/storage/memory.py
from typing import Dict, Iterable, List, Optional, Set, Tuple

from .database import Database
from ..blockchain.types import Transaction, Vin

class MemoryDatabase(Database):
    """Index store kept in process memory, mainly for tests and short replays"""

    def __init__(self):
        self.address_map: Dict[str, List[str]] = {}
        self.vin_map: Dict[Vin, str] = {}
        self._seen: Set[Tuple[str, str]] = set()
        self.block_count = 0

    async def get_transactions_for_address(self, address: str) -> List[str]:
        return list(self.address_map.get(address, []))

    async def get_spender(self, vin: Vin) -> Optional[str]:
        return self.vin_map.get(vin)

    def _apply(self, tx: Transaction) -> None:
        for address in tx.addresses:
            key = (tx.txid, address)
            if key in self._seen:
                continue
            self._seen.add(key)
            self.address_map.setdefault(address, []).append(tx.txid)
        for vin in tx.previous_outputs:
            self.vin_map.setdefault(vin, tx.txid)

    async def store_transaction(self, tx: Transaction) -> None:
        self._apply(tx)

    async def store_transactions(self, txs: Iterable[Transaction]) -> None:
        # Materialise first so a failing iterator leaves nothing half written
        for tx in list(txs):
            self._apply(tx)

    async def get_progress_marker(self) -> int:
        return self.block_count

    async def advance_progress_marker(self, block_count: int) -> None:
        if block_count > self.block_count:
            self.block_count = block_count
