# src/pivx_indexer/sources/block_source.py
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import AsyncIterator, Tuple, Union

from ..blockchain.types import Block

class BlockSource(ABC):
    """A stream of blocks, consumed in order, without resumption"""

    @abstractmethod
    def get_blocks(self) -> AsyncIterator[Block]:
        """Return an async iterator over blocks"""

    def instantiate(self) -> 'BlockSourceType':
        """Wrap this source in its capability variant. Indexed sources override this."""
        return Regular(self)

class IndexedBlockSource(BlockSource):
    """A block stream tagged with heights that can resume from any height"""

    @abstractmethod
    def get_blocks_indexed(self, start_from: int) -> AsyncIterator[Tuple[Block, int]]:
        """Return (block, height) pairs, sorted by height, starting at start_from"""

    async def get_blocks(self) -> AsyncIterator[Block]:
        async for block, _ in self.get_blocks_indexed(0):
            yield block

    def instantiate(self) -> 'BlockSourceType':
        return Indexed(self)

@dataclass(frozen=True)
class Regular:
    source: BlockSource

@dataclass(frozen=True)
class Indexed:
    source: IndexedBlockSource

BlockSourceType = Union[Regular, Indexed]
