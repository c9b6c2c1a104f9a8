from .block_source import BlockSource, IndexedBlockSource, BlockSourceType, Regular, Indexed
from .block_file_source import BlockFileSource

__all__ = [
    'BlockSource', 'IndexedBlockSource', 'BlockSourceType',
    'Regular', 'Indexed', 'BlockFileSource'
]
