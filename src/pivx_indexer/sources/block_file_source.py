# src/pivx_indexer/sources/block_file_source.py
from pathlib import Path
from typing import AsyncIterator, Optional, Union
import logging

import aiofiles

from .block_source import BlockSource
from ..blockchain.address_extractor import AddressExtractor
from ..blockchain.types import Block
from ..exceptions import EndOfDataError, InvalidBlockError, TruncatedReadError
from ..utils.config import Config

logger = logging.getLogger(__name__)

RECORD_HEADER_SIZE = 8  # magic + size
ZERO_MAGIC = bytes(4)

class BlockFileSource(BlockSource):
    """Replays the node's blkNNNNN.dat files in order.

    Files are read sequentially, one block record at a time, so memory is
    bounded by the largest block rather than the file. Block files carry no
    height information, so this source can only be consumed from the
    beginning.
    """

    def __init__(self, blocks_dir: Union[str, Path], first_file: int = 0):
        self.blocks_dir = Path(blocks_dir)
        self.first_file = first_file

    def file_path(self, counter: int) -> Path:
        return self.blocks_dir / Config.BLOCK_FILE_PATTERN.format(counter)

    async def get_blocks(self) -> AsyncIterator[Block]:
        counter = self.first_file
        while True:
            path = self.file_path(counter)
            counter += 1
            logger.info(f"Opening block file {path}")
            try:
                async with aiofiles.open(path, 'rb') as f:
                    async for block in self._read_file(f):
                        yield block
            except FileNotFoundError:
                logger.info(f"No block file at {path}, replay finished")
                return
            except OSError as e:
                logger.error(f"Failed to read {path}: {e}")

    async def _read_file(self, f) -> AsyncIterator[Block]:
        while True:
            start = await f.tell()
            header = await f.read(RECORD_HEADER_SIZE)
            if len(header) < RECORD_HEADER_SIZE:
                if header.strip(b'\x00'):
                    logger.warning(f"Truncated block header at offset {start}")
                return

            magic = header[:4]
            size = int.from_bytes(header[4:], 'little')
            if magic == ZERO_MAGIC:
                return
            if magic != Config.MAINNET_MAGIC_BYTES or size > Config.MAX_BLOCK_SIZE:
                logger.warning(f"Invalid block record at offset {start}")
                if not await self._resync(f, start):
                    return
                continue

            body = await f.read(size)
            if len(body) < size:
                logger.warning(f"Truncated block at offset {start}")
                return

            try:
                block = AddressExtractor.decode_block(header + body)
            except (InvalidBlockError, TruncatedReadError) as e:
                # The record's contents do not fit its declared size
                logger.warning(f"Malformed block at offset {start}: {e}")
                if not await self._resync(f, start):
                    return
                continue
            except EndOfDataError:
                return
            yield block

    async def _resync(self, f, start: int) -> bool:
        """Seek to the next magic after start. False when the file has none."""
        position = await self.find_magic(f, start + 1)
        if position is None:
            logger.warning(f"No further block magic after offset {start}")
            return False
        logger.info(f"Resuming at offset {position}")
        await f.seek(position)
        return True

    @staticmethod
    async def find_magic(f, position: int) -> Optional[int]:
        """Scan forward from position in bounded chunks for the network magic"""
        magic = Config.MAINNET_MAGIC_BYTES
        overlap = len(magic) - 1
        await f.seek(position)
        carry = b''
        offset = position
        while True:
            chunk = await f.read(Config.RESYNC_CHUNK_SIZE)
            if not chunk:
                return None
            window = carry + chunk
            index = window.find(magic)
            if index != -1:
                return offset + index
            carry = window[-overlap:]
            offset += len(window) - len(carry)
