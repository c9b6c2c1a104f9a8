# src/pivx_indexer/cli/cli.py
import argparse
import asyncio
import logging
import sys
from typing import List, Optional

import uvicorn

from ..api.server import create_app
from ..blockchain.types import Vin
from ..config.settings import IndexerSettings
from ..explorer.explorer import Explorer
from ..index.address_index import AddressIndex
from ..rpc.pivx_rpc import PIVXRpc
from ..sources.block_file_source import BlockFileSource
from ..storage.sqlite import SqliteDatabase
from ..utils.config import Config
from ..utils.logger import setup_logging

logger = logging.getLogger(__name__)

def build_explorer(settings: IndexerSettings, blocks_dir: Optional[str] = None) -> Explorer:
    """Wire the store, the sources and the index from settings."""
    rpc = PIVXRpc(
        settings.get("rpc.url"),
        settings.get("rpc.username"),
        settings.get("rpc.password"),
        timeout=settings.get("rpc.timeout")
    )
    database = SqliteDatabase(settings.get("index.database_path", Config.DATABASE_PATH))
    block_source = BlockFileSource(blocks_dir) if blocks_dir else rpc
    address_index = AddressIndex(
        database,
        block_source,
        regular_batch_size=settings.get("index.regular_batch_size", Config.REGULAR_BATCH_SIZE),
        indexed_batch_size=settings.get("index.indexed_batch_size", Config.INDEXED_BATCH_SIZE)
    )
    return Explorer(address_index, rpc)

class CLI:
    def __init__(self):
        self.settings: Optional[IndexerSettings] = None

    def main(self, args: List[str]):
        parser = self.create_parser()
        args = parser.parse_args(args)

        if not hasattr(args, 'func'):
            parser.print_help()
            return

        self.settings = IndexerSettings(args.config)
        setup_logging(
            self.settings.get("logging.log_dir"),
            level=getattr(logging, str(self.settings.get("logging.log_level", "INFO")).upper(), logging.INFO)
        )
        args.func(args)

    def create_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(description='pivx-indexer CLI')
        parser.add_argument('--config', default='config/indexer.yaml', help='Settings file')
        subparsers = parser.add_subparsers(title='commands', dest='command')

        sync = subparsers.add_parser('sync', help='Run one sync pass')
        sync.add_argument('--blocks-dir', help='Replay blkNNNNN.dat files from this directory first')
        sync.add_argument('--no-rpc', action='store_true', help='Do not catch up with the node after replaying files')
        sync.set_defaults(func=self.sync)

        address = subparsers.add_parser('address', help='List txids paying to an address')
        address.add_argument('address', help='Address')
        address.set_defaults(func=self.address)

        spender = subparsers.add_parser('spender', help='Find the transaction spending an output')
        spender.add_argument('txid', help='Transaction id')
        spender.add_argument('n', type=int, help='Output index')
        spender.set_defaults(func=self.spender)

        serve = subparsers.add_parser('serve', help='Serve the explorer API after starting one background sync pass')
        serve.add_argument('--host', default=None, help='API host')
        serve.add_argument('--port', type=int, default=None, help='API port')
        serve.set_defaults(func=self.serve)

        return parser

    def sync(self, args):
        async def run():
            if args.blocks_dir:
                self.settings.update("index.blocks_dir", args.blocks_dir)
            blocks_dir = self.settings.get("index.blocks_dir")
            explorer = build_explorer(self.settings, blocks_dir)
            try:
                await explorer.sync()
                if blocks_dir and not args.no_rpc:
                    explorer.address_index.switch_source(explorer.rpc)
                    await explorer.sync()
            finally:
                await explorer.close()

        asyncio.run(run())

    def address(self, args):
        async def run():
            database = SqliteDatabase(self.settings.get("index.database_path", Config.DATABASE_PATH))
            try:
                for txid in await database.get_transactions_for_address(args.address):
                    print(txid)
            finally:
                await database.close()

        asyncio.run(run())

    def spender(self, args):
        async def run():
            database = SqliteDatabase(self.settings.get("index.database_path", Config.DATABASE_PATH))
            try:
                txid = await database.get_spender(Vin(args.txid, args.n))
                print(txid if txid else "Not spent or not indexed")
            finally:
                await database.close()

        asyncio.run(run())

    def serve(self, args):
        explorer = build_explorer(self.settings)
        app = create_app(explorer, sync_on_startup=True)
        host = args.host or self.settings.get("api.host", "127.0.0.1")
        port = args.port or self.settings.get("api.port", 8000)
        logger.info(f"Serving explorer API at {host}:{port}")
        uvicorn.run(app, host=host, port=port)

def main():
    cli = CLI()
    cli.main(sys.argv[1:])

if __name__ == "__main__":
    main()
