# src/pivx_indexer/storage/sqlite.py
from typing import Iterable, List, Optional
import asyncio
import logging
import os
import sqlite3
import threading

from .database import Database
from ..blockchain.types import Transaction, Vin
from ..exceptions import DatabaseError

logger = logging.getLogger(__name__)

BLOCK_COUNT_KEY = "block_count"

SCHEMA = """
CREATE TABLE IF NOT EXISTS transactions (
    txid TEXT NOT NULL,
    address TEXT NOT NULL,
    PRIMARY KEY (txid, address)
);
CREATE INDEX IF NOT EXISTS idx_address ON transactions (address);
CREATE TABLE IF NOT EXISTS spends (
    prev_txid TEXT NOT NULL,
    prev_n INTEGER NOT NULL,
    txid TEXT NOT NULL,
    PRIMARY KEY (prev_txid, prev_n)
);
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value INTEGER NOT NULL
);
"""

class SqliteDatabase(Database):
    """Index store backed by a SQLite file.

    Blocking calls run in worker threads, each with its own connection.
    The database is put in WAL mode so readers never wait on the writer.
    """

    def __init__(self, db_path: str):
        """Initialize database connection"""
        if db_path == ":memory:":
            raise DatabaseError("SqliteDatabase needs a file path, connections are per thread")
        self.db_path = db_path
        directory = os.path.dirname(db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        self._local = threading.local()
        self._connections: List[sqlite3.Connection] = []
        self._connections_lock = threading.Lock()
        self._init_db()

    def _get_conn(self) -> sqlite3.Connection:
        """Get thread-local database connection"""
        if not hasattr(self._local, 'conn'):
            conn = sqlite3.connect(self.db_path, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            self._local.conn = conn
            with self._connections_lock:
                self._connections.append(conn)
        return self._local.conn

    def _init_db(self):
        """Initialize database tables"""
        try:
            conn = self._get_conn()
            conn.execute("PRAGMA journal_mode=WAL")
            with conn:
                conn.executescript(SCHEMA)
        except sqlite3.Error as e:
            raise DatabaseError(f"Error initializing database: {str(e)}") from e

    def _query_address(self, address: str) -> List[str]:
        try:
            cursor = self._get_conn().execute(
                "SELECT txid FROM transactions WHERE address = ? ORDER BY rowid",
                (address,)
            )
            return [row['txid'] for row in cursor]
        except sqlite3.Error as e:
            raise DatabaseError(f"Error retrieving txids: {str(e)}") from e

    def _query_spender(self, vin: Vin) -> Optional[str]:
        try:
            row = self._get_conn().execute(
                "SELECT txid FROM spends WHERE prev_txid = ? AND prev_n = ?",
                (vin.txid, vin.n)
            ).fetchone()
            return row['txid'] if row is not None else None
        except sqlite3.Error as e:
            raise DatabaseError(f"Error retrieving spender: {str(e)}") from e

    def _write(self, txs: Iterable[Transaction]) -> None:
        """Write transactions atomically"""
        try:
            conn = self._get_conn()
            with conn:
                for tx in txs:
                    conn.executemany(
                        "INSERT OR IGNORE INTO transactions (txid, address) VALUES (?, ?)",
                        [(tx.txid, address) for address in tx.addresses]
                    )
                    conn.executemany(
                        "INSERT OR IGNORE INTO spends (prev_txid, prev_n, txid) VALUES (?, ?, ?)",
                        [(vin.txid, vin.n, tx.txid) for vin in tx.previous_outputs]
                    )
        except sqlite3.Error as e:
            raise DatabaseError(f"Error in batch write: {str(e)}") from e

    def _read_block_count(self) -> int:
        try:
            row = self._get_conn().execute(
                "SELECT value FROM metadata WHERE key = ?",
                (BLOCK_COUNT_KEY,)
            ).fetchone()
            return row['value'] if row is not None else 0
        except sqlite3.Error as e:
            raise DatabaseError(f"Error retrieving block count: {str(e)}") from e

    def _write_block_count(self, block_count: int) -> None:
        try:
            conn = self._get_conn()
            with conn:
                conn.execute(
                    """
                    INSERT INTO metadata (key, value) VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value
                    WHERE excluded.value > metadata.value
                    """,
                    (BLOCK_COUNT_KEY, block_count)
                )
        except sqlite3.Error as e:
            raise DatabaseError(f"Error updating block count: {str(e)}") from e

    async def get_transactions_for_address(self, address: str) -> List[str]:
        return await asyncio.to_thread(self._query_address, address)

    async def get_spender(self, vin: Vin) -> Optional[str]:
        return await asyncio.to_thread(self._query_spender, vin)

    async def store_transaction(self, tx: Transaction) -> None:
        await asyncio.to_thread(self._write, [tx])

    async def store_transactions(self, txs: Iterable[Transaction]) -> None:
        batch = list(txs)
        await asyncio.to_thread(self._write, batch)
        logger.debug(f"Stored {len(batch)} transactions")

    async def get_progress_marker(self) -> int:
        return await asyncio.to_thread(self._read_block_count)

    async def advance_progress_marker(self, block_count: int) -> None:
        await asyncio.to_thread(self._write_block_count, block_count)

    async def close(self) -> None:
        """Close all database connections"""
        with self._connections_lock:
            for conn in self._connections:
                conn.close()
            self._connections.clear()
        self._local = threading.local()
