# src/pivx_indexer/exceptions.py
from typing import Any, Optional


class IndexerError(Exception):
    """Base exception class for indexer-related errors"""
    pass

class DecodeError(IndexerError):
    """Raised when raw block or transaction bytes cannot be decoded"""
    pass

class InvalidVarIntError(DecodeError):
    """Raised when a compact size integer is malformed"""
    pass

class InvalidBlockError(DecodeError):
    """Raised when a block starts with the wrong network magic.

    Recoverable: the reader may resync and continue with the next block.
    """
    pass

class EndOfDataError(DecodeError):
    """Raised when a zero magic is found, i.e. the preallocated tail of a block file"""
    pass

class TruncatedReadError(IndexerError, EOFError):
    """Raised when fewer bytes remain than a field requires"""

    def __init__(self, expected: int, got: int):
        super().__init__(f"not enough data: expected {expected} bytes, got {got}")
        self.expected = expected
        self.got = got

class TransportError(IndexerError):
    """Raised when communication with the node fails"""
    pass

class JSONRpcError(TransportError):
    """Error object returned inside a JSON-RPC response envelope"""

    def __init__(self, code: int, message: str, data: Optional[Any] = None):
        super().__init__(f"{code} {message} {data!r}")
        self.code = code
        self.message = message
        self.data = data

class InvalidResponseError(TransportError):
    """Raised when the node answers with a malformed envelope or payload"""
    pass

class StorageError(IndexerError):
    """Base exception class for storage-related errors"""
    pass

class DatabaseError(StorageError):
    """Raised when database operations fail"""
    pass

class SyncInProgressError(IndexerError):
    """Raised when a second sync pass is started on the same index"""
    pass
