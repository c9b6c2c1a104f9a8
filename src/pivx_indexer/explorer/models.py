# File: src/pivx_indexer/explorer/models.py
from pydantic import BaseModel
from typing import List, Optional

class TransactionInfo(BaseModel):
    txid: str
    hex: str
    height: int
    time: int

class AddressTransactions(BaseModel):
    address: str
    txids: List[str]

class SpenderInfo(BaseModel):
    txid: str
    n: int
    spender: Optional[str] = None

class BroadcastRequest(BaseModel):
    hex: str

class BroadcastResult(BaseModel):
    txid: str
