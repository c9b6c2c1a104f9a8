# src/pivx_indexer/blockchain/types.py
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field

from pydantic import BaseModel, Field

@dataclass(frozen=True)
class Vin:
    """Reference to a previous output: (txid, output index)"""
    txid: str
    n: int

@dataclass
class Transaction:
    txid: str
    addresses: List[str] = field(default_factory=list)
    previous_outputs: List[Vin] = field(default_factory=list)

@dataclass
class Block:
    txs: List[Transaction] = field(default_factory=list)

    @classmethod
    def from_rpc(cls, data: Dict[str, Any]) -> 'Block':
        """Build a block from a verbose (verbosity=2) getblock result"""
        return RpcBlock(**data).to_block()


# Verbose getblock JSON, reduced to the fields the index needs

class RpcScriptPubKey(BaseModel):
    addresses: Optional[List[str]] = None
    address: Optional[str] = None

    def owned_addresses(self) -> List[str]:
        if self.addresses:
            return list(self.addresses)
        if self.address:
            return [self.address]
        return []

class RpcVout(BaseModel):
    script_pub_key: Optional[RpcScriptPubKey] = Field(default=None, alias="scriptPubKey")

class RpcVin(BaseModel):
    txid: Optional[str] = None
    vout: Optional[int] = None
    coinbase: Optional[str] = None

class RpcTransaction(BaseModel):
    txid: str
    vin: List[RpcVin] = []
    vout: List[RpcVout] = []

    def to_transaction(self) -> Transaction:
        addresses: List[str] = []
        for vout in self.vout:
            if vout.script_pub_key is not None:
                addresses.extend(vout.script_pub_key.owned_addresses())
        previous_outputs = [
            Vin(vin.txid, vin.vout)
            for vin in self.vin
            if vin.txid is not None and vin.vout is not None
        ]
        return Transaction(self.txid, addresses, previous_outputs)

class RpcBlock(BaseModel):
    tx: List[RpcTransaction] = []

    def to_block(self) -> Block:
        return Block([tx.to_transaction() for tx in self.tx])
