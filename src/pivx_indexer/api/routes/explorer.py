# File: src/pivx_indexer/api/routes/explorer.py
from fastapi import APIRouter, Depends, HTTPException, Request
from typing import Any, Dict

from ...blockchain.types import Vin
from ...exceptions import InvalidResponseError, JSONRpcError, TransportError
from ...explorer.explorer import Explorer
from ...explorer.models import (
    AddressTransactions, BroadcastRequest, BroadcastResult, SpenderInfo, TransactionInfo
)

router = APIRouter(prefix="/api/v1/explorer")

def get_explorer(request: Request) -> Explorer:
    return request.app.state.explorer

def node_error(e: TransportError) -> HTTPException:
    if isinstance(e, JSONRpcError):
        return HTTPException(status_code=404, detail=e.message)
    if isinstance(e, InvalidResponseError):
        return HTTPException(status_code=502, detail=str(e))
    return HTTPException(status_code=503, detail="Node unavailable")

@router.get("/address/{address}", response_model=AddressTransactions)
async def get_address(address: str, explorer: Explorer = Depends(get_explorer)):
    txids = await explorer.address_index.get_transactions_for_address(address)
    return AddressTransactions(address=address, txids=txids)

@router.get("/spender/{txid}/{n}", response_model=SpenderInfo)
async def get_spender(txid: str, n: int, explorer: Explorer = Depends(get_explorer)):
    spender = await explorer.address_index.get_spender(Vin(txid, n))
    if spender is None:
        raise HTTPException(status_code=404, detail="Output not spent or not indexed")
    return SpenderInfo(txid=txid, n=n, spender=spender)

@router.get("/blockcount")
async def get_block_count(explorer: Explorer = Depends(get_explorer)) -> Dict[str, int]:
    try:
        return {"count": await explorer.get_block_count()}
    except TransportError as e:
        raise node_error(e)

@router.get("/blocks/{height}")
async def get_block(height: int, explorer: Explorer = Depends(get_explorer)) -> Any:
    try:
        return await explorer.get_block(height)
    except TransportError as e:
        raise node_error(e)

@router.get("/transactions/{txid}", response_model=TransactionInfo)
async def get_transaction(txid: str, explorer: Explorer = Depends(get_explorer)):
    try:
        return await explorer.get_transaction(txid)
    except TransportError as e:
        raise node_error(e)

@router.post("/transactions", response_model=BroadcastResult)
async def send_transaction(body: BroadcastRequest, explorer: Explorer = Depends(get_explorer)):
    try:
        return BroadcastResult(txid=await explorer.send_transaction(body.hex))
    except JSONRpcError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except TransportError as e:
        raise node_error(e)
