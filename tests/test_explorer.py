# tests/test_explorer.py
import asyncio
import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient

from pivx_indexer.api.server import create_app
from pivx_indexer.blockchain.types import Block, Transaction, Vin
from pivx_indexer.exceptions import InvalidResponseError, JSONRpcError, TransportError
from pivx_indexer.explorer.explorer import Explorer
from pivx_indexer.index.address_index import AddressIndex
from pivx_indexer.rpc.pivx_rpc import PIVXRpc
from pivx_indexer.sources.block_source import BlockSource
from pivx_indexer.storage.memory import MemoryDatabase

RAW_TXS = {
    "t1": {"hex": "0100", "confirmations": 3, "blockhash": "h1"},
    "t2": {"hex": "0200", "confirmations": 2, "blockhash": "h2"},
    "t3": {"hex": "0300", "confirmations": 0},
}
BLOCKS = {
    "h1": {"height": 100, "time": 1700000000},
    "h2": {"height": 101, "time": 1700000060},
}

async def node_call(method, *params):
    if method == "getrawtransaction":
        if params[0] not in RAW_TXS:
            raise JSONRpcError(-5, "No such mempool or blockchain transaction")
        return RAW_TXS[params[0]]
    if method == "getblock":
        return BLOCKS[params[0]]
    if method == "getblockhash":
        return "h1"
    if method == "sendrawtransaction":
        if params[0] == "bad":
            raise JSONRpcError(-22, "TX decode failed")
        return "ff" * 32
    raise AssertionError(f"unexpected method {method}")

class StaticSource(BlockSource):
    async def get_blocks(self):
        yield Block([
            Transaction("t1", ["A"], []),
            Transaction("t2", ["A", "B"], [Vin("t1", 0)]),
            Transaction("t3", ["B"], [Vin("t2", 1)]),
            Transaction("t4", ["B"], [Vin("t2", 2)]),
        ])

@pytest.fixture
def rpc():
    rpc = MagicMock(spec=PIVXRpc)
    rpc.call = AsyncMock(side_effect=node_call)
    rpc.get_block_count = AsyncMock(return_value=4569426)
    rpc.close = AsyncMock()
    return rpc

@pytest.fixture
def database():
    return MemoryDatabase()

@pytest.fixture
def explorer(database, rpc):
    return Explorer(AddressIndex(database, StaticSource()), rpc)

class TestExplorer:
    @pytest.mark.asyncio
    async def test_get_transaction(self, explorer):
        info = await explorer.get_transaction("t2")
        assert info.txid == "t2"
        assert info.hex == "0200"
        assert info.height == 101
        assert info.time == 1700000060

    @pytest.mark.asyncio
    async def test_unconfirmed_transaction(self, explorer):
        with pytest.raises(InvalidResponseError):
            await explorer.get_transaction("t3")

    @pytest.mark.asyncio
    async def test_get_txs_skips_unloadable(self, explorer):
        await explorer.sync()
        txs = await explorer.get_txs(["A", "B"])
        # t3 is unconfirmed and t4 unknown to the node
        assert [tx.txid for tx in txs] == ["t1", "t2", "t2"]

    @pytest.mark.asyncio
    async def test_get_tx_from_vin(self, explorer):
        await explorer.sync()
        spender = await explorer.get_tx_from_vin(Vin("t1", 0))
        assert spender.txid == "t2"
        assert await explorer.get_tx_from_vin(Vin("t1", 5)) is None
        assert await explorer.get_tx_from_vin(Vin("t2", 1)) is None

    @pytest.mark.asyncio
    async def test_get_block(self, explorer, rpc):
        block = await explorer.get_block(100)
        assert block["height"] == 100
        rpc.call.assert_any_await("getblockhash", 100)
        rpc.call.assert_any_await("getblock", "h1", 2)

    @pytest.mark.asyncio
    async def test_background_sync_logs_failures(self, explorer, database, mocker, caplog):
        mocker.patch.object(database, "store_transactions", side_effect=TransportError("gone"))
        task = explorer.start_background_sync()
        await task
        assert task.exception() is None
        assert "Syncing failed with error gone" in caplog.text

    @pytest.mark.asyncio
    async def test_close_cancels_sync_and_closes_clients(self, explorer, rpc):
        release = asyncio.Event()

        class BlockedSource(BlockSource):
            async def get_blocks(self):
                await release.wait()
                yield Block()

        explorer.address_index.switch_source(BlockedSource())
        task = explorer.start_background_sync()
        await asyncio.sleep(0)

        await explorer.close()

        assert task.cancelled()
        rpc.close.assert_awaited_once()

class TestExplorerApi:
    @pytest_asyncio.fixture
    async def client(self, explorer):
        await explorer.sync()
        return TestClient(create_app(explorer))

    def test_address(self, client):
        response = client.get("/api/v1/explorer/address/A")
        assert response.status_code == 200
        assert response.json() == {"address": "A", "txids": ["t1", "t2"]}

    def test_unknown_address(self, client):
        response = client.get("/api/v1/explorer/address/nobody")
        assert response.status_code == 200
        assert response.json()["txids"] == []

    def test_spender(self, client):
        response = client.get("/api/v1/explorer/spender/t1/0")
        assert response.status_code == 200
        assert response.json() == {"txid": "t1", "n": 0, "spender": "t2"}

    def test_unspent_output(self, client):
        response = client.get("/api/v1/explorer/spender/t1/9")
        assert response.status_code == 404

    def test_block_count(self, client):
        response = client.get("/api/v1/explorer/blockcount")
        assert response.json() == {"count": 4569426}

    def test_node_unavailable(self, client, rpc):
        rpc.get_block_count.side_effect = TransportError("connection refused")
        response = client.get("/api/v1/explorer/blockcount")
        assert response.status_code == 503

    def test_transaction(self, client):
        response = client.get("/api/v1/explorer/transactions/t1")
        assert response.status_code == 200
        assert response.json() == {"txid": "t1", "hex": "0100", "height": 100, "time": 1700000000}

    def test_unknown_transaction(self, client):
        response = client.get("/api/v1/explorer/transactions/nope")
        assert response.status_code == 404

    def test_unconfirmed_transaction(self, client):
        response = client.get("/api/v1/explorer/transactions/t3")
        assert response.status_code == 502

    def test_block(self, client):
        response = client.get("/api/v1/explorer/blocks/100")
        assert response.status_code == 200
        assert response.json()["time"] == 1700000000

    def test_broadcast(self, client):
        response = client.post("/api/v1/explorer/transactions", json={"hex": "0100"})
        assert response.status_code == 200
        assert response.json() == {"txid": "ff" * 32}

    def test_broadcast_rejected(self, client):
        response = client.post("/api/v1/explorer/transactions", json={"hex": "bad"})
        assert response.status_code == 400
        assert response.json()["detail"] == "TX decode failed"

    def test_shutdown_closes_explorer(self, explorer, rpc):
        with TestClient(create_app(explorer)) as client:
            client.get("/api/v1/explorer/blockcount")
        rpc.close.assert_awaited_once()
