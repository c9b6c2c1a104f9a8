# tests/test_cli.py
import os
import shutil
import tempfile
import pytest
import yaml

from pivx_indexer.cli.cli import CLI, build_explorer
from pivx_indexer.config.settings import IndexerSettings
from pivx_indexer.rpc.pivx_rpc import PIVXRpc
from pivx_indexer.sources.block_file_source import BlockFileSource
from pivx_indexer.sources.block_source import Indexed, Regular
from pivx_indexer.utils.config import Config

from chain_builders import build_block, build_tx, coinbase_tx, hash160, p2pkh, txid_of

ADDRESS = "D5EQRCnPMXmRvUoZwC7gu7fYspean3PQ9a"  # hash160 of 20 * 0x01

@pytest.fixture
def temp_dir():
    tmp_dir = tempfile.mkdtemp()
    yield tmp_dir
    shutil.rmtree(tmp_dir)

@pytest.fixture
def config_path(temp_dir):
    path = os.path.join(temp_dir, "indexer.yaml")
    with open(path, "w") as f:
        yaml.safe_dump({
            "rpc": {"url": "http://127.0.0.1:1", "username": "u", "password": "p"},
            "index": {"database_path": os.path.join(temp_dir, "index.db")},
            "logging": {"log_dir": None, "log_level": "WARNING"},
        }, f)
    return path

class TestSettings:
    def test_creates_default_file(self, temp_dir):
        path = os.path.join(temp_dir, "nested", "indexer.yaml")
        settings = IndexerSettings(path, environ={})

        assert os.path.exists(path)
        assert settings.get("rpc.url") == f"http://{Config.RPC_HOST}:{Config.RPC_PORT}"
        assert settings.get("index.indexed_batch_size") == Config.INDEXED_BATCH_SIZE
        assert settings.get("index.database_path") == Config.DATABASE_PATH

    def test_file_values_layer_over_defaults(self, config_path):
        settings = IndexerSettings(config_path, environ={})
        assert settings.get("rpc.username") == "u"
        assert settings.get("index.regular_batch_size") == Config.REGULAR_BATCH_SIZE
        assert settings.get("api.port") == 8000
        assert settings.get("missing.key", "fallback") == "fallback"
        assert settings.get("rpc.url.scheme", "fallback") == "fallback"

    def test_environment_overrides(self, config_path):
        settings = IndexerSettings(config_path, environ={
            "PIVX_INDEXER_RPC_PASSWORD": "from-env",
            "PIVX_INDEXER_INDEX_INDEXED_BATCH_SIZE": "25",
        })
        assert settings.get("rpc.password") == "from-env"
        assert settings.get("index.indexed_batch_size") == 25

    def test_update_persists(self, config_path):
        IndexerSettings(config_path, environ={}).update("api.port", 9000)

        assert IndexerSettings(config_path, environ={}).get("api.port") == 9000
        with open(config_path) as f:
            saved = yaml.safe_load(f)
        # Only explicit values are written back
        assert saved["api"] == {"port": 9000}
        assert saved["rpc"]["username"] == "u"

class TestBuildExplorer:
    def test_rpc_is_the_default_source(self, config_path):
        explorer = build_explorer(IndexerSettings(config_path))
        assert isinstance(explorer.address_index.block_source, Indexed)
        assert explorer.address_index.block_source.source is explorer.rpc
        assert isinstance(explorer.rpc, PIVXRpc)

    def test_blocks_dir_selects_file_source(self, config_path, temp_dir):
        explorer = build_explorer(IndexerSettings(config_path), blocks_dir=temp_dir)
        source = explorer.address_index.block_source
        assert isinstance(source, Regular)
        assert isinstance(source.source, BlockFileSource)
        assert explorer.address_index.regular_batch_size == Config.REGULAR_BATCH_SIZE

class TestCLI:
    @pytest.fixture
    def blocks_dir(self, temp_dir):
        path = os.path.join(temp_dir, "blocks")
        os.makedirs(path)
        return path

    def test_no_command_prints_help(self, capsys):
        CLI().main([])
        assert "commands" in capsys.readouterr().out

    def test_sync_from_files_then_query(self, config_path, blocks_dir, capsys):
        first = build_tx([p2pkh(hash160(1))])
        second = build_tx([p2pkh(hash160(1))], inputs=[(bytes.fromhex(txid_of(first))[::-1], 0)])
        with open(os.path.join(blocks_dir, "blk00000.dat"), "wb") as f:
            f.write(build_block([coinbase_tx(), first]) + build_block([coinbase_tx(), second]))

        CLI().main(["--config", config_path, "sync", "--blocks-dir", blocks_dir, "--no-rpc"])
        capsys.readouterr()

        CLI().main(["--config", config_path, "address", ADDRESS])
        assert capsys.readouterr().out.split() == [txid_of(first), txid_of(second)]

        CLI().main(["--config", config_path, "spender", txid_of(first), "0"])
        assert capsys.readouterr().out.strip() == txid_of(second)

        CLI().main(["--config", config_path, "spender", txid_of(first), "1"])
        assert capsys.readouterr().out.strip() == "Not spent or not indexed"

    def test_sync_remembers_blocks_dir(self, config_path, blocks_dir, capsys):
        tx = build_tx([p2pkh(hash160(1))])
        with open(os.path.join(blocks_dir, "blk00000.dat"), "wb") as f:
            f.write(build_block([coinbase_tx(), tx]))

        CLI().main(["--config", config_path, "sync", "--blocks-dir", blocks_dir, "--no-rpc"])
        with open(config_path) as f:
            assert yaml.safe_load(f)["index"]["blocks_dir"] == blocks_dir

        # A later pass without the flag replays the same directory
        with open(os.path.join(blocks_dir, "blk00001.dat"), "wb") as f:
            second = build_tx([p2pkh(hash160(1))], inputs=[(bytes.fromhex(txid_of(tx))[::-1], 0)])
            f.write(build_block([coinbase_tx(), second]))
        CLI().main(["--config", config_path, "sync", "--no-rpc"])
        capsys.readouterr()

        CLI().main(["--config", config_path, "address", ADDRESS])
        assert capsys.readouterr().out.split() == [txid_of(tx), txid_of(second)]
