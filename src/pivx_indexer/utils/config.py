# src/pivx_indexer/utils/config.py

class Config:
    # Network magic, as stored little-endian at the start of each block record
    MAINNET_MAGIC = 0xE9FDC490
    MAINNET_MAGIC_BYTES = MAINNET_MAGIC.to_bytes(4, 'little')

    # Address encoding
    PUBKEY_ADDRESS_PREFIX = 30  # "D..." addresses
    PUBKEY_HASH_SIZE = 20

    # Block header layout
    BLOCK_HEADER_REMAINDER = 76  # prev hash (32) + merkle root (32) + time + bits + nonce
    BLOCK_EXTRA_HASH_SIZE = 32  # accumulator checkpoint / final sapling root
    BLOCK_EXTRA_HASH_SKIPPED_VERSION = 7

    # Transaction layout
    OUTPOINT_SIZE = 36  # prev hash (32) + index (4)
    SEQUENCE_SIZE = 4
    OUTPUT_VALUE_SIZE = 8
    LOCKTIME_SIZE = 4
    SHIELDED_VERSION = 3
    SAPLING_VALUE_BALANCE_SIZE = 8
    SAPLING_SPEND_SIZE = 384  # cv + anchor + nullifier + rk + proof (192) + spendAuthSig (64)
    SAPLING_OUTPUT_SIZE = 948  # cv + cmu + ephemeralKey + encCiphertext (580) + outCiphertext (80) + proof (192)
    SAPLING_BINDING_SIG_SIZE = 64

    # Block files
    BLOCK_FILE_PATTERN = "blk{:05d}.dat"
    MAX_BLOCK_SIZE = 2_000_000  # larger size fields are treated as corrupt records
    RESYNC_CHUNK_SIZE = 64 * 1024  # read size while scanning for the next magic

    # Sync batching
    REGULAR_BATCH_SIZE = 500_000  # blocks per transaction on full replay
    INDEXED_BATCH_SIZE = 10  # blocks per transaction when streaming over RPC

    # RPC
    RPC_HOST = "127.0.0.1"
    RPC_PORT = 51473
    RPC_USERNAME = "pivx_indexer"
    RPC_PASSWORD = "pivx_indexer"
    RPC_BLOCK_VERBOSITY = 2
    RPC_INVALID_PARAMETER = -8  # getblockhash past the tip

    # Storage
    DATABASE_PATH = "data/address_index.sqlite"
