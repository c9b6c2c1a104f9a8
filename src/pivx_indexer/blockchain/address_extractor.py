# src/pivx_indexer/blockchain/address_extractor.py
from typing import BinaryIO, List, Optional, Tuple
import io
import logging

from .types import Block, Transaction, Vin
from .varint import read_exact, read_uint32, read_varint
from ..crypto.hash import Hash
from ..exceptions import EndOfDataError, InvalidBlockError
from ..utils.config import Config

logger = logging.getLogger(__name__)

# Script opcodes
OP_DUP = 0x76
OP_HASH160 = 0xa9
OP_EQUALVERIFY = 0x88
OP_CHECKSIG = 0xac
OP_ROT = 0x7b
OP_IF = 0x63
OP_ELSE = 0x67
OP_ENDIF = 0x68
OP_CHECKCOLDSTAKEVERIFY_LOF = 0xd1
OP_CHECKCOLDSTAKEVERIFY = 0xd2

P2PKH_SCRIPT_SIZE = 25
P2CS_SCRIPT_SIZE = 51

NULL_HASH = bytes(32)

class AddressExtractor:
    """Decodes raw blocks and transactions straight into txids and addresses.

    Everything here works on a seekable binary stream positioned at the
    start of the record. Nothing that the index does not need is kept.
    """

    @staticmethod
    def get_address_from_p2pkh(script: bytes) -> Optional[str]:
        """OP_DUP OP_HASH160 <20> OP_EQUALVERIFY OP_CHECKSIG"""
        if len(script) != P2PKH_SCRIPT_SIZE:
            return None
        if (script[0] == OP_DUP
                and script[1] == OP_HASH160
                and script[2] == Config.PUBKEY_HASH_SIZE
                and script[23] == OP_EQUALVERIFY
                and script[24] == OP_CHECKSIG):
            return Hash.pubkey_hash_to_address(script[3:23])
        return None

    @staticmethod
    def get_address_from_p2cs(script: bytes) -> Optional[str]:
        """Cold stake script, resolved to its owner.

        OP_DUP OP_HASH160 OP_ROT OP_IF OP_CHECKCOLDSTAKEVERIFY[_LOF] <20 staker>
        OP_ELSE <20 owner> OP_ENDIF OP_EQUALVERIFY OP_CHECKSIG
        """
        if len(script) != P2CS_SCRIPT_SIZE:
            return None
        if (script[0] == OP_DUP
                and script[1] == OP_HASH160
                and script[2] == OP_ROT
                and script[3] == OP_IF
                and script[4] in (OP_CHECKCOLDSTAKEVERIFY_LOF, OP_CHECKCOLDSTAKEVERIFY)
                and script[5] == Config.PUBKEY_HASH_SIZE
                and script[26] == OP_ELSE
                and script[27] == Config.PUBKEY_HASH_SIZE
                and script[48] == OP_ENDIF
                and script[49] == OP_EQUALVERIFY
                and script[50] == OP_CHECKSIG):
            return Hash.pubkey_hash_to_address(script[28:48])
        return None

    @classmethod
    def get_address_from_script(cls, script: bytes) -> Optional[str]:
        address = cls.get_address_from_p2pkh(script)
        if address is None:
            address = cls.get_address_from_p2cs(script)
        return address

    @staticmethod
    def _skip(stream: BinaryIO, size: int) -> None:
        # Read rather than seek so a short stream is reported as truncated
        read_exact(stream, size)

    @classmethod
    def _skip_shielded_data(cls, stream: BinaryIO) -> None:
        """Skip the optional Sapling payload that follows the locktime"""
        if read_exact(stream, 1)[0] == 0:
            return
        cls._skip(stream, Config.SAPLING_VALUE_BALANCE_SIZE)
        for _ in range(read_varint(stream)):
            cls._skip(stream, Config.SAPLING_SPEND_SIZE)
        for _ in range(read_varint(stream)):
            cls._skip(stream, Config.SAPLING_OUTPUT_SIZE)
        cls._skip(stream, Config.SAPLING_BINDING_SIG_SIZE)

    @classmethod
    def _skip_extra_payload(cls, stream: BinaryIO) -> None:
        """Skip the optional payload carried by special transaction types"""
        if read_exact(stream, 1)[0] == 0:
            return
        cls._skip(stream, read_varint(stream))

    @classmethod
    def get_addresses_from_tx(cls, stream: BinaryIO) -> Tuple[Transaction, bool]:
        """Decode one transaction.

        Returns the transaction and whether its first output script is
        empty, which marks the coinstake of a proof-of-stake block.
        """
        start = stream.tell()
        version = read_uint32(stream)
        tx_type = version >> 16
        has_shielded_data = (version & 0xFFFF) >= Config.SHIELDED_VERSION

        previous_outputs: List[Vin] = []
        for _ in range(read_varint(stream)):
            outpoint = read_exact(stream, Config.OUTPOINT_SIZE)
            prev_hash, prev_index = outpoint[:32], int.from_bytes(outpoint[32:], 'little')
            if prev_hash != NULL_HASH:
                previous_outputs.append(Vin(Hash.hash_to_hex_str(prev_hash), prev_index))
            cls._skip(stream, read_varint(stream) + Config.SEQUENCE_SIZE)

        addresses: List[str] = []
        first_vout_empty = False
        for i in range(read_varint(stream)):
            cls._skip(stream, Config.OUTPUT_VALUE_SIZE)
            script_length = read_varint(stream)
            if i == 0:
                first_vout_empty = script_length == 0
            address = cls.get_address_from_script(read_exact(stream, script_length))
            if address is not None:
                addresses.append(address)

        cls._skip(stream, Config.LOCKTIME_SIZE)
        if has_shielded_data:
            cls._skip_shielded_data(stream)
            if tx_type != 0:
                cls._skip_extra_payload(stream)

        end = stream.tell()
        stream.seek(start)
        tx_bytes = read_exact(stream, end - start)
        txid = Hash.hash_to_hex_str(Hash.double_sha256(tx_bytes))

        return Transaction(txid, addresses, previous_outputs), first_vout_empty

    @classmethod
    def get_addresses_from_block(cls, stream: BinaryIO) -> Block:
        """Decode one block record (magic, size, header, transactions).

        Only transactions paying to at least one recognised address are kept.
        Raises EndOfDataError on a zero magic and InvalidBlockError on any
        other mismatch.
        """
        magic = read_uint32(stream)
        if magic != Config.MAINNET_MAGIC:
            if magic == 0:
                raise EndOfDataError("zero magic, no more blocks")
            logger.warning(f"Wrong block magic {magic:08x}")
            raise InvalidBlockError(f"wrong magic {magic:08x}")

        read_uint32(stream)  # size
        version = read_uint32(stream)
        cls._skip(stream, Config.BLOCK_HEADER_REMAINDER)
        if version > 3 and version != Config.BLOCK_EXTRA_HASH_SKIPPED_VERSION:
            cls._skip(stream, Config.BLOCK_EXTRA_HASH_SIZE)

        block = Block()
        is_proof_of_stake = False
        for i in range(read_varint(stream)):
            tx, first_vout_empty = cls.get_addresses_from_tx(stream)
            if i == 1 and first_vout_empty:
                is_proof_of_stake = True
            if tx.addresses:
                block.txs.append(tx)

        if is_proof_of_stake:
            cls._skip(stream, read_varint(stream))  # block signature

        return block

    @classmethod
    def decode_block(cls, data: bytes) -> Block:
        return cls.get_addresses_from_block(io.BytesIO(data))

    @classmethod
    def decode_tx(cls, data: bytes) -> Transaction:
        tx, _ = cls.get_addresses_from_tx(io.BytesIO(data))
        return tx
