# src/pivx_indexer/crypto/hash.py
from typing import Optional
import hashlib
import base58

from ..utils.config import Config

class Hash:
    @staticmethod
    def double_sha256(data: bytes) -> bytes:
        """
        SHA-256 applied twice, as used for txids and address checksums
        """
        return hashlib.sha256(hashlib.sha256(data).digest()).digest()

    @staticmethod
    def hash_to_hex_str(hash_bytes: bytes) -> str:
        """
        Render a hash in display order (byte-reversed hex)
        """
        return hash_bytes[::-1].hex()

    @staticmethod
    def pubkey_hash_to_address(
        pubkey_hash: bytes,
        prefix: int = Config.PUBKEY_ADDRESS_PREFIX
    ) -> Optional[str]:
        """
        Base58check-encode a 20-byte public key hash behind a one-byte prefix
        """
        if len(pubkey_hash) != Config.PUBKEY_HASH_SIZE:
            return None

        versioned = bytes([prefix]) + bytes(pubkey_hash)
        checksum = Hash.double_sha256(versioned)[:4]
        return base58.b58encode(versioned + checksum).decode('ascii')
