# src/pivx_indexer/blockchain/__init__.py
from .types import Block, Transaction, Vin
from .address_extractor import AddressExtractor

__all__ = ['Block', 'Transaction', 'Vin', 'AddressExtractor']
