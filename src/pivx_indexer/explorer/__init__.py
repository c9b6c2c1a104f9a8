from .explorer import Explorer
from .models import TransactionInfo, AddressTransactions, SpenderInfo

__all__ = ['Explorer', 'TransactionInfo', 'AddressTransactions', 'SpenderInfo']
