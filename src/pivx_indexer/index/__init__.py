from .address_index import AddressIndex

__all__ = ['AddressIndex']
