from .json_rpc import HttpClient
from .pivx_rpc import PIVXRpc

__all__ = ['HttpClient', 'PIVXRpc']
