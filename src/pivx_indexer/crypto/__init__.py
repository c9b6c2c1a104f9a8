from .hash import Hash

__all__ = ['Hash']
