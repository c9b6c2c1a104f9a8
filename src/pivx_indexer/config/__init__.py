from .settings import IndexerSettings

__all__ = ['IndexerSettings']
