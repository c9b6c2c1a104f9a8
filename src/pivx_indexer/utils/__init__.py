# src/pivx_indexer/utils/__init__.py
from .logger import setup_logging
from .config import Config

__all__ = ['setup_logging', 'Config']
