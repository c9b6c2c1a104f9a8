from .explorer import router as explorer_router

__all__ = ['explorer_router']
