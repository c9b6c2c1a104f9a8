# File: src/pivx_indexer/api/server.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routes import explorer_router
from ..explorer.explorer import Explorer

def create_app(explorer: Explorer, sync_on_startup: bool = False) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if sync_on_startup:
            explorer.start_background_sync()
        yield
        await explorer.close()

    app = FastAPI(title="pivx-indexer API", lifespan=lifespan)
    app.state.explorer = explorer

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(explorer_router)

    return app
