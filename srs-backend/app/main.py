from contextlib import asynccontextmanager

from fastapi import FastAPI
from app.srs import router as srs_router
from app.cache import build_cache_from_env
from app.crs.layers import LayerRegistry
from app.crs.reference import build_reference_table_from_env
from app.logging_setup import configure_logging, logging_middleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Cache needs the running loop; tests without lifespan fall back to no cache
    app.state.cache = await build_cache_from_env()
    try:
        yield
    finally:
        await app.state.cache.close()
        close = getattr(getattr(app.state, "reference_table", None), "close", None)
        if close is not None:
            close()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="SRS resolver", lifespan=lifespan)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.middleware("http")(logging_middleware)
    app.include_router(srs_router)

    app.state.reference_table = build_reference_table_from_env()
    app.state.layers = LayerRegistry()
    return app

app = create_app()
