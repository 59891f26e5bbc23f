import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from goldrates import __version__
from goldrates.api.historical import router as historical_router
from goldrates.api.metals import router as metals_router
from goldrates.container import Container

logger = logging.getLogger("goldrates.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = Container()
    app.state.container = container
    yield
    http_client = container.http_client()
    await http_client.close()


app = FastAPI(title="Gold Rates", version=__version__, lifespan=lifespan)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    tb = traceback.format_exception(type(exc), exc, exc.__traceback__)
    logger.error("Unhandled error on %s %s:\n%s", request.method, request.url.path, "".join(tb))
    return JSONResponse(status_code=500, content={"detail": str(exc)})


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)

app.include_router(metals_router)
app.include_router(historical_router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "version": __version__}
