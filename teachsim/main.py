"""Teacher Training Simulator - profile progress API entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from teachsim.core.config import get_settings
from teachsim.db.base import Base
from teachsim.db.session import engine
from teachsim.routers import api, auth
from teachsim.services.progress import InvalidInput

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
# passlib reads the bcrypt version noisily on newer bcrypt releases
logging.getLogger("passlib").setLevel(logging.ERROR)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database ready")
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    description="Progress, skills and achievements for teacher training sessions",
    lifespan=lifespan,
)

app.include_router(auth.router)
app.include_router(api.router)


@app.exception_handler(InvalidInput)
async def invalid_input_handler(request: Request, exc: InvalidInput):
    logger.warning("Rejected input on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.get("/health")
async def health():
    return {"status": "ok"}
