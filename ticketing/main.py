import asyncio
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
from ticketing.db.init_db import create_database
from ticketing.db.base import Base
from ticketing.db.session import engine, SessionLocal
from ticketing.core.config import settings
from ticketing.api.v1.router import api_router
from ticketing.schemas.common import ErrorResponse

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


async def _order_expiry_loop() -> None:
    """Background task: cancel unpaid orders whose reservation window has passed."""
    from ticketing.utils.orders import release_expired_orders

    while True:
        try:
            db = SessionLocal()
            try:
                count = release_expired_orders(db)
                if count:
                    logger.info("Released %d expired order(s).", count)
            finally:
                db.close()
        except Exception:
            logger.exception("Error during expired-order sweep.")
        await asyncio.sleep(settings.EXPIRY_SWEEP_INTERVAL_SECONDS)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: Ensure DB exists and create tables
    create_database()
    Base.metadata.create_all(bind=engine)

    # Run an immediate sweep, then keep running in the background
    sweep_task = asyncio.create_task(_order_expiry_loop())
    yield

    # Shutdown: cancel background task
    sweep_task.cancel()
    try:
        await sweep_task
    except asyncio.CancelledError:
        pass


from fastapi.middleware.cors import CORSMiddleware

app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

# Set all CORS enabled origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SQLAlchemyError)
async def store_unavailable_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=503,
        content=ErrorResponse(
            error="store_unavailable",
            message="The booking store is unavailable, please retry",
        ).model_dump(),
    )


app.include_router(api_router, prefix=settings.API_V1_STR)

@app.get("/")
def read_root():
    return {"Hello": settings.EVENT_NAME}
