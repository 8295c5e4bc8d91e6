import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
import cottagetrip.db.base  # noqa: F401
from cottagetrip.core.config import settings
from cottagetrip.db.session import build_engine, build_sessionmaker
from cottagetrip.services.notifications import LoggingDispatcher, ResendDispatcher
from cottagetrip.api.v1.routes.system import router as system_router
from cottagetrip.api.v1.routes.expense import router as expense_router
from cottagetrip.api.v1.routes.rooms import router as rooms_router
from cottagetrip.api.v1.routes.rental import router as rental_router
from cottagetrip.api.v1.routes.reminders import router as reminders_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    engine = build_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)
    app.state.sessionmaker = build_sessionmaker(engine)

    http_client = None
    if settings.RESEND_API_KEY:
        http_client = httpx.AsyncClient(timeout=settings.REMINDER_EMAIL_TIMEOUT)
        app.state.dispatcher = ResendDispatcher(http_client, settings.RESEND_API_KEY, settings.REMINDER_FROM_EMAIL)
    else:
        logger.warning("RESEND_API_KEY not set, reminders will only be logged")
        app.state.dispatcher = LoggingDispatcher()

    yield

    if http_client is not None:
        await http_client.aclose()
    await engine.dispose()


app = FastAPI(title="CottageTrip Costs", lifespan=lifespan)


@app.get("/")
async def root():
    return {"message": "CottageTrip costs backend is live"}

app.include_router(system_router, prefix="/api/v1/system")
app.include_router(expense_router, prefix="/api/v1/expense")
app.include_router(rooms_router, prefix="/api/v1/rooms")
app.include_router(rental_router, prefix="/api/v1/rooms")
app.include_router(reminders_router, prefix="/api/v1/rooms")
