"""FastAPI application entry point."""

import asyncio
import logging
from contextlib import asynccontextmanager

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from eventscape.api.routes import admin, events, health, listings, planner
from eventscape.config import settings
from eventscape.tasks.expire_events import run_expire_events
from eventscape.tasks.process_queue import run_process_queue
from eventscape.utils.dates import SINGAPORE_TZ

logger = logging.getLogger(__name__)

QUEUE_INTERVAL_MINUTES = 15


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: configure and start the scheduler
    scheduler = AsyncIOScheduler(timezone=SINGAPORE_TZ)
    scheduler.add_job(
        run_process_queue,
        trigger=IntervalTrigger(minutes=QUEUE_INTERVAL_MINUTES),
        id="process_queue",
        name="Process queued listings",
        replace_existing=True,
        max_instances=1,
    )
    scheduler.add_job(
        run_expire_events,
        trigger=CronTrigger(hour=0, minute=5, timezone=SINGAPORE_TZ),
        id="expire_events",
        name="Daily expiry of past events",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(
        f"Scheduler started: queue every {QUEUE_INTERVAL_MINUTES} minutes, "
        "expiry daily at 00:05 SGT"
    )

    # Catch up on expiry missed while the service was down
    asyncio.create_task(run_expire_events())

    yield

    # Shutdown: stop the scheduler gracefully
    scheduler.shutdown(wait=False)
    logger.info("Scheduler shut down")


# Create FastAPI app
app = FastAPI(
    title="EventScape API",
    description="Event discovery and day planning for Singapore",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router)
app.include_router(listings.router, prefix="/api", tags=["listings"])
app.include_router(events.router, prefix="/api", tags=["events"])
app.include_router(admin.router, prefix="/api", tags=["admin"])
app.include_router(planner.router, prefix="/api", tags=["planner"])
