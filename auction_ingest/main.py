from fastapi import FastAPI
from auction_ingest.db import Base, engine
from auction_ingest.config import settings
from auction_ingest.api.routes import router as api_router
from auction_ingest import scheduler
import auction_ingest.models  # noqa: F401 ensure models are imported so tables are known

# create FastAPI instance
app = FastAPI(title="auction-ingest")
app.include_router(api_router)


@app.on_event("startup")
def on_startup():
    Base.metadata.create_all(bind=engine)
    if settings.scheduler_enabled:
        scheduler.start_scheduler()


@app.on_event("shutdown")
def on_shutdown():
    scheduler.shutdown_scheduler()
