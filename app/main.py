import logging

from fastapi import FastAPI
from app.core.logging import setup_logging
from app.db.base import Base, engine
from app.db import models  # noqa: F401  registers every table on Base.metadata
from app.api.errors import register_exception_handlers
from app.api.routes import auth
from app.api.routes import stores as stores_router
from app.api.routes import reservations as reservations_router
from app.api.routes import review as review_router

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Store Reservation API")
register_exception_handlers(app)

@app.on_event("startup")
def startup():
    Base.metadata.create_all(bind=engine)
    logger.info("Store reservation API started")

@app.get("/")
def root():
    return {"message": "Store Reservation API running"}


app.include_router(auth.router, prefix="/api/auth")
app.include_router(stores_router.router)
app.include_router(reservations_router.router)
app.include_router(review_router.router)
