import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

from grove_backend.config import settings
from grove_backend.database import Base, engine
from grove_backend.enrollment_module import (
    EnrollmentError,
    enrollment_error_handler,
    router as enrollment_router,
    seed_skill_pathways,
    validation_error_handler,
)
from grove_backend.rbac_module import router as rbac_router, seed_default_users, seed_module_catalog
from grove_backend.school_module import router as school_router

# Configure Logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(message)s",
    handlers=[logging.StreamHandler()],
)
logger = logging.getLogger(__name__)


def init_database(bind=engine) -> None:
    Base.metadata.create_all(bind=bind)
    db = Session(bind=bind)
    try:
        seed_module_catalog(db)
        seed_skill_pathways(db)
        if settings.seed_demo_users:
            seed_default_users(db)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        logger.info("Initializing database...")
        init_database()
        logger.info("Database initialized.")
    except Exception as e:
        logger.error(f"Startup DB Error: {e}")
    yield
    logger.info("Shutting down...")


app = FastAPI(title="Grove School Management API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_exception_handler(EnrollmentError, enrollment_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)

app.include_router(rbac_router)
app.include_router(school_router)
app.include_router(enrollment_router)


@app.get("/api/health")
def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    try:
        uvicorn.run(
            "grove_backend.app:app",
            host=settings.backend_host,
            port=settings.backend_port,
            reload=settings.backend_reload,
        )
    except OSError as e:
        if "address already in use" in str(e).lower():
            logger.error(
                f"Port {settings.backend_port} is already in use. Stop the old process or set BACKEND_PORT."
            )
        raise
