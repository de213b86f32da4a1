import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.config.logging_setup import configure_logging
from app.config.security import SecurityConfig
from app.config.settings import settings
from app.database import Base, engine
from app.error_handlers import register_error_handlers
from app.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from app.routers import auth, team, task
from app import models  # noqa: F401  registers every table on Base.metadata

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=SecurityConfig.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestLoggingMiddleware)

register_error_handlers(app)

# Route registration
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(team.router, prefix="/teams", tags=["Teams"])
app.include_router(task.router, tags=["Tasks"])

# Startup and shutdown events
@app.on_event("startup")
def startup_event():
    """Make sure the schema exists before serving requests"""
    logger.info("Starting %s...", settings.APP_NAME)
    Base.metadata.create_all(bind=engine)

@app.on_event("shutdown")
def shutdown_event():
    logger.info("Shutting down %s, closing database connections", settings.APP_NAME)
    engine.dispose()

# Root route
@app.get("/")
def read_root():
    return {"message": settings.APP_NAME}

@app.get("/health")
def health():
    return {"status": "ok"}
