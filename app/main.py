from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import routes_health, routes_transcripts
from app.core.config import get_settings
from app.core.errors import register_error_handlers
from app.core.logger import get_logger

log = get_logger(__name__)
settings = get_settings()

app = FastAPI(
    title="Transcript Board API",
    description="Live and finalized transcript feed for the chat dashboard",
    version="1.0.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH"],
    allow_headers=["*"],
)

TRANSCRIPTS_PREFIX = "/api/update-text"

register_error_handlers(app, {TRANSCRIPTS_PREFIX: routes_transcripts.ALLOWED_METHODS})

# Routers
app.include_router(routes_transcripts.router, prefix=TRANSCRIPTS_PREFIX, tags=["Transcripts"])
app.include_router(routes_health.router, prefix="/health", tags=["Health"])

log.info("Transcript Board API initialised (env=%s)", settings.ENV)


@app.get("/")
def root():
    return {"status": "Transcript Board backend running"}
