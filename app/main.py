import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi import _rate_limit_exceeded_handler
import sentry_sdk

from app.api.v1.authenticity import router as authenticity_router
from app.api.v1.health import router as health_router
from app.api.v1.match import router as match_router
from app.api.v1.parse import router as parse_router
from app.core.cors import cors_allow_credentials, cors_allowed_origins
from app.core.rate_limit import limiter
from app.core.config import settings

logging.basicConfig(level=settings.log_level, format="%(message)s")
if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn)

app = FastAPI(title="TalentScreen API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_allowed_origins(),
    allow_credentials=cors_allow_credentials(),
    allow_methods=["*"],
    allow_headers=["*"],
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

app.include_router(health_router, prefix="/v1", tags=["Health"])
app.include_router(parse_router, prefix="/v1", tags=["Parsing"])
app.include_router(match_router, prefix="/v1", tags=["Matching"])
app.include_router(authenticity_router, prefix="/v1", tags=["Authenticity"])
