import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Routers
from routers.attempts import router as attempts_router
from routers.generators import router as generators_router
from routers.health import router as health_router
from routers.quizzes import router as quizzes_router

logger = logging.getLogger("physquiz")
logging.basicConfig(level=logging.INFO)

DEFAULT_ORIGINS = "http://localhost:8081,http://localhost:3000,http://127.0.0.1:3000"

app = FastAPI(title="physquiz – Quiz API")

# Allow calls from the Expo/web dev servers; override with CORS_ORIGINS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.getenv("CORS_ORIGINS", DEFAULT_ORIGINS).split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*", "x-api-key", "x-admin-token"],
)


@app.get("/")
def health_root():
    return {"ok": True}


app.include_router(generators_router)  # /generators/...
app.include_router(quizzes_router)  # /quizzes/...
app.include_router(attempts_router)  # /attempts/...
app.include_router(health_router)  # /health/...
