from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
import os
import uvicorn

from . import routers
from .database import init_db, check_db_connection

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"
    ).split(",")
    if origin.strip()
]

# Initialize FastAPI app
app = FastAPI(
    title="Domo API",
    description="Household onboarding: signup, invitations and identity linking",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def startup_event():
    """Create tables when the app starts"""
    logger.info("Starting Domo API")
    init_db()


# Include routers
app.include_router(routers.auth.router, prefix="/api/auth", tags=["authentication"])
app.include_router(
    routers.invitations.router, prefix="/api/invitations", tags=["invitations"]
)
app.include_router(routers.mobile.router, prefix="/api/mobile", tags=["mobile"])


@app.get("/")
async def root():
    return {"message": "Welcome to Domo API", "status": "running"}


@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "service": "domo-api",
        "version": "1.0.0",
        "connections": check_db_connection(),
    }


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
