import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Import settings to ensure env vars are populated
from app.infra.config import settings
from app.routers import find, intake, reply

# ---------------- Logging setup ----------------
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Credibot API",
    version="0.1.0",
    summary="Therapy-prep chat relay over Groq / Hugging Face"
)

app.include_router(reply.router)
app.include_router(intake.router)
app.include_router(find.router)

# Allow dev UI; restrict in production.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Session-Id", "X-Modality", "Content-Disposition"],
)


@app.get("/health")
def health_check():
    return {"status": "ok"}


def run():
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.api_port)
