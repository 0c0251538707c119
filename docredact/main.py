from __future__ import annotations

from dotenv import load_dotenv
from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .app_logging import configure_logging
from .api.v1.routers import document_types, feedback, jobs

load_dotenv()
configure_logging()

app = FastAPI(title="Document Redaction Service", version=__version__)

app.add_middleware(
  CORSMiddleware,
  allow_origins=["*"],
  allow_credentials=True,
  allow_methods=["*"],
  allow_headers=["*"],
)

api_router = APIRouter(prefix="/api")
api_router.include_router(jobs.router)
api_router.include_router(document_types.router)
api_router.include_router(feedback.router)

app.include_router(api_router)
