from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

# Ensure environment variables from the repository root .env are available
# regardless of the working directory used to start the process.
ROOT_DIR = Path(__file__).resolve().parents[1]
load_dotenv(ROOT_DIR / ".env")


class Settings(BaseSettings):
  azure_openai_api_key: str | None = Field(default=None, alias="AZURE_OPENAI_API_KEY")
  azure_openai_endpoint: str = Field(default="", alias="AZURE_OPENAI_ENDPOINT")
  azure_openai_api_version: str = Field(default="2024-12-01-preview", alias="AZURE_OPENAI_API_VERSION")
  azure_openai_deployment_name: str | None = Field(default=None, alias="AZURE_OPENAI_DEPLOYMENT_NAME")
  azure_openai_vision_model: str | None = Field(default=None, alias="AZURE_OPENAI_VISION_MODEL")

  extraction_fallback_endpoint: str | None = Field(default=None, alias="EXTRACTION_FALLBACK_ENDPOINT")
  extraction_fallback_api_key: str | None = Field(default=None, alias="EXTRACTION_FALLBACK_API_KEY")
  extraction_max_attempts: int = Field(default=2, alias="EXTRACTION_MAX_ATTEMPTS")
  extraction_timeout_seconds: float = Field(default=60.0, alias="EXTRACTION_TIMEOUT_SECONDS")
  extraction_backoff_seconds: float = Field(default=1.0, alias="EXTRACTION_BACKOFF_SECONDS")

  render_zoom: float = Field(default=2.0, alias="RENDER_ZOOM")
  pipeline_max_workers: int = Field(default=1, alias="PIPELINE_MAX_WORKERS")
  pipeline_job_timeout_seconds: float | None = Field(default=900.0, alias="PIPELINE_JOB_TIMEOUT_SECONDS")

  feedback_endpoint: str | None = Field(default=None, alias="FEEDBACK_ENDPOINT")
  element_catalog_path: str | None = Field(default=None, alias="ELEMENT_CATALOG_PATH")

  def ensure_endpoint(self) -> str:
    endpoint = (self.azure_openai_endpoint or "").strip()
    if not endpoint:
      return ""
    return endpoint.rstrip("/") + "/"

  class Config:
    case_sensitive = False


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  return Settings()  # type: ignore[arg-type]
