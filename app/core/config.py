"""
Application configuration (env, settings, constants).

Responsibility: Centralize config loading, environment variables, and app-wide
constants. Keeps the rest of the app decoupled from how config is sourced.

Static tunables are read once at import. Credentials are read per request by
get_settings() so a missing variable fails the request with a clear message
instead of crashing the process at boot.
"""

import json
import os
from dataclasses import dataclass
from typing import Any

from dotenv import load_dotenv

from app.core.errors import ConfigurationError

load_dotenv()

# Gemini (language model)
GEMINI_API_BASE: str = "https://generativelanguage.googleapis.com/v1beta"
GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash").strip() or "gemini-2.5-flash"

# API timeouts (seconds)
LLM_API_TIMEOUT: float = float(os.getenv("LLM_API_TIMEOUT", "60"))

# Google Drive
DRIVE_SCOPES: list[str] = ["https://www.googleapis.com/auth/drive.readonly"]
# Max files fetched and parsed at the same time while building the knowledge base
DRIVE_MAX_CONCURRENCY: int = int(os.getenv("DRIVE_MAX_CONCURRENCY", "8"))

# Knowledge base cache: 15 minutes unless overridden
KNOWLEDGE_CACHE_TTL_SECONDS: float = float(os.getenv("KNOWLEDGE_CACHE_TTL_SECONDS", "900"))

# Knowledge base layout
SEGMENT_DELIMITER: str = "\n\n---\n\n"

# Declared media types understood by the text extractor
MIME_PDF: str = "application/pdf"
MIME_DOCX: str = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
MIME_PPTX: str = "application/vnd.openxmlformats-officedocument.presentationml.presentation"

# Names of the variables required at request time
REQUIRED_ENV_VARS: tuple[str, ...] = ("GEMINI_API_KEY", "DRIVE_API_CREDENTIALS", "DRIVE_FOLDER_ID")


@dataclass(frozen=True)
class Settings:
    """Per-request settings: secrets and the folder the knowledge base is built from."""

    gemini_api_key: str
    drive_credentials: dict[str, Any]
    drive_folder_id: str
    gemini_model: str = GEMINI_MODEL


def parse_drive_credentials(raw: str) -> dict[str, Any]:
    """Decode the DRIVE_API_CREDENTIALS service-account payload."""
    try:
        credentials = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            "Server configuration error: DRIVE_API_CREDENTIALS is not valid JSON."
        ) from e
    if not isinstance(credentials, dict):
        raise ConfigurationError(
            "Server configuration error: DRIVE_API_CREDENTIALS must be a JSON object."
        )
    return credentials


def get_settings() -> Settings:
    """
    Read and validate required environment variables.

    Raises:
        ConfigurationError: If a variable is missing or DRIVE_API_CREDENTIALS
            is not a JSON object.
    """
    values = {name: os.getenv(name, "").strip() for name in REQUIRED_ENV_VARS}
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise ConfigurationError(
            f"Server configuration error: Missing environment variables: {', '.join(missing)}"
        )
    return Settings(
        gemini_api_key=values["GEMINI_API_KEY"],
        drive_credentials=parse_drive_credentials(values["DRIVE_API_CREDENTIALS"]),
        drive_folder_id=values["DRIVE_FOLDER_ID"],
    )
