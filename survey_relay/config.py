"""Configuration loading for the submission service.

Sink configuration is assembled with the following precedence (highest
first):

1) Environment variables
2) Text files under `config/` (optional)
3) `survey_relay_config.json` at the project root
4) Development defaults (no sinks configured)

Pydantic models validate the result; invalid configuration is logged and
re-raised.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, List, Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from survey_relay.errors import ConfigurationError
from survey_relay.models.sink_config import (
    DocumentStoreConfig,
    ObjectStoreConfig,
    SinkConfig,
    SpreadsheetConfig,
)


CONFIG_DIR = Path("config")
ROOT_CONFIG = Path("survey_relay_config.json")
logger = logging.getLogger(__name__)


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


def _truthy(value: Optional[str]) -> bool:
    return str(value or "").strip().lower() in {"1", "true", "yes", "on"}


def load_credentials(value: Optional[str]) -> Optional[dict]:
    """Parse service-account credentials given as JSON text or a path to a JSON file."""
    if not value:
        return None
    text = value.strip()
    if not text.startswith("{"):
        try:
            text = Path(text).read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"cannot read credentials file {value}: {e}") from e
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"credentials are not valid JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise ConfigurationError("credentials must be a JSON object")
    return parsed


class AppConfig(BaseModel):
    sinks: SinkConfig = Field(default_factory=SinkConfig)
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])


def load_config() -> AppConfig:
    """Load configuration with validation."""

    base = _read_json_file(ROOT_CONFIG)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: Any = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        if cur is None:
            return default
        return json.dumps(cur) if isinstance(cur, (dict, list)) else str(cur)

    def _setting(env_key: str, file_key: str, base_key: str, default: Optional[str] = None) -> Optional[str]:
        return _env(env_key) or _read_config_file(file_key) or _base(base_key, default)

    # Document store
    doc_uri = _env("SURVEY_DOCUMENT_STORE_URI") or _read_config_file("document_store.uri") or _base("document_store.uri") or _env("DATABASE_URL")
    enforce = _truthy(_setting("SURVEY_ENFORCE_UNIQUENESS", "document_store.enforce_uniqueness", "document_store.enforce_uniqueness", "false"))

    # Spreadsheet
    sheet_id = _setting("SURVEY_SHEET_ID", "spreadsheet.id", "spreadsheet.spreadsheet_id")
    sheet_range = _setting("SURVEY_SHEET_RANGE", "spreadsheet.range", "spreadsheet.range", "Sheet1!A1")
    sheet_key = _setting("SURVEY_SHEET_API_KEY", "spreadsheet.api_key", "spreadsheet.api_key")
    sheet_token = _setting("SURVEY_SHEET_ACCESS_TOKEN", "spreadsheet.access_token", "spreadsheet.access_token")

    # Object store
    bucket = _setting("SURVEY_GCP_BUCKET", "object_store.bucket", "object_store.bucket")
    credentials_text = _setting("SURVEY_GCP_CREDENTIALS", "object_store.credentials", "object_store.credentials")

    origins_text = _setting("SURVEY_CORS_ORIGINS", "cors.origins", "cors_origins", "*") or "*"
    if origins_text.startswith("["):
        origins = [str(o) for o in json.loads(origins_text)]
    else:
        origins = [o.strip() for o in origins_text.split(",") if o.strip()]

    try:
        sinks = SinkConfig(
            document_store=DocumentStoreConfig(uri=doc_uri, enforce_uniqueness=enforce) if doc_uri else None,
            spreadsheet=(
                SpreadsheetConfig(spreadsheet_id=sheet_id, range=sheet_range, api_key=sheet_key, access_token=sheet_token)
                if sheet_id and sheet_key
                else None
            ),
            object_store=(
                ObjectStoreConfig(credentials=load_credentials(credentials_text), bucket=bucket)
                if bucket and credentials_text
                else None
            ),
        )
        return AppConfig(sinks=sinks, cors_origins=origins or ["*"])
    except PydanticValidationError as e:
        logger.error("Invalid application configuration: %s", e)
        raise


__all__ = ["AppConfig", "load_config", "load_credentials"]
