import json
import os
from pathlib import Path
from string import Template
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Override=True so changes in backend/.env take effect on process reload.
# Tests set DISABLE_DOTENV=1 so a developer's .env never leaks into them.
if os.getenv("DISABLE_DOTENV") != "1":
    load_dotenv(override=True)

_raw_database_url = (os.getenv("DATABASE_URL") or "").strip()
# Local SQLite fallback for development; production uses PostgreSQL + pgvector.
_default_sqlite_path = (Path(__file__).resolve().parent.parent / "dev.db").as_posix()
DATABASE_URL = _raw_database_url or f"sqlite:///{_default_sqlite_path}"

TOI_CONFIG_PATH = os.getenv("TOI_CONFIG_PATH") or "toi.json"

DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "5") or "5")
HTTP_TIMEOUT_S = float(os.getenv("HTTP_TIMEOUT_S", "60") or "60")
LOG_LEVEL = (os.getenv("LOG_LEVEL", "INFO") or "INFO").strip().upper()
LOG_PAYLOADS = (os.getenv("LOG_PAYLOADS", "0") or "0").strip() in {"1", "true", "True", "yes", "YES"}

DEFAULT_BIND_ADDR = "127.0.0.1:6969"
DEFAULT_USER_AGENT = "https://github.com/theOGognf/toi"


class ModelApiConfig(BaseModel):
    """Connection details for one upstream model API."""

    base_url: str
    headers: dict[str, str] = Field(default_factory=dict)
    params: dict[str, str] = Field(default_factory=dict)
    json_: dict[str, Any] = Field(default_factory=dict, alias="json")

    model_config = {"populate_by_name": True}


class ServerConfig(BaseModel):
    bind_addr: str = DEFAULT_BIND_ADDR
    user_agent: str = DEFAULT_USER_AGENT
    distance_threshold: float = Field(default=0.75, ge=0.0, le=2.0)
    similarity_threshold: float = 0.50

    @property
    def port(self) -> int:
        _, _, port = self.bind_addr.rpartition(":")
        return int(port)


class ToiConfig(BaseModel):
    server: ServerConfig = Field(default_factory=ServerConfig)
    embedding: ModelApiConfig
    generation: ModelApiConfig
    reranking: ModelApiConfig


def substitute_env(value: Any, env: dict[str, str] | None = None) -> Any:
    """Recursively expand $VAR / ${VAR} in every string of a JSON document.

    Unknown variables are left as-is.
    """
    mapping = os.environ if env is None else env
    if isinstance(value, str):
        return Template(value).safe_substitute(mapping)
    if isinstance(value, list):
        return [substitute_env(v, mapping) for v in value]
    if isinstance(value, dict):
        return {k: substitute_env(v, mapping) for k, v in value.items()}
    return value


def load_toi_config(path: str | os.PathLike | None = None) -> ToiConfig:
    config_path = Path(path or TOI_CONFIG_PATH)
    raw = json.loads(config_path.read_text(encoding="utf-8"))
    return ToiConfig.model_validate(substitute_env(raw))
