from enum import Enum
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


ROOT_DIR = Path(__file__).resolve().parent.parent


class Env(Enum):
    local = "local"
    dev = "dev"
    prod = "prod"


class Config(BaseSettings):
    env: Env = Env.local
    html_dir: Path = ROOT_DIR / "assets" / "html"
    db_url: str = "sqlite+aiosqlite:///whisk.db"
    groq_api_key: str = "API_KEY"
    groq_base_url: str = "https://api.groq.com/openai/v1/"
    groq_model: str = "llama-3.3-70b-versatile"
    request_timeout: float = 60 * 2
    ocr_lang: str = "eng"

    model_config = SettingsConfigDict(
        env_prefix="WHISK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
