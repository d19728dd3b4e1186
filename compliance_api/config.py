import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    gemini_api_key: str = os.getenv("GEMINI_API_KEY", "").strip()
    gemini_model: str = os.getenv("GEMINI_MODEL", "").strip()
    gemini_base_url: str = os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta")
    gemini_timeout_s: float = float(os.getenv("GEMINI_TIMEOUT_SECONDS", "60"))
    allowed_origin: str = os.getenv("ALLOWED_ORIGIN", "https://site-jmqhaxxba.godaddysites.com")
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT") or "8080")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_json: bool = os.getenv("LOG_JSON", "true").lower() == "true"


settings = Settings()
