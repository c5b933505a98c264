import os
from dotenv import load_dotenv

load_dotenv()

GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
GEMINI_TEXT_MODEL: str = os.getenv("GEMINI_TEXT_MODEL", "gemini-2.5-flash")
GEMINI_IMAGE_MODEL: str = os.getenv(
    "GEMINI_IMAGE_MODEL", "gemini-2.0-flash-preview-image-generation"
)

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS: list[str] = [
    origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()
]

RETRY_MAX_ATTEMPTS: int = 3
RETRY_INITIAL_DELAY_MS: int = 2000
RETRY_BACKOFF_FACTOR: int = 2
