from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env.local", env_file_encoding="utf-8", extra="ignore")

    # Firebase
    GOOGLE_APPLICATION_CREDENTIALS: Optional[str] = None
    FIREBASE_CREDENTIALS_JSON_STRING: Optional[str] = None
    FIREBASE_STORAGE_BUCKET: Optional[str] = None  # firebase storage bucket name (e.g. my-app.appspot.com)

    # Firestore collections
    FOUND_ITEMS_COLLECTION: str = "found_items"
    LOST_ALERTS_COLLECTION: str = "lost_alerts"
    MAIL_COLLECTION: str = "mail"  # consumed by the mail delivery extension

    # Model provider: openai | echo (deterministic, offline)
    LLM_PROVIDER: str = "openai"

    # OpenAI
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_VISION_MODEL: str = "gpt-4o-mini"
    OPENAI_EMBEDDING_MODEL: str = "text-embedding-3-small"

    # Echo provider vector size
    EMBEDDING_DIM: int = 768

    # prompts
    DESCRIPTION_PROMPT: str = (
        "Describe this item in detail for a lost-and-found database. "
        "Include color, type, brand, unique features, and condition."
    )
    SEARCH_DESCRIPTION_PROMPT: str = (
        "Detailed description of this object for visual search matching. "
        "Focus on visual traits: color, shape, materials, text."
    )

    # Matching policy
    MATCH_THRESHOLD: float = 0.60  # strict: score must be greater
    MAX_ALERTS_PER_PASS: int = 5000

    # External call timeouts (seconds)
    TEXT_REQUEST_TIMEOUT: float = 60.0
    IMAGE_REQUEST_TIMEOUT: float = 120.0
    # Cloud Functions are killed at timeout_sec; keep it above the deadlines above
    FUNCTION_TIMEOUT_MARGIN: int = 30

    # Logging
    LOG_DIR: str = "logs"
    LOG_JSON: bool = False

    # HTTP
    CORS_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"


settings = Settings()
