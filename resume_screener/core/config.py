from pydantic_settings import BaseSettings
from pathlib import Path
from typing import Optional

class Settings(BaseSettings):
    # API Config
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Resume Screener AI"

    # Paths
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    LOG_DIR: Path = BASE_DIR / "logs"

    # Gemini
    GOOGLE_API_KEY: Optional[str] = None
    LLM_MODEL_ID: str = "gemini-2.0-flash"
    RANKING_TEMPERATURE: float = 0.0  # consistent ranking across batches
    ATS_TEMPERATURE: float = 0.2
    EXTRACTION_TEMPERATURE: float = 0.1

    # Bulk ranking
    BATCH_SIZE: int = 10
    BATCH_TIMEOUT_SECONDS: float = 120.0  # 0 disables the per-batch timeout

    # Screening history kept per user and job role
    HISTORY_LIMIT: int = 20

    class Config:
        case_sensitive = True
        env_file = ".env"

settings = Settings()
