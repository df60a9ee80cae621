from __future__ import annotations
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from pathlib import Path
from typing import List
import os

class Settings(BaseSettings):
    # declared so pydantic does not treat the key as "extra"
    openai_api_key: str | None = Field(default=None, alias="OPENAI_API_KEY")
    google_credentials: str | None = Field(default=None, alias="GOOGLE_APPLICATION_CREDENTIALS")

    # Models
    model_answer: str = Field(default="gpt-4", alias="TARA_MODEL_ANSWER")
    model_transcribe: str = Field(default="whisper-1", alias="TARA_MODEL_TRANSCRIBE")

    # Answer sampling
    answer_max_tokens: int = Field(default=900, alias="TARA_ANSWER_MAX_TOKENS")
    answer_temperature: float = Field(default=0.8, alias="TARA_ANSWER_TEMPERATURE")
    answer_presence_penalty: float = Field(default=0.3, alias="TARA_ANSWER_PRESENCE_PENALTY")
    answer_frequency_penalty: float = Field(default=0.2, alias="TARA_ANSWER_FREQUENCY_PENALTY")

    # Speech synthesis
    tts_speaking_rate: float = Field(default=0.9, alias="TARA_TTS_SPEAKING_RATE")
    tts_pitch: float = Field(default=0.0, alias="TARA_TTS_PITCH")

    # Rate limits (aiolimiter)
    llm_rps: float = Field(default=4.0, alias="TARA_LLM_RPS")
    speech_rps: float = Field(default=2.0, alias="TARA_SPEECH_RPS")

    # Storage
    db_path: str = Field(default=".local/tara.sqlite", alias="TARA_DB_PATH")
    audio_dir: str = Field(default=".local/audio", alias="TARA_AUDIO_DIR")

    # HTTP
    host: str = Field(default="0.0.0.0", alias="TARA_HOST")
    port: int = Field(default=5000, alias="TARA_PORT")
    public_base_url: str = Field(default="http://localhost:5000", alias="TARA_PUBLIC_BASE_URL")
    cors_origins: List[str] = Field(
        default=["http://localhost:5173", "http://localhost:3000", "http://127.0.0.1:5173"],
        alias="TARA_CORS_ORIGINS",
    )
    request_timeout_s: float = Field(default=45.0, alias="TARA_REQUEST_TIMEOUT_S")
    max_upload_mb: int = Field(default=10, alias="TARA_MAX_UPLOAD_MB")

    # Analytics
    feedback_window_days: int = Field(default=30, alias="TARA_FEEDBACK_WINDOW_DAYS")
    retrain_window_days: int = Field(default=7, alias="TARA_RETRAIN_WINDOW_DAYS")
    retrain_low_rating_threshold: float = Field(default=0.3, alias="TARA_RETRAIN_LOW_RATING")
    retrain_volume_threshold: int = Field(default=1000, alias="TARA_RETRAIN_VOLUME")
    retrain_improvement_potential: float = Field(default=0.2, alias="TARA_RETRAIN_IMPROVEMENT")

    # Traces (dev)
    trace_prompts: bool = Field(default=True, alias="TARA_TRACE_PROMPTS")
    log_level: str = Field(default="INFO", alias="TARA_LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

def export_credentials(s: Settings) -> None:
    """
    Copy credentials read from .env into the process environment: the OpenAI
    and Google clients only look there.
    """
    if s.openai_api_key and not os.getenv("OPENAI_API_KEY"):
        os.environ["OPENAI_API_KEY"] = s.openai_api_key
    if s.google_credentials and not os.getenv("GOOGLE_APPLICATION_CREDENTIALS"):
        os.environ["GOOGLE_APPLICATION_CREDENTIALS"] = s.google_credentials

settings = Settings()
export_credentials(settings)

# Local directories for the database and generated audio
Path(settings.db_path).parent.mkdir(parents=True, exist_ok=True)
Path(settings.audio_dir).mkdir(parents=True, exist_ok=True)
