# pte_api/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,  # Environment vars are uppercase
        extra="ignore",      # Ignore unexpected vars instead of raising
    )

    # Core application settings
    DATABASE_URL: str
    HOST: str = "0.0.0.0"
    PORT: int = 8101
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    APP_NAME: str = "PTE Academic Practice"
    FRONTEND_APP_URL: str | None = None
    LOG_FILE: str = "app.log"
    SQL_ECHO: bool = False

    # CORS settings
    ALLOWED_ORIGINS: list[str] = ["*"]  # In production, specify actual origins
    ALLOW_CREDENTIALS: bool = True
    ALLOWED_METHODS: list[str] = ["*"]
    ALLOWED_HEADERS: list[str] = ["*"]

    # JWT settings
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 43200  # 30 days
    JWT_REFRESH_SECRET: str
    JWT_REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    OTP_INTERVAL_SECONDS: int = 600

    # AI providers
    GOOGLE_API_KEY: str | None = None
    GEMINI_API_KEY: str | None = None  # alias of GOOGLE_API_KEY
    GROQ_API_KEY: str | None = None
    OPENAI_API_KEY: str | None = None
    GEMINI_MODEL_FAST: str = "gemini-2.0-flash"
    GEMINI_MODEL_QUALITY: str = "gemini-2.5-pro"
    GEMINI_MODEL_TTS: str = "gemini-2.5-pro-preview-tts"
    GROQ_MODEL_FAST: str = "llama-3.1-8b-instant"
    GROQ_MODEL_QUALITY: str = "llama-3.3-70b-versatile"
    OPENAI_MODEL_FAST: str = "gpt-4o-mini"
    OPENAI_MODEL_QUALITY: str = "gpt-4o"
    OPENAI_REALTIME_MODEL: str = "gpt-4o-realtime-preview-2024-12-17"
    OPENAI_REALTIME_VOICE: str = "verse"
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"

    # Scoring
    SCORING_STRATEGY: str = "fallback"  # 'fallback' | 'consensus'
    AI_PROVIDER_ORDER: list[str] = ["gemini", "openai", "groq"]
    AI_REQUEST_TIMEOUT_SECONDS: float = 60.0

    # AI credits per day by plan type (-1 means unlimited)
    DAILY_AI_CREDITS_FREE: int = 4
    DAILY_AI_CREDITS_BASIC: int = 20
    DAILY_AI_CREDITS_PREMIUM: int = -1
    DAILY_AI_CREDITS_ENTERPRISE: int = -1
    FREE_SUBSCRIPTION_DAYS: int = 30

    # Audio uploads
    AUDIO_MAX_BYTES: int = 15 * 1024 * 1024  # 15MB
    AUDIO_ALLOWED_MIME: list[str] = [
        "audio/webm",
        "audio/mpeg",
        "audio/mp3",
        "audio/wav",
        "audio/x-wav",
        "audio/mp4",
        "audio/m4a",
    ]

    # Email sender settings (Resend)
    RESEND_API_KEY: str | None = None
    RESEND_FROM_EMAIL: str = "no-reply@example.com"
    SUPPORT_EMAIL: str = "support@example.com"
    LOGO: str | None = None

    # External object storage (Cloudflare R2 / S3 compatible)
    STORAGE_BACKEND: str = "local"  # 'local' | 's3'
    LOCAL_STORAGE_PATH: str = "uploads"
    S3_BUCKET_NAME: str | None = None
    S3_ENDPOINT_URL: str | None = None
    S3_REGION: str | None = None
    S3_ACCESS_KEY_ID: str | None = None
    S3_SECRET_ACCESS_KEY: str | None = None
    S3_PUBLIC_BASE_URL: str | None = None
    S3_PRESIGN_EXPIRES: int = 3600  # seconds

    # Alternative naming variants for backward compatibility
    S3_BUCKET: str | None = None
    S3_ENDPOINT: str | None = None
    AWS_ACCESS_KEY_ID: str | None = None
    AWS_SECRET_ACCESS_KEY: str | None = None
    R2_PUBLIC_BASE_URL: str | None = None

    # Seeding
    SEED_ON_STARTUP: bool = True


# Older deployment variable names: alias -> canonical
SETTING_ALIASES = {
    "GEMINI_API_KEY": "GOOGLE_API_KEY",
    "S3_BUCKET": "S3_BUCKET_NAME",
    "S3_ENDPOINT": "S3_ENDPOINT_URL",
    "AWS_ACCESS_KEY_ID": "S3_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY": "S3_SECRET_ACCESS_KEY",
    "R2_PUBLIC_BASE_URL": "S3_PUBLIC_BASE_URL",
}


def _normalize_settings(settings: Settings) -> None:
    for alias, canonical in SETTING_ALIASES.items():
        if not getattr(settings, canonical) and getattr(settings, alias):
            setattr(settings, canonical, getattr(settings, alias))
    settings.SCORING_STRATEGY = settings.SCORING_STRATEGY.strip().lower()
    settings.AI_PROVIDER_ORDER = [p.strip().lower() for p in settings.AI_PROVIDER_ORDER if p.strip()]


def _validate_settings(settings: Settings) -> None:
    if settings.SCORING_STRATEGY not in {"fallback", "consensus"}:
        raise ValueError("SCORING_STRATEGY must be 'fallback' or 'consensus'")
    unknown = set(settings.AI_PROVIDER_ORDER) - {"gemini", "groq", "openai"}
    if unknown:
        raise ValueError(f"Unknown AI providers in AI_PROVIDER_ORDER: {sorted(unknown)}")
    if settings.ENVIRONMENT != "production":
        return
    if settings.DEBUG:
        print("WARNING: DEBUG=True in production")
    # Email links are built from FRONTEND_APP_URL
    if not settings.FRONTEND_APP_URL:
        raise ValueError("FRONTEND_APP_URL is required in production")


try:
    settings = Settings()
    _normalize_settings(settings)
    _validate_settings(settings)
except Exception as e:
    print(f"Error initializing settings: {e}")
    raise
