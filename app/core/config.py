from typing import List, Optional

from pydantic import AliasChoices, Field, SecretStr, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]


class Settings(BaseSettings):
    PROJECT_NAME: str = "Portfolio Contact Relay"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"
    PORT: int = 3001

    # --- Environment & Debug ---
    ENVIRONMENT: str = "local"
    DEBUG: bool = False  # Default to False for security
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None  # None = console only

    # --- SMTP transport ---
    SMTP_HOST: Optional[str] = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USE_TLS: bool = True
    SMTP_TIMEOUT: float = 10.0
    SMTP_USER: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("SMTP_USER", "EMAIL_USER")
    )
    SMTP_PASSWORD: Optional[SecretStr] = Field(
        default=None, validation_alias=AliasChoices("SMTP_PASSWORD", "EMAIL_PASS")
    )
    MAIL_FROM: Optional[str] = None

    # --- Contact form ---
    CONTACT_RECIPIENT: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("CONTACT_RECIPIENT", "RECIPIENT_EMAIL"),
        description="Operator address receiving contact notifications.",
    )
    SIGNATURE_NAME: str = "Portfolio Owner"
    SIGNATURE_TITLE: Optional[str] = "Network Engineer & Web Developer"
    SIGNATURE_EMAIL: Optional[str] = None
    SIGNATURE_PHONE: Optional[str] = None
    MAX_BODY_BYTES: int = 100 * 1024

    # --- Rate Limiting / Proxy ---
    CONTACT_RATE_LIMIT_MAX: int = Field(default=5, ge=1)
    CONTACT_RATE_LIMIT_WINDOW_SECONDS: int = Field(default=15 * 60, ge=1)
    REDIS_URL: Optional[str] = None  # None = in-memory counters
    TRUSTED_PROXIES: List[str] = Field(
        default_factory=lambda: ["127.0.0.1", "10.0.0.0/8", "172.16.0.0/12", "192.168.0.0/16"],
        description="CIDR ranges of trusted reverse proxies for X-Forwarded-For",
    )

    # --- CORS ---
    ALLOWED_ORIGINS: List[str] = Field(
        default_factory=lambda: list(DEFAULT_ORIGINS),
        description="List of allowed CORS origins. Configure in .env",
    )
    ALLOWED_METHODS: List[str] = Field(
        default_factory=lambda: ["POST"],
        description="Allowed HTTP methods for cross-origin calls.",
    )
    ALLOWED_HEADERS: List[str] = Field(
        default_factory=lambda: ["Content-Type", "Accept", "X-Request-ID"],
    )

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=True, extra="ignore"
    )

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def default_allowed_origins(
        cls, v: Optional[List[str]], info: ValidationInfo
    ) -> Optional[List[str]]:
        env = info.data.get("ENVIRONMENT") or "local"
        if env != "production":
            if v is None:
                return list(DEFAULT_ORIGINS)
            if isinstance(v, str) and v.strip() in ("", "[]"):
                return list(DEFAULT_ORIGINS)
            if isinstance(v, list) and len(v) == 0:
                return list(DEFAULT_ORIGINS)
        return v

    @field_validator("LOG_LEVEL", mode="after")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    @property
    def contact_recipient(self) -> Optional[str]:
        """Operator address; defaults to the SMTP account itself."""
        return self.CONTACT_RECIPIENT or self.SMTP_USER

    @property
    def mail_from(self) -> Optional[str]:
        return self.MAIL_FROM or self.SMTP_USER

    @property
    def mail_configured(self) -> bool:
        return bool(self.contact_recipient and self.mail_from)


settings = Settings()
