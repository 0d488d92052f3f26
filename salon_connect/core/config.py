from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    BACKEND_BASE_URL: str = "https://luci-server-useast.duckdns.org"
    API_PREFIX: str = "/api/v1"
    HTTP_TIMEOUT: float = 10.0
    MARK_READ_TIMEOUT: float = 5.0

    SOCKET_NAMESPACE: str = "/chat"
    SOCKET_TRANSPORTS: list[str] = ["websocket", "polling"]
    SOCKET_CONNECT_TIMEOUT: float = 20.0
    SOCKET_RECONNECT_ATTEMPTS: int = 5
    SOCKET_RECONNECT_DELAY: float = 1.0

    BOOKING_LEAD_MINUTES: int = 60
    BOOKING_DEFAULT_DURATION_MINUTES: int = 60
    TYPING_IDLE_SECONDS: float = 2.0

    FIREBASE_CREDENTIALS_FILE: str | None = None
    USER_COLLECTION: str = "Useraccount"
    OTP_COLLECTION: str = "OTPVerification"
    OTP_TTL_MINUTES: int = 10

    APP_NAME: str = "Luci"
    EMAIL_USER: str | None = None
    EMAIL_PASSWORD: str | None = None
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    @property
    def api_base_url(self) -> str:
        return self.BACKEND_BASE_URL.rstrip("/") + self.API_PREFIX


settings = Settings()
