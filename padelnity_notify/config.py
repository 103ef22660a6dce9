from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # pydantic v2: ignore unknown env vars (e.g., ENV), load from .env
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
    app_name: str = "padelnity-notify"
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "info"
    # File logging options (JSON lines)
    log_file_enabled: bool = False
    log_dir: str = "logs"
    log_file_name: str = "server.log"
    log_max_bytes: int = 10_000_000
    log_backup_count: int = 5
    log_utc: bool = True

    # Toast delivery timings (milliseconds)
    toast_dedup_window_ms: int = 3000
    toast_display_ms: int = 1500
    toast_exit_ms: int = 300  # exit animation; slot stays occupied meanwhile

    # Presentation sink: 'overlay' (websocket clients) or 'log' (terminal)
    toast_sink: str = "overlay"

    # Minimum gap between sign-up submissions
    submit_cooldown_sec: int = 10
    # Minimum gap between verification email resends
    resend_cooldown_sec: int = 60

    # Overlay customization
    overlay_position: str = "top"  # env: OVERLAY_POSITION ('top' or 'bottom')


settings = Settings()
