"""pocket-kindle configuration via pydantic-settings."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings

from .errors import ConfigError

STATE_FILE_NAME = ".pocket-repository-state"


class Settings(BaseSettings):
    pocket_platform_consumer_key: str = ""

    # Outbound mail (Send to Kindle)
    send_to_kindle_email: str = ""
    email_user: str = ""
    email_password: str = ""
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587

    # Local OAuth callback listener
    callback_host: str = "127.0.0.1"
    callback_port: int = 8080

    state_dir: str = "~/.pocket-kindle"
    http_timeout: float = 30.0

    model_config = {"env_file": ".env", "extra": "ignore"}

    @property
    def state_path(self) -> Path:
        return Path(self.state_dir).expanduser()

    @property
    def state_file(self) -> Path:
        return self.state_path / STATE_FILE_NAME

    @property
    def redirect_uri(self) -> str:
        return f"http://{self.callback_host}:{self.callback_port}"

    @property
    def mail_configured(self) -> bool:
        return bool(self.send_to_kindle_email and self.email_user and self.email_password)

    def require_consumer_key(self) -> str:
        key = self.pocket_platform_consumer_key.strip()
        if not key:
            raise ConfigError(
                "POCKET_PLATFORM_CONSUMER_KEY not set. Add it to your environment or .env file."
            )
        return key
