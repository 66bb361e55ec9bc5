"""Service settings, read from the environment or a .env file."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    app_name: str = "Sens-O-Matic"
    debug: bool = False

    # Bind address for the `sensomatic` command
    host: str = "0.0.0.0"
    port: int = 3000
    allowed_origins: str = "*"  # Comma-separated, or "*" for any origin

    log_dir: str = "~/.logs/sensomatic"

    # Moves confirmed hangouts to active, then complete, as their timeline passes.
    # Once swept, manual /activate and /complete calls for that ping return 409.
    hangout_sweep_enabled: bool = True
    hangout_sweep_interval_seconds: int = 60

    @property
    def cors_origins(self) -> list[str]:
        if self.allowed_origins == "*":
            return ["*"]
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


settings = Settings()
