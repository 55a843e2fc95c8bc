# leasehold/config.py
from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="LEASEHOLD_", extra="ignore")

    # ---- App ----
    app_env: str = "local"  # local|dev|prod
    database_url: str = "sqlite:///./leasehold.db"

    # ---- Logging ----
    log_level: str = "INFO"
    sql_log_level: str = "WARNING"

    # ---- CORS (used by main.py) ----
    cors_allow_origins: list[str] | str = ["*"]

    # ---- Agreement lifecycle ----
    # Both off by default: the lifecycle accepts any transition and does not
    # look at other agreements on the same property.
    block_overlapping_agreements: bool = False
    strict_agreement_transitions: bool = False

    # ---- Queries ----
    default_list_limit: int = 200
    expiring_window_days: int = 30

    def model_post_init(self, __context) -> None:
        env = (self.app_env or "local").strip().lower()
        if env in ("prod", "production"):
            origins = self.cors_allow_origins
            if origins == "*" or origins == ["*"] or (isinstance(origins, str) and "*" in origins):
                raise ValueError("SECURITY: cors_allow_origins wildcard is not allowed in prod")


settings = Settings()
