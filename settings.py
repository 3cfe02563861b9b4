"""Runtime configuration (environment variables prefixed WARDEN_)."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class WardenSettings(BaseSettings):
    """
    Environment Variables:
        WARDEN_KEYS_PATH
        WARDEN_MANIFEST_PATH
        WARDEN_LEDGER_PATH
        WARDEN_LOG_LEVEL
        WARDEN_ENDORSEMENT_TTL
    """

    model_config = SettingsConfigDict(
        env_prefix="WARDEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    keys_path: str = "keys.json"
    manifest_path: str = "groups.json"
    ledger_path: str = "audit.chain"
    log_level: str = "INFO"
    endorsement_ttl: float = 60.0
