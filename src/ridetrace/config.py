from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    simplify_tolerance: float = 1e-5  # degrees
    np_window_seconds: int = 30
    s3_bucket: str = ""  # empty disables upload
    s3_region: str = "us-east-1"
    identity_id: str = ""
    timeseries_key_prefix: str = "timeseries"
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
