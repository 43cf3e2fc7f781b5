from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    AIRSTACK_API_KEY: Optional[str] = None
    AIRSTACK_API_URL: str = "https://api.airstack.xyz/gql"
    AIRSTACK_TIMEOUT: float = 60.0

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

settings = Settings()
