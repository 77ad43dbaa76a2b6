import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


class Settings(BaseModel):
    # Client Configuration
    api_base_url: str = Field(default="http://localhost:8000", alias="API_BASE_URL")
    fetch_timeout: float = Field(default=30.0, gt=0, alias="FETCH_TIMEOUT")
    client_cache_ttl: float = Field(default=300.0, gt=0, alias="CLIENT_CACHE_TTL")

    # Server Configuration
    server_host: str = Field(default="0.0.0.0", alias="SERVER_HOST")
    server_port: int = Field(default=8000, alias="SERVER_PORT")
    server_cache_absolute_ttl: float = Field(
        default=600.0, gt=0, alias="SERVER_CACHE_ABSOLUTE_TTL"
    )
    server_cache_sliding_ttl: float = Field(
        default=180.0, gt=0, alias="SERVER_CACHE_SLIDING_TTL"
    )

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")


global_settings = Settings.model_validate(dict(os.environ))
