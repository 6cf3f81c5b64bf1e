"""
Application configuration settings
"""

from pydantic_settings import BaseSettings
from pydantic import computed_field
from functools import lru_cache
from typing import List, Optional
from urllib.parse import quote_plus


class Settings(BaseSettings):
    # Database Configuration (Individual Parameters)
    db_driver: str = "postgresql"
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "rewear"
    db_user: str = "rewear"
    db_password: str = ""

    @computed_field
    @property
    def database_url(self) -> str:
        """Compile database URL from individual parameters"""
        # SQLite only needs a file path (or :memory:)
        if self.db_driver.startswith("sqlite"):
            return f"{self.db_driver}:///{self.db_name}"

        encoded_user = quote_plus(self.db_user)
        encoded_password = quote_plus(self.db_password)

        # For Cloud SQL Unix sockets the socket path is passed via connect_args in database.py
        if self.db_host.startswith('/cloudsql/'):
            return f"{self.db_driver}://{encoded_user}:{encoded_password}@/{self.db_name}"
        return f"{self.db_driver}://{encoded_user}:{encoded_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    # Security (Required from environment)
    secret_key: str
    algorithm: str = "HS256"

    # Application
    app_name: str = "ReWear API"
    debug: bool = False

    # CORS - comma-separated list
    allowed_origins: str = "http://localhost:3000,http://localhost:5173"

    # Points economy
    initial_points: int = 100

    # AI / LLM Configuration
    # Provider options: "openai", "groq", "together", "fireworks", "deepinfra"
    llm_provider: str = "groq"
    openai_api_key: Optional[str] = None
    openai_model: str = "llama-3.3-70b-versatile"
    ai_candidate_limit: int = 50  # Max listings handed to the model per suggestion prompt

    # Provider-specific base URLs (optional, will use defaults if not set)
    groq_base_url: str = "https://api.groq.com/openai/v1"
    together_base_url: str = "https://api.together.xyz/v1"
    fireworks_base_url: str = "https://api.fireworks.ai/inference/v1"
    deepinfra_base_url: str = "https://api.deepinfra.com/v1/openai"

    # Logging Configuration
    log_level: str = "INFO"
    log_format: str = "text"  # "text" or "json"
    log_to_file: bool = False
    log_file_path: str = "logs/rewear.log"
    log_max_size_mb: int = 10
    log_backup_count: int = 5
    log_to_console: bool = True
    log_verbosity: str = "minimal"  # "minimal" or "full" - full also echoes SQL

    def get_allowed_origins(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return [origin.strip() for origin in self.allowed_origins.split(',') if origin.strip()]

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache()
def get_settings():
    return Settings()


settings = get_settings()
