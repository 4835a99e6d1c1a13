"""Configuration management for Talent Match."""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )
    
    # Application Configuration
    debug: bool = Field(False, description="Enable debug mode")
    log_level: str = Field("INFO", description="Logging level")
    
    # Server Configuration
    host: str = Field("0.0.0.0", description="Server host")
    port: int = Field(5000, description="Server port")
    reload: bool = Field(False, description="Enable auto-reload")
    allowed_origins: list[str] = Field(["*"], description="CORS allowed origins")
    allowed_hosts: Optional[list[str]] = Field(None, description="Trusted hosts")
    
    # Storage Configuration
    storage_backend: str = Field("memory", description="Store backend (memory/sql)")
    database_url: str = Field("sqlite:///./talent_match.db", description="SQLAlchemy database URL")
    database_echo: bool = Field(False, description="Echo SQL statements")
    
    # Security
    jwt_secret_key: str = Field("your-secret-key-change-in-production", description="JWT secret key")
    jwt_algorithm: str = Field("HS256", description="JWT algorithm")
    jwt_expiration_hours: int = Field(168, description="JWT expiration hours")
    password_hash_iterations: int = Field(260000, description="PBKDF2 iterations for password hashing")
    
    # Pagination
    default_page_size: int = Field(10, description="Default page size for listings")
    max_page_size: int = Field(100, description="Maximum page size for listings")


# Global settings instance
settings = Settings()
