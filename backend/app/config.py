from pydantic_settings import BaseSettings
from pydantic import Field
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings."""

    environment: str = Field(default="development", env="ENVIRONMENT")
    log_level: str = Field(default="INFO", env="LOG_LEVEL")

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./campus_voice.db",
        env="DATABASE_URL",
    )
    db_echo: bool = Field(default=False, env="DB_ECHO")

    # Auth
    jwt_secret_key: str = Field(default="dev-change-me", env="JWT_SECRET_KEY")
    jwt_expire_seconds: int = Field(default=30 * 24 * 3600, env="JWT_EXPIRE_SECONDS")
    bcrypt_rounds: int = Field(default=10, env="BCRYPT_ROUNDS")
    reset_token_expire_seconds: int = Field(default=600, env="RESET_TOKEN_EXPIRE_SECONDS")

    # CORS
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        env="CORS_ORIGINS",
    )

    # File uploads
    upload_dir: str = Field(default="./uploads", env="UPLOAD_DIR")
    max_file_size: int = Field(default=5 * 1024 * 1024, env="MAX_FILE_SIZE")

    # Cloudinary
    cloudinary_cloud_name: str = Field(default="", env="CLOUDINARY_CLOUD_NAME")
    cloudinary_api_key: str = Field(default="", env="CLOUDINARY_API_KEY")
    cloudinary_api_secret: str = Field(default="", env="CLOUDINARY_API_SECRET")

    # Optional bootstrap admin, created at startup when both are set
    seed_admin_email: str = Field(default="", env="SEED_ADMIN_EMAIL")
    seed_admin_password: str = Field(default="", env="SEED_ADMIN_PASSWORD")

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
