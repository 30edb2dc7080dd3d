from pydantic_settings import BaseSettings
from pydantic import model_validator
from functools import lru_cache


class Settings(BaseSettings):
    # Database
    mysql_host: str = "localhost"
    mysql_port: int = 3306
    mysql_database: str = "talenthub"
    mysql_user: str = "root"
    mysql_password: str = ""
    # Full SQLAlchemy async URL; takes precedence over the MYSQL_* settings
    database_url: str = ""
    db_pool_size: int = 10
    db_pool_timeout: int = 30

    # Auth
    secret_key: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expire_hours: int = 24
    bcrypt_rounds: int = 10

    # App
    client_url: str = "http://localhost:5000"
    environment: str = "development"
    host: str = "0.0.0.0"
    port: int = 5000
    log_level: str = "INFO"

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Ensure secret_key is set properly in non-development environments."""
        weak_keys = {"change-me-in-production", "", "secret", "changeme"}
        if self.environment != "development" and self.secret_key in weak_keys:
            raise ValueError(
                f"SECRET_KEY must be set to a secure value in {self.environment} environment. "
                "Generate one with: openssl rand -hex 32"
            )
        return self

    @property
    def sqlalchemy_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"mysql+aiomysql://{self.mysql_user}:{self.mysql_password}"
            f"@{self.mysql_host}:{self.mysql_port}/{self.mysql_database}"
            f"?charset=utf8mb4"
        )

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()
