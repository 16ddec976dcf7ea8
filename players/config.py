from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # ================= App =================
    APP_TITLE: str = "Players Service"
    APP_HOST: str = "0.0.0.0"
    PORT: int = 5000

    # ================= Postgres =================
    POSTGRES_USER: str = "players_user"
    POSTGRES_PASSWORD: str = "players_password"
    POSTGRES_DB: str = "players_db"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_POOL_MIN_SIZE: int = 1
    POSTGRES_POOL_MAX_SIZE: int = 10
    POSTGRES_POOL_MAX_IDLE: float = 60.0

    # ================= Logging =================
    LOG_LEVEL: str = "INFO"

    @property
    def POSTGRES_DSN(self) -> str:
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


def get_settings(env_file: str = ".env") -> Settings:
    env_path = Path(env_file)
    if env_path.exists():
        print(f"Loading configuration from {env_path}")
        return Settings(_env_file=env_path)
    print(f"Env file not found at {env_path}, using defaults")
    return Settings(_env_file=None)
