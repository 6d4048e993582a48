from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    db_host: str = "localhost"
    db_port: int = 54378
    db_user: str = "postgres"
    db_password: str = "postgres"
    db_name: str = "constructo"
    redis_url: str = "redis://localhost:6379/0"
    artifact_dir: str = "generated/reports"
    executor_backend: str = "inline"  # inline / celery
    generation_timeout_seconds: float = 300.0
    stuck_job_threshold_minutes: int = 30
    sweep_interval_seconds: float = 600.0
    scheduler_enabled: bool = True
    labor_hourly_rate: float = 50.0  # Labour cost per actual hour
    currency_symbol: str = "PLN"
    log_level: str = "INFO"
    debug: bool = False

    @property
    def database_url(self) -> str:
        return f"postgresql+asyncpg://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    class Config:
        env_file = ".env"


settings = Settings()
