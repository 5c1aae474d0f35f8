from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "staffing"

    # ---------------------------------------------------------------------
    # API contract / OpenAPI
    # ---------------------------------------------------------------------

    api_version: str = "1.0.0"
    api_description: str = (
        "Consultant staffing API.\n\n"
        "Assignments are checked for double-booking: a consultant cannot hold two "
        "scheduled/active assignments whose [start, end) windows overlap."
    )

    env: str = "local"
    debug: bool = True
    log_level: str = "INFO"

    db_host: str = "127.0.0.1"
    db_port: int = 5432
    db_name: str = "staffing"
    db_user: str = "staffing"
    db_password: str = "staffing"

    # Full SQLAlchemy URL; wins over the db_* parts when set (e.g. sqlite for local runs).
    db_url: str | None = None

    # ---------------------------------------------------------------------
    # Scheduling transaction limits
    # ---------------------------------------------------------------------

    db_lock_timeout_ms: int = 5000
    db_statement_timeout_ms: int = 15000
    schedule_retry_delays: list[float] = [0.005, 0.01, 0.02, 0.04, 0.08]

    default_page_size: int = 10
    max_page_size: int = 100

    @property
    def database_url(self) -> str:
        if self.db_url:
            return self.db_url
        return (
            f"postgresql+psycopg://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )


settings = Settings()
