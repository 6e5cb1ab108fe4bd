from pydantic_settings import BaseSettings
from typing import List, Optional
import os


class Settings(BaseSettings):
    env: str = "dev"
    secret_key: str = "change_me_super_secret"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 30
    refresh_token_expire_minutes: int = 60 * 24 * 30
    database_url: str = "postgresql+psycopg2://salesboard:salesboard@db:5432/salesboard"
    org_header: str = "X-Org-ID"
    backend_cors_origins: str = "http://localhost:5173"
    log_level: str = "INFO"

    # Generated PDF reports are written here and served back through /reports
    report_storage_dir: str = "./storage/reports"
    report_base_url: str = "/reports"

    # Percent band around expected pace / trend change considered "on track"
    pace_tolerance_pct: float = 5.0
    trend_threshold_pct: float = 5.0

    # Registering with this email grants the super_admin app role
    bootstrap_admin_email: Optional[str] = None

    port: int = int(os.getenv("PORT", "8000"))

    @property
    def cors_origins(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        origins = self.backend_cors_origins
        return [origin.strip() for origin in origins.split(",") if origin.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
