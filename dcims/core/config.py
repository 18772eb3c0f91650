# dcims/core/config.py

import os
from typing import List, Optional, Union

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    PROJECT_NAME: str = "DCIMS API"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"

    # Postgres connection string of the hosted (Supabase) database.
    DATABASE_URL: Optional[str] = None

    # Supabase project URL + anon key (informational; clients talk to Auth directly).
    SUPABASE_URL: Optional[str] = None
    SUPABASE_ANON_KEY: Optional[str] = None

    # Used to verify access tokens issued by Supabase Auth.
    SUPABASE_JWT_SECRET: Optional[str] = None
    JWT_ALGORITHM: str = "HS256"

    # Browser clients from any origin.
    BACKEND_CORS_ORIGINS: Union[List[str], str] = ["*"]

    LOG_LEVEL: str = "DEBUG" if os.getenv("DEBUG", "").lower() == "true" else "INFO"
    LOG_FILE: str = "logs/app.log"

    # Filtered server listing
    SERVER_PAGE_SIZE_DEFAULT: int = 10
    SERVER_PAGE_SIZE_MAX: int = 100

    # List widgets
    LIST_WIDGET_MAX_COLUMNS: int = 3
    LIST_WIDGET_DEFAULT_LIMIT: int = 100

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
