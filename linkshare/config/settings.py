from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""

    # Document collections (Supabase tables)
    users_table: str = "users"
    groups_table: str = "groups"
    array_union_rpc: str = "array_union_add"
    array_remove_rpc: str = "array_union_remove"

    # Sync engine
    optimistic_concurrency: bool = False  # conditional writes keyed on groups.version
    lookup_workers: int = 8  # thread pool size for bulk existence checks and search
    search_min_length: int = 2
    avatar_base_url: str = "https://ui-avatars.com/api/"

    # App
    app_name: str = "linkshare-client"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
