"""Application configuration using pydantic-settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="HIVQI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "HIV Care Quality Indicators"
    debug: bool = False

    # Database (synchronous, indicators are evaluated in-request)
    database_url: str = "sqlite:///./hivqi.db"

    # Redis (optional cohort result cache)
    redis_url: str = "redis://localhost:6379/0"
    cohort_cache_enabled: bool = False
    cohort_cache_ttl_seconds: int = 3600

    # Metadata
    hiv_addendum_form_uuid: str = "bd598114-4ef4-47b1-a746-a616180ccfc0"
    moh_257_visit_summary_form_uuid: str = "23b4ebbd-29ad-455e-be0e-04aa6bc30798"
    return_visit_date_concept_uuid: str = "5096AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA"

    # Cohorts
    adult_min_age: int = 18


settings = Settings()
