from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Credentials and target organization (normally supplied by the UI layer)
    github_token: str = ""
    github_org: str = ""
    # Time window in days; None means "all time" (52-week graph)
    window_days: int | None = None

    # GitHub REST API
    github_api_base: str = "https://api.github.com"
    github_api_version: str = "2022-11-28"
    per_page: int = 100

    # Request volume caps, tuned against the 5,000 requests/hour budget
    commit_page_cap: int = 10
    fallback_commit_pages: int = 3
    pr_enrich_limit: int = 30
    review_scan_limit: int = 50
    commit_detail_limit: int = 50
    recent_items_limit: int = 20

    # Contributor-stats endpoint answers 202 while GitHub computes the data
    stats_max_retries: int = 3
    stats_retry_delay: float = 1.5

    # Response cache
    cache_ttl_seconds: int = 30 * 60
    cache_max_entry_bytes: int = 500 * 1024
    cache_quota_bytes: int = 5 * 1024 * 1024
    cache_namespace: str = "gh-leaderboard:"

    # Auto-refresh
    scheduler_enabled: bool = False
    auto_refresh_minutes: int = 15

    log_level: str = "INFO"

    @property
    def has_credentials(self) -> bool:
        """Check if both a token and an organization are configured."""
        return bool(self.github_token and self.github_org)


settings = Settings()
