from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Persistence ──────────────────────────────────────────────────────────
    sqlite_db_path: str = "data/issue_templates.db"
    db_echo: bool = False
    # Prefix for every key written to the store, e.g. "issue-templates:index"
    storage_namespace: str = "issue-templates"

    # ── Logging ──────────────────────────────────────────────────────────────
    log_level: str = "INFO"
    activity_log_path: str = "logs/activity.jsonl"

    # ── Jira ─────────────────────────────────────────────────────────────────
    jira_url: str = ""                 # e.g. https://your-org.atlassian.net
    jira_username: str = ""            # service account used by applyTemplateToIssue
    jira_api_token: str = ""
    jira_timeout_seconds: float = 10.0

    # ── HTTP host ────────────────────────────────────────────────────────────
    server_host: str = "0.0.0.0"
    server_port: int = 8080

    # ── Query defaults ───────────────────────────────────────────────────────
    default_page_size: int = 50
    search_default_limit: int = 10

    # ── Development ──────────────────────────────────────────────────────────
    dry_run: bool = False

    # ── Derived helpers ──────────────────────────────────────────────────────
    @property
    def jira_base_url(self) -> str:
        return self.jira_url.rstrip("/")

    @property
    def has_jira_service_account(self) -> bool:
        return bool(self.jira_username and self.jira_api_token)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
