# daybook/config/client_settings.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    # other env keys (server side) are ignored
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="DAYBOOK_",
        case_sensitive=False,
        extra="ignore",
    )

    api_base_url: str = "http://localhost:8000"
    request_timeout: float = 15.0

    login_path: str = "/login"
    auth_path: str = "/auth"
    logout_path: str = "/logout"

    fetch_path: str = "/getData"
    delete_path: str = "/delData"
    sort_path: str = "/sort"
    completed_path: str = "/completed"

    todo_path: str = "/todo"
    money_path: str = "/money"
    health_path: str = "/health"
    project_path: str = "/project"
    section_path: str = "/section"
    memo_path: str = "/memo"
    monthly_memo_path: str = "/monthlyMemo"
