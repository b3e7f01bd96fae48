from pydantic_settings import BaseSettings

from .models import AppConfig


class Settings(BaseSettings):
    app_env: str = "dev"
    app_port: int = 8080
    app_host: str = "0.0.0.0"
    log_level: str = "INFO"

    github_api_url: str = "https://api.github.com"
    github_access_token: str = ""
    github_timeout_sec: float = 20.0

    # JSON object: {"myapp": {"repo": "org/myapp", "default_env": "staging"}}
    apps: dict[str, AppConfig] = {}

    ms_teams_bot_enabled: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
