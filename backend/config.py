"""Application configuration"""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # API settings
    api_port: int = 8080
    api_host: str = "127.0.0.1"
    log_level: str = "warning"

    # GitHub settings
    github_token: str = ""  # Empty = unauthenticated (60 req/hour)
    github_timeout: float = 10.0
    sponsors_fallback_url: str = "https://github-sponsors.as93.workers.dev"

    # Badge rendering
    footer_text: str = ""  # Default footer for every badge, "none" hides it
    avatar_fetch_timeout: float = 5.0  # One slow avatar must not stall the render

    class Config:
        env_file = ".env"

settings = Settings()
