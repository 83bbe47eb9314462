from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # App
    app_name: str = "Reel Resolver"
    app_host: str = "0.0.0.0"
    app_port: int = 5000
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    # Strategy chain
    strategy_timeout_seconds: float = 20.0
    strategy_grace_seconds: float = 1.0
    strategy_order: List[str] = ["structured_query", "scrape", "direct_fetch", "relay"]

    # Browser identity (bare requests get rejected upstream)
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
    )
    accept_language: str = "en-US,en;q=0.9"

    # Instagram
    target_base_url: str = "https://www.instagram.com"
    ig_app_id: str = "936619743392459"
    graphql_query_hash: str = "b3055c01b9479c0110c9a45a5e7d5c0d"
    media_domains: List[str] = ["cdninstagram.com", "fbcdn.net"]

    # Third-party relay (RapidAPI style); disabled without a key
    relay_host: str = "instagram-downloader-download-instagram-videos-stories.p.rapidapi.com"
    relay_endpoint: str = "https://instagram-downloader-download-instagram-videos-stories.p.rapidapi.com/index"
    relay_api_key: Optional[str] = None


settings = Settings()
