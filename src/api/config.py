import os
from dataclasses import dataclass, field
from typing import List, Optional

def _origins(raw: str) -> List[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]

@dataclass
class Settings:
    github_api_url: str = "https://api.github.com"
    github_user_agent: str = "RepoPush"
    github_timeout: float = 30.0
    github_max_retries: int = 2
    github_retry_backoff: float = 0.5
    default_branch: str = "main"
    # In production, set ALLOWED_ORIGINS to a comma-separated list of domains
    allowed_origins: List[str] = field(default_factory=lambda: ["*"])
    profiles_file: Optional[str] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            github_api_url=os.getenv("GITHUB_API_URL", "https://api.github.com"),
            github_user_agent=os.getenv("GITHUB_USER_AGENT", "RepoPush"),
            github_timeout=float(os.getenv("GITHUB_TIMEOUT", "30")),
            github_max_retries=int(os.getenv("GITHUB_MAX_RETRIES", "2")),
            github_retry_backoff=float(os.getenv("GITHUB_RETRY_BACKOFF", "0.5")),
            default_branch=os.getenv("DEFAULT_BRANCH", "main"),
            allowed_origins=_origins(os.getenv("ALLOWED_ORIGINS", "*")),
            profiles_file=os.getenv("PROFILES_FILE"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
