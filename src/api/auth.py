"""Maps the caller's session token to the GitHub identity and token stored for them.

The real profile store lives outside this service; here it is a JSON file of
the form ``{"<session token>": {"github_username": ..., "github_access_token": ...}}``.
"""
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from fastapi import HTTPException

logger = logging.getLogger(__name__)

@dataclass
class Profile:
    github_username: str
    github_access_token: Optional[str] = None

class ProfileStore:
    def __init__(self, profiles: Optional[Dict[str, Profile]] = None):
        self.profiles: Dict[str, Profile] = profiles or {}

    @classmethod
    def from_file(cls, path: Optional[str]) -> "ProfileStore":
        if not path:
            logger.warning("PROFILES_FILE not set; every request will be unauthenticated")
            return cls()
        raw = json.loads(Path(path).read_text())
        return cls({
            session: Profile(
                github_username=entry["github_username"],
                github_access_token=entry.get("github_access_token"),
            )
            for session, entry in raw.items()
        })

    def lookup(self, session_token: str) -> Optional[Profile]:
        return self.profiles.get(session_token)

def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()

def authenticate(store: ProfileStore, authorization: Optional[str]) -> Profile:
    token = bearer_token(authorization)
    profile = store.lookup(token) if token else None
    if not profile:
        raise HTTPException(status_code=401, detail="Unauthorized")
    if not profile.github_access_token:
        raise HTTPException(status_code=401, detail="GitHub token not found")
    return profile

def require_owner(profile: Profile, owner: str) -> None:
    """Operations are only allowed on repositories the caller owns."""
    if owner != profile.github_username:
        logger.warning(f"{profile.github_username} tried to access a repository owned by {owner}")
        raise HTTPException(status_code=403, detail="Unauthorized: can only access your own repositories")
