import asyncio
import logging
from typing import Any, Dict, List, Optional

from urllib.parse import quote

import httpx

from src.github.models import CommitInfo, ContentEntry, TreeEntry, TreeSnapshot

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.github.com"
RETRYABLE_STATUS = {500, 502, 503, 504}

class GitHubAPIError(Exception):
    """A GitHub call that came back with a non-success status (or never came back)."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"GitHub API error ({status_code}): {message}")
        self.status_code = status_code
        self.message = message

    @property
    def not_found(self) -> bool:
        return self.status_code == 404

class GitHubClient:
    """Async client for the slice of the GitHub REST API this service needs.

    One instance is bound to a single repository and access token and lives
    for one inbound request. Use it as an async context manager so the
    underlying connection pool is closed when the request finishes.
    """

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        base_url: str = DEFAULT_BASE_URL,
        user_agent: str = "RepoPush",
        timeout: float = 30.0,
        max_retries: int = 2,
        retry_backoff: float = 0.5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.owner = owner
        self.repo = repo
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github.v3+json",
                "User-Agent": user_agent,
            },
            timeout=httpx.Timeout(timeout, connect=10.0),
            transport=transport,
        )

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    @property
    def repo_path(self) -> str:
        return f"/repos/{self.owner}/{self.repo}"

    def _contents_url(self, path: str) -> str:
        # File names may contain "#", "?" or "%", which must not leak into the URL syntax
        return f"{self.repo_path}/contents/{quote(path, safe='/')}"

    async def _request(
        self,
        method: str,
        path: str,
        json_data: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Send one request, retrying rate limits and (for reads) transient failures."""
        attempt = 0
        while True:
            try:
                response = await self._http.request(method, path, json=json_data, params=params)
            except httpx.TransportError as e:
                if method == "GET" and attempt < self.max_retries:
                    await self._backoff(attempt, method, path, str(e))
                    attempt += 1
                    continue
                logger.error(f"GitHub {method} {path} failed: {e}")
                raise GitHubAPIError(500, f"request error: {e}") from e

            if response.is_success:
                return response.json() if response.content else {}

            retryable = response.status_code == 429 or (
                method == "GET" and response.status_code in RETRYABLE_STATUS
            )
            if retryable and attempt < self.max_retries:
                await self._backoff(attempt, method, path, f"status {response.status_code}")
                attempt += 1
                continue

            raise GitHubAPIError(response.status_code, _error_message(response))

    async def _backoff(self, attempt: int, method: str, path: str, reason: str) -> None:
        delay = self.retry_backoff * (2 ** attempt)
        logger.warning(f"Retrying GitHub {method} {path} in {delay:.2f}s ({reason})")
        await asyncio.sleep(delay)

    # ===== Contents API =====

    async def get_directory_contents(self, path: str, ref: str) -> List[ContentEntry]:
        data = await self._request("GET", self._contents_url(path), params={"ref": ref})
        if isinstance(data, dict):
            # The path named a file rather than a directory
            return [ContentEntry.from_api(data)]
        return [ContentEntry.from_api(item) for item in data]

    async def get_file_contents(self, path: str, ref: str) -> ContentEntry:
        data = await self._request("GET", self._contents_url(path), params={"ref": ref})
        if isinstance(data, list):
            raise GitHubAPIError(422, f"{path} is a directory")
        return ContentEntry.from_api(data)

    async def find_file_sha(self, path: str, ref: str) -> Optional[str]:
        """Return the blob sha at ``path``, or None when nothing is there."""
        try:
            entry = await self.get_file_contents(path, ref)
        except GitHubAPIError as e:
            if e.not_found:
                return None
            raise
        return entry.sha

    async def put_file(
        self,
        path: str,
        content_b64: str,
        message: str,
        branch: str,
        sha: Optional[str] = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"message": message, "content": content_b64, "branch": branch}
        if sha:
            body["sha"] = sha
        return await self._request("PUT", self._contents_url(path), json_data=body)

    async def delete_file(self, path: str, sha: str, message: str, branch: str) -> Dict[str, Any]:
        body = {"message": message, "sha": sha, "branch": branch}
        return await self._request("DELETE", self._contents_url(path), json_data=body)

    # ===== Git data API =====

    async def get_blob_base64(self, sha: str) -> str:
        data = await self._request("GET", f"{self.repo_path}/git/blobs/{sha}")
        return "".join(data.get("content", "").split())

    async def get_branch_ref(self, branch: str) -> str:
        """Return the commit sha the branch points at."""
        data = await self._request("GET", f"{self.repo_path}/git/ref/heads/{quote(branch, safe='/')}")
        return data["object"]["sha"]

    async def get_commit(self, sha: str) -> CommitInfo:
        data = await self._request("GET", f"{self.repo_path}/git/commits/{sha}")
        return CommitInfo.from_api(data)

    async def get_tree(self, sha: str, recursive: bool = True) -> TreeSnapshot:
        params = {"recursive": "1"} if recursive else None
        data = await self._request("GET", f"{self.repo_path}/git/trees/{sha}", params=params)
        return TreeSnapshot(
            sha=data.get("sha", sha),
            entries=[TreeEntry.from_api(e) for e in data.get("tree", [])],
            truncated=bool(data.get("truncated", False)),
        )

    async def create_tree(self, entries: List[TreeEntry]) -> str:
        data = await self._request(
            "POST", f"{self.repo_path}/git/trees", json_data={"tree": [e.to_api() for e in entries]}
        )
        return data["sha"]

    async def create_commit(self, message: str, tree_sha: str, parent_shas: List[str]) -> str:
        body = {"message": message, "tree": tree_sha, "parents": parent_shas}
        data = await self._request("POST", f"{self.repo_path}/git/commits", json_data=body)
        return data["sha"]

    async def update_ref(self, branch: str, sha: str, force: bool = False) -> Dict[str, Any]:
        return await self._request(
            "PATCH",
            f"{self.repo_path}/git/refs/heads/{quote(branch, safe='/')}",
            json_data={"sha": sha, "force": force},
        )

def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(payload, dict) and payload.get("message"):
        return payload["message"]
    return response.text
