from typing import Optional

import httpx
from fastapi import Depends, FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api.auth import Profile, ProfileStore, authenticate, require_owner
from src.api.config import Settings
from src.api.schemas import (
    DeleteItemsRequest,
    DeleteItemsResponse,
    ErrorResponse,
    FoldersResponse,
    GetFoldersRequest,
    MoveFilesRequest,
    MoveFilesResponse,
    MoveOptionsRequest,
    MoveOptionsResponse,
)
from src.api.service import RepoFileService
from src.github.client import GitHubClient
from src.operations.errors import RepoOperationError

import logging

settings = Settings.from_env()

# Configure Logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Repository File Manager API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

profile_store = ProfileStore.from_file(settings.profiles_file)

def get_profile_store() -> ProfileStore:
    return profile_store

def get_profile(
    authorization: Optional[str] = Header(default=None),
    store: ProfileStore = Depends(get_profile_store),
) -> Profile:
    return authenticate(store, authorization)

def get_transport() -> Optional[httpx.AsyncBaseTransport]:
    """Transport for outbound GitHub calls; None means the default network transport."""
    return None

def open_client(profile: Profile, owner: str, repo: str, transport: Optional[httpx.AsyncBaseTransport]) -> GitHubClient:
    return GitHubClient(
        token=profile.github_access_token,
        owner=owner,
        repo=repo,
        base_url=settings.github_api_url,
        user_agent=settings.github_user_agent,
        timeout=settings.github_timeout,
        max_retries=settings.github_max_retries,
        retry_backoff=settings.github_retry_backoff,
        transport=transport,
    )

# --- Error responses: always {"error": ..., "details"?: [...]} ---

def _error_body(error: str, details=None) -> dict:
    body = {"error": error}
    if details:
        body["details"] = details
    return body

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = []
    for err in exc.errors():
        loc = [str(part) for part in err["loc"] if part != "body"]
        details.append(f"{'.'.join(loc)}: {err['msg']}")
    return JSONResponse(status_code=400, content=_error_body("Invalid input", details))

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content=_error_body(str(exc.detail)))

@app.exception_handler(RepoOperationError)
async def operation_error_handler(request: Request, exc: RepoOperationError):
    logger.error(f"{request.url.path} failed ({exc.status_code}): {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message, exc.details))

# --- Routes ---

ERROR_RESPONSES = {code: {"model": ErrorResponse} for code in (400, 401, 403, 500)}

@app.post("/api/move-files", response_model=MoveFilesResponse, responses=ERROR_RESPONSES)
async def move_files(
    req: MoveFilesRequest,
    profile: Profile = Depends(get_profile),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_transport),
):
    """Move files and folders to one destination folder (one commit per file)."""
    require_owner(profile, req.owner)
    async with open_client(profile, req.owner, req.repo, transport) as client:
        return await RepoFileService(client, settings.default_branch).move_files(req)

@app.post("/api/delete-items", response_model=DeleteItemsResponse, responses=ERROR_RESPONSES)
async def delete_items(
    req: DeleteItemsRequest,
    profile: Profile = Depends(get_profile),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_transport),
):
    """Delete files and folders in a single commit."""
    require_owner(profile, req.owner)
    async with open_client(profile, req.owner, req.repo, transport) as client:
        return await RepoFileService(client, settings.default_branch).delete_items(req)

@app.post("/api/repo-folders", response_model=FoldersResponse, responses=ERROR_RESPONSES)
async def repo_folders(
    req: GetFoldersRequest,
    profile: Profile = Depends(get_profile),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_transport),
):
    require_owner(profile, req.owner)
    async with open_client(profile, req.owner, req.repo, transport) as client:
        return await RepoFileService(client, settings.default_branch).get_folders(req)

@app.post("/api/move-options", response_model=MoveOptionsResponse, responses=ERROR_RESPONSES)
async def move_options(
    req: MoveOptionsRequest,
    profile: Profile = Depends(get_profile),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_transport),
):
    """Destination folders for a move, with illegal choices disabled."""
    require_owner(profile, req.owner)
    async with open_client(profile, req.owner, req.repo, transport) as client:
        return await RepoFileService(client, settings.default_branch).move_options(req)

@app.get("/health")
def health_check():
    return {"status": "ok"}
