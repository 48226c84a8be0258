from typing import List, Literal, Optional
from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

from src.operations.paths import has_traversal

OWNER_PATTERN = r"^[a-zA-Z0-9-]+$"
REPO_PATTERN = r"^[a-zA-Z0-9._-]+$"

class RepoRequest(BaseModel):
    owner: str = Field(min_length=1, max_length=39, pattern=OWNER_PATTERN)
    repo: str = Field(min_length=1, max_length=100, pattern=REPO_PATTERN)

def _check_path(path: str) -> str:
    if has_traversal(path):
        raise ValueError("Path traversal not allowed")
    return path

class MoveItem(BaseModel):
    path: str = Field(min_length=1, max_length=4096)
    # Blob sha; the UI sends it as "sha", older callers as "identifier"
    sha: Optional[str] = Field(default=None, validation_alias=AliasChoices("sha", "identifier"))
    type: Literal["file", "dir"]

    @field_validator("path")
    @classmethod
    def path_inside_repo(cls, v: str) -> str:
        return _check_path(v)

    @model_validator(mode="after")
    def file_needs_sha(self):
        if self.type == "file" and not self.sha:
            raise ValueError("sha is required for files")
        return self

class DeleteItem(BaseModel):
    path: str = Field(min_length=1, max_length=4096)
    type: Literal["file", "dir"]

    @field_validator("path")
    @classmethod
    def path_inside_repo(cls, v: str) -> str:
        return _check_path(v)

class MoveFilesRequest(RepoRequest):
    files: List[MoveItem] = Field(min_length=1)
    destination: str = ""
    branch: str = Field(default="main", min_length=1, max_length=255)

    @field_validator("destination")
    @classmethod
    def destination_inside_repo(cls, v: str) -> str:
        if ".." in v.split("/"):
            raise ValueError("Path traversal not allowed")
        return v

class DeleteItemsRequest(RepoRequest):
    branch: Optional[str] = Field(default=None, min_length=1, max_length=255)
    items: List[DeleteItem] = Field(min_length=1)

class GetFoldersRequest(RepoRequest):
    ref: Optional[str] = Field(default=None, min_length=1, max_length=255)

class MoveOptionsRequest(GetFoldersRequest):
    files: List[MoveItem] = Field(min_length=1)
    current_path: str = Field(default="", validation_alias=AliasChoices("current_path", "currentPath"))

class MoveDetailResponse(BaseModel):
    src: str
    dest: str
    status: str

class MoveFilesResponse(BaseModel):
    success: bool = True
    moved: int
    skipped: int
    details: List[MoveDetailResponse]

class DeleteItemsResponse(BaseModel):
    success: bool = True
    deleted: int
    commit: Optional[str] = None

class FoldersResponse(BaseModel):
    folders: List[str]
    truncated: bool = False

class DestinationOptionResponse(BaseModel):
    value: str
    label: str
    disabled: bool

class MoveOptionsResponse(BaseModel):
    options: List[DestinationOptionResponse]
    truncated: bool = False

class ErrorResponse(BaseModel):
    error: str
    details: Optional[List[str]] = None
