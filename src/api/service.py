from typing import List, Union

from src.api.schemas import (
    DeleteItem,
    DeleteItemsRequest,
    DeleteItemsResponse,
    DestinationOptionResponse,
    FoldersResponse,
    GetFoldersRequest,
    MoveDetailResponse,
    MoveFilesRequest,
    MoveFilesResponse,
    MoveItem,
    MoveOptionsRequest,
    MoveOptionsResponse,
)
from src.github.client import GitHubClient
from src.operations.deleter import delete_batch, prune_selection
from src.operations.folders import list_folders
from src.operations.models import MoveResult, SelectedItem
from src.operations.mover import move_batch
from src.operations.validator import destination_options

def to_selection(items: List[Union[MoveItem, DeleteItem]]) -> List[SelectedItem]:
    return [SelectedItem(path=i.path, type=i.type, sha=getattr(i, "sha", None)) for i in items]

class RepoFileService:
    """Runs one request's operation against a repository through an open client."""

    def __init__(self, client: GitHubClient, default_branch: str = "main"):
        self.client = client
        self.default_branch = default_branch

    async def move_files(self, req: MoveFilesRequest) -> MoveFilesResponse:
        result = await move_batch(self.client, to_selection(req.files), req.destination, req.branch)
        return self._to_move_response(result)

    async def delete_items(self, req: DeleteItemsRequest) -> DeleteItemsResponse:
        selection = prune_selection(to_selection(req.items))
        result = await delete_batch(self.client, selection, req.branch or self.default_branch)
        return DeleteItemsResponse(deleted=result.deleted, commit=result.commit_sha)

    async def get_folders(self, req: GetFoldersRequest) -> FoldersResponse:
        listing = await list_folders(self.client, req.ref or self.default_branch)
        return FoldersResponse(folders=listing.folders, truncated=listing.truncated)

    async def move_options(self, req: MoveOptionsRequest) -> MoveOptionsResponse:
        listing = await list_folders(self.client, req.ref or self.default_branch)
        options = destination_options(listing.folders, to_selection(req.files), req.current_path)
        return MoveOptionsResponse(
            options=[DestinationOptionResponse(value=o.value, label=o.label, disabled=o.disabled) for o in options],
            truncated=listing.truncated,
        )

    def _to_move_response(self, result: MoveResult) -> MoveFilesResponse:
        return MoveFilesResponse(
            moved=result.moved,
            skipped=result.skipped,
            details=[MoveDetailResponse(src=d.src, dest=d.dest, status=d.status) for d in result.details],
        )
