import logging

from src.github.client import GitHubAPIError, GitHubClient
from src.github.refs import resolve_branch
from src.operations.errors import UpstreamError
from src.operations.models import FolderListing

logger = logging.getLogger(__name__)

async def list_folders(client: GitHubClient, ref: str) -> FolderListing:
    """All directory paths at the tip of ``ref``, sorted and de-duplicated."""
    try:
        tip = await resolve_branch(client, ref)
    except GitHubAPIError as e:
        raise UpstreamError.from_api_error(f"Failed to get branch: {e.message}", e) from e

    try:
        tree = await client.get_tree(tip.tree_sha, recursive=True)
    except GitHubAPIError as e:
        raise UpstreamError.from_api_error(f"Failed to fetch tree: {e.message}", e) from e

    folders = sorted(set(tree.directories))
    logger.info(f"Found {len(folders)} folders in {client.owner}/{client.repo}@{ref}")
    if tree.truncated:
        logger.warning("Tree was truncated - repository might have too many files")
    return FolderListing(folders=folders, truncated=tree.truncated)
