import logging
from typing import List

from src.github.client import GitHubAPIError, GitHubClient
from src.github.models import BlobRef

logger = logging.getLogger(__name__)

async def list_files(client: GitHubClient, dir_path: str, ref: str) -> List[BlobRef]:
    """Every blob below ``dir_path`` at ``ref``, depth first, in listing order.

    A directory level that cannot be fetched contributes nothing instead of
    failing the caller, so a folder move over an unreadable listing moves
    zero files. The failure is logged as a warning.
    """
    results: List[BlobRef] = []
    try:
        entries = await client.get_directory_contents(dir_path, ref)
    except GitHubAPIError as e:
        logger.warning(f"Could not list {dir_path}@{ref}, treating as empty: {e}")
        return results

    for entry in entries:
        if entry.type == "file":
            results.append(BlobRef(path=entry.path, sha=entry.sha))
        elif entry.type == "dir":
            results.extend(await list_files(client, entry.path, ref))
    return results
