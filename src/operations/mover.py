"""Moving files and folders with the single-file contents API.

GitHub has no rename, so each file is copied to its new path and the old
path deleted afterwards, one commit per step. Moves are therefore not atomic
across files: a failure part way through a batch leaves the earlier files
moved and reports them through ``MoveAbortedError``.
"""
import logging
from typing import List, Optional

from src.github.client import GitHubAPIError, GitHubClient
from src.operations import paths
from src.operations.errors import InvalidDestinationError, MoveAbortedError, RepoOperationError, UpstreamError
from src.operations.lister import list_files
from src.operations.models import (
    MOVED,
    SKIPPED,
    SKIPPED_SAME_FOLDER,
    SKIPPED_SAME_PARENT,
    MoveResult,
    SelectedItem,
)
from src.operations.validator import find_cycle

logger = logging.getLogger(__name__)

async def move_one(
    client: GitHubClient,
    src_path: str,
    src_sha: Optional[str],
    dest_path: str,
    branch: str,
) -> str:
    """Copy ``src_path`` to ``dest_path`` then delete the source.

    The source is only deleted once the destination write has succeeded, so
    a failure in between leaves two copies rather than none.
    """
    if src_path == dest_path:
        logger.info(f"Skipping no-op move for {src_path}")
        return SKIPPED

    try:
        source = await client.get_file_contents(src_path, branch)
        content = source.base64_content()
        if not source.has_inline_content:
            content = await client.get_blob_base64(source.sha)
    except GitHubAPIError as e:
        raise UpstreamError.from_api_error(f"Failed to fetch source content for {src_path}", e) from e

    try:
        existing_sha = await client.find_file_sha(dest_path, branch)
        await client.put_file(
            dest_path,
            content,
            message=f"Move {src_path} to {dest_path}",
            branch=branch,
            sha=existing_sha,
        )
    except GitHubAPIError as e:
        raise UpstreamError.from_api_error(f"Failed to create {dest_path}: {e.message}", e) from e

    try:
        await client.delete_file(
            src_path,
            sha=src_sha or source.sha,
            message=f"Delete old file {src_path}",
            branch=branch,
        )
    except GitHubAPIError as e:
        raise UpstreamError.from_api_error(f"Failed to delete {src_path}: {e.message}", e) from e

    return MOVED

async def move_batch(
    client: GitHubClient,
    selection: List[SelectedItem],
    destination: Optional[str],
    branch: str,
) -> MoveResult:
    dest = paths.normalize(destination)

    for item in selection:
        cycle = find_cycle([item], dest)
        if cycle:
            logger.error(f"Invalid move: cannot move {item.path} into itself or descendant {dest}")
            raise InvalidDestinationError(
                f'Cannot move folder "{item.path}" into itself or its descendant "{dest}"',
                details=[cycle.reason],
            )

    logger.info(f"Moving {len(selection)} items to {paths.display(dest)} on {branch}")
    result = MoveResult()
    try:
        for item in selection:
            await _move_item(client, item, dest, branch, result)
    except RepoOperationError as e:
        logger.error(f"Move aborted after {result.moved} moved, {result.skipped} skipped: {e.message}")
        raise MoveAbortedError(e, result) from e

    logger.info(f"Move complete: {result.moved} moved, {result.skipped} skipped")
    return result

async def _move_item(client: GitHubClient, item: SelectedItem, dest: str, branch: str, result: MoveResult) -> None:
    path = paths.normalize(item.path)

    if dest == paths.parent_dir(path):
        status = SKIPPED_SAME_PARENT if item.is_dir else SKIPPED_SAME_FOLDER
        logger.info(f"Skipping {path}, already in {paths.display(dest)}")
        result.record(path, paths.display(dest), status)
        return

    if not item.is_dir:
        new_path = paths.join(dest, paths.basename(path))
        status = await move_one(client, path, item.sha, new_path, branch)
        result.record(path, new_path, status)
        return

    target_dir = paths.join(dest, paths.basename(path))
    files = await list_files(client, path, branch)
    logger.info(f"Moving directory {path} with {len(files)} files to {target_dir}")
    for blob in files:
        new_path = paths.join(target_dir, paths.relative_to(blob.path, path))
        status = await move_one(client, blob.path, blob.sha, new_path, branch)
        result.record(blob.path, new_path, status)
