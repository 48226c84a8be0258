"""Deleting many files and folders in one commit.

The branch tip's tree is fetched in full, the selected paths are filtered
out, and the remainder is submitted as a brand new tree. A commit on top of
the old tip is created for it and the branch ref is moved last, so until
that final PATCH nothing about the branch has changed.
"""
import logging
from typing import Callable, List

from src.github.client import GitHubAPIError, GitHubClient
from src.github.models import BLOB, TreeSnapshot
from src.operations import paths
from src.operations.errors import UpstreamError
from src.operations.models import DeleteResult, DeletionPlan, SelectedItem

logger = logging.getLogger(__name__)

SUMMARY_LIMIT = 10

def prune_selection(selection: List[SelectedItem]) -> List[SelectedItem]:
    """Drops selected files that already sit inside a selected folder."""
    dirs = [paths.normalize(i.path) for i in selection if i.is_dir]
    return [
        i for i in selection
        if i.is_dir or not any(paths.is_within(i.path, d) for d in dirs)
    ]

def exclusion_test(selection: List[SelectedItem]) -> Callable[[str], bool]:
    dir_prefixes = [paths.normalize(i.path) + "/" for i in selection if i.is_dir]
    file_paths = {paths.normalize(i.path) for i in selection if not i.is_dir}

    def excluded(path: str) -> bool:
        return path in file_paths or any(path.startswith(p) for p in dir_prefixes)

    return excluded

def plan_deletion(tree: TreeSnapshot, selection: List[SelectedItem]) -> DeletionPlan:
    """Splits the tree's blobs into those to keep and those the selection removes.

    Non-blob entries are dropped: the new tree is rebuilt from the flat blob
    list, and GitHub recreates intermediate directories from the paths.
    """
    excluded = exclusion_test(selection)
    plan = DeletionPlan(keep=[])
    for entry in tree.entries:
        if entry.type != BLOB:
            continue
        if excluded(entry.path):
            plan.removed_paths.append(entry.path)
        else:
            plan.keep.append(entry)
    for item in selection:
        matches = exclusion_test([item])
        if any(matches(p) for p in plan.removed_paths):
            plan.matched.append(item)
    return plan

def commit_message(selection: List[SelectedItem]) -> str:
    summary = ", ".join(f"{i.type}:{i.path}" for i in selection[:SUMMARY_LIMIT])
    ellipsis = "…" if len(selection) > SUMMARY_LIMIT else ""
    return f"Batch delete {len(selection)} item(s): {summary}{ellipsis}"

async def delete_batch(client: GitHubClient, selection: List[SelectedItem], branch: str) -> DeleteResult:
    logger.info(f"Batch delete on {client.owner}/{client.repo} ({branch}) for {len(selection)} items")

    try:
        tip_sha = await client.get_branch_ref(branch)
    except GitHubAPIError as e:
        logger.error(f"Failed to get branch reference: {e}")
        raise UpstreamError.from_api_error("Failed to get branch reference", e) from e

    try:
        tip = await client.get_commit(tip_sha)
    except GitHubAPIError as e:
        logger.error(f"Failed to get commit: {e}")
        raise UpstreamError.from_api_error("Failed to get commit", e) from e

    try:
        tree = await client.get_tree(tip.tree_sha, recursive=True)
    except GitHubAPIError as e:
        logger.error(f"Failed to get tree: {e}")
        raise UpstreamError.from_api_error("Failed to get tree", e) from e

    if tree.truncated:
        logger.error(f"Tree {tree.sha} is truncated, refusing to rewrite it")
        raise UpstreamError("Repository tree is too large to rewrite in one commit", status_code=502)

    plan = plan_deletion(tree, selection)
    if not plan.removed_paths:
        logger.info("Nothing to delete, selected paths are already absent")
        return DeleteResult(deleted=0)

    try:
        new_tree_sha = await client.create_tree(plan.keep)
    except GitHubAPIError as e:
        logger.error(f"Failed to create new tree: {e}")
        raise UpstreamError.from_api_error("Failed to create new tree", e) from e

    try:
        new_commit_sha = await client.create_commit(commit_message(selection), new_tree_sha, [tip_sha])
    except GitHubAPIError as e:
        logger.error(f"Failed to create commit: {e}")
        raise UpstreamError.from_api_error("Failed to create commit", e) from e

    try:
        await client.update_ref(branch, new_commit_sha)
    except GitHubAPIError as e:
        logger.error(f"Failed to update reference: {e}")
        raise UpstreamError.from_api_error("Failed to update branch", e) from e

    logger.info(f"Batch delete succeeded: {len(plan.removed_paths)} files removed in {new_commit_sha[:7]}")
    return DeleteResult(deleted=len(plan.matched), commit_sha=new_commit_sha, removed_paths=plan.removed_paths)
