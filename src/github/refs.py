from src.github.client import GitHubClient
from src.github.models import BranchTip

async def resolve_branch(client: GitHubClient, branch: str) -> BranchTip:
    """Resolves a branch name to its tip commit and that commit's root tree."""
    commit_sha = await client.get_branch_ref(branch)
    commit = await client.get_commit(commit_sha)
    return BranchTip(branch=branch, commit_sha=commit_sha, tree_sha=commit.tree_sha)
