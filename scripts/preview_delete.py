import asyncio
import os
import sys

from src.github.client import GitHubAPIError, GitHubClient
from src.github.refs import resolve_branch
from src.operations.deleter import commit_message, plan_deletion, prune_selection
from src.operations.models import SelectedItem

USAGE = "usage: python -m scripts.preview_delete OWNER/REPO BRANCH PATH[/] ..."

def parse_selection(args):
    # A trailing slash marks a folder
    return [
        SelectedItem(path=a.rstrip("/"), type="dir" if a.endswith("/") else "file")
        for a in args
    ]

async def preview(owner, repo, branch, selection):
    token = os.getenv("GITHUB_TOKEN")
    if not token:
        print("GITHUB_TOKEN is not set.")
        return

    async with GitHubClient(token=token, owner=owner, repo=repo,
                            base_url=os.getenv("GITHUB_API_URL", "https://api.github.com")) as client:
        tip = await resolve_branch(client, branch)
        print(f"{branch} is at {tip.commit_sha[:7]} (tree {tip.tree_sha[:7]})")
        tree = await client.get_tree(tip.tree_sha, recursive=True)

    if tree.truncated:
        print("Tree is truncated; a batch delete would be refused.")
        return

    plan = plan_deletion(tree, selection)
    print(f"\nWould commit: {commit_message(selection)}")
    print(f"Removes {len(plan.removed_paths)} files, keeps {len(plan.keep)}:")
    for path in plan.removed_paths:
        print(f"- {path}")

def main():
    if len(sys.argv) < 4 or "/" not in sys.argv[1]:
        print(USAGE)
        return
    owner, repo = sys.argv[1].split("/", 1)
    selection = prune_selection(parse_selection(sys.argv[3:]))
    try:
        asyncio.run(preview(owner, repo, sys.argv[2], selection))
    except GitHubAPIError as e:
        print(f"GitHub error {e.status_code}: {e.message}")

if __name__ == "__main__":
    main()
