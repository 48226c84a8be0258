import base64
import hashlib
import json
from typing import Dict, List, Optional

import httpx
import pytest
import pytest_asyncio

from src.github.client import GitHubClient

OWNER = "alice"
REPO = "notes"

DEFAULT_FILES = {
    "README.md": b"# notes\n",
    "a/b.txt": b"bee",
    "c/keep.txt": b"keep me",
    "docs/guide.md": b"guide",
    "docs/api/index.md": b"api index",
}

def _sha(kind: str, payload: bytes) -> str:
    return hashlib.sha1(f"{kind} {len(payload)}".encode() + b"\x00" + payload).hexdigest()

def _wrapped_b64(data: bytes) -> str:
    # The contents API wraps base64 bodies at 60 characters
    raw = base64.b64encode(data).decode()
    return "\n".join(raw[i:i + 60] for i in range(0, len(raw), 60)) + "\n"

class FakeGitHub:
    """Just enough of the GitHub contents and git data APIs, kept in memory.

    Every request is recorded in ``requests`` as ``(method, path)``.
    ``fail(method, path, status)`` makes that exact call return an error.
    """

    def __init__(self, files: Dict[str, bytes], branch: str = "main"):
        self.blobs: Dict[str, bytes] = {}
        self.trees: Dict[str, Dict[str, str]] = {}  # tree sha -> {path: blob sha}
        self.commits: Dict[str, dict] = {}
        self.refs: Dict[str, str] = {}
        self.requests: List[tuple] = []
        self.failures: Dict[tuple, int] = {}
        self.truncated = False
        self.large_paths = set()
        self.prefix = f"/repos/{OWNER}/{REPO}/"
        tree = self._store_tree({path: self._store_blob(data) for path, data in files.items()})
        self.refs[branch] = self._store_commit(tree, [], "Initial commit")

    # --- state helpers ---

    def _store_blob(self, data: bytes) -> str:
        sha = _sha("blob", data)
        self.blobs[sha] = data
        return sha

    def _store_tree(self, entries: Dict[str, str]) -> str:
        sha = _sha("tree", json.dumps(sorted(entries.items())).encode())
        self.trees[sha] = dict(entries)
        return sha

    def _store_commit(self, tree: str, parents: List[str], message: str) -> str:
        sha = _sha("commit", json.dumps([tree, parents, message, len(self.commits)]).encode())
        self.commits[sha] = {"tree": tree, "parents": parents, "message": message}
        return sha

    def tip(self, branch: str = "main") -> str:
        return self.refs[branch]

    def tree_of(self, branch: str = "main") -> Dict[str, str]:
        return self.trees[self.commits[self.tip(branch)]["tree"]]

    def files(self, branch: str = "main") -> Dict[str, bytes]:
        return {path: self.blobs[sha] for path, sha in self.tree_of(branch).items()}

    def sha_of(self, path: str, branch: str = "main") -> str:
        return self.tree_of(branch)[path]

    def _commit_change(self, branch: str, entries: Dict[str, str], message: str) -> str:
        tree = self._store_tree(entries)
        self.refs[branch] = self._store_commit(tree, [self.refs[branch]], message)
        return self.refs[branch]

    def fail(self, method: str, path: str, status: int = 500) -> None:
        self.failures[(method, self.prefix + path)] = status

    @property
    def mutations(self) -> List[tuple]:
        return [r for r in self.requests if r[0] != "GET"]

    # --- HTTP ---

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def handler(self, request: httpx.Request) -> httpx.Response:
        method, path = request.method, request.url.path
        self.requests.append((method, path))
        if (method, path) in self.failures:
            return httpx.Response(self.failures[(method, path)], json={"message": "simulated failure"})
        if not path.startswith(self.prefix):
            return httpx.Response(404, json={"message": "Not Found"})
        rest = path[len(self.prefix):]
        body = json.loads(request.content) if request.content else {}
        params = request.url.params

        if rest.startswith("contents"):
            target = rest[len("contents"):].strip("/")
            branch = params.get("ref") or body.get("branch") or "main"
            if method == "GET":
                return self._get_contents(target, branch)
            if method == "PUT":
                return self._put_contents(target, branch, body)
            if method == "DELETE":
                return self._delete_contents(target, branch, body)
        if rest.startswith("git/ref/heads/") and method == "GET":
            branch = rest[len("git/ref/heads/"):]
            if branch not in self.refs:
                return httpx.Response(404, json={"message": "Not Found"})
            return httpx.Response(200, json={"ref": f"refs/heads/{branch}", "object": {"sha": self.refs[branch]}})
        if rest.startswith("git/refs/heads/") and method == "PATCH":
            return self._update_ref(rest[len("git/refs/heads/"):], body)
        if rest.startswith("git/commits"):
            if method == "POST":
                return self._create_commit(body)
            return self._get_commit(rest.rsplit("/", 1)[-1])
        if rest.startswith("git/trees"):
            if method == "POST":
                return self._create_tree(body)
            return self._get_tree(rest.rsplit("/", 1)[-1])
        if rest.startswith("git/blobs/"):
            sha = rest.rsplit("/", 1)[-1]
            if sha not in self.blobs:
                return httpx.Response(404, json={"message": "Not Found"})
            return httpx.Response(200, json={"sha": sha, "content": _wrapped_b64(self.blobs[sha]), "encoding": "base64"})
        return httpx.Response(404, json={"message": "Not Found"})

    def _get_contents(self, target: str, branch: str) -> httpx.Response:
        if branch not in self.refs:
            return httpx.Response(404, json={"message": "No commit found for the ref"})
        tree = self.tree_of(branch)
        if target in tree:
            sha = tree[target]
            large = target in self.large_paths
            return httpx.Response(200, json={
                "type": "file",
                "path": target,
                "name": target.rsplit("/", 1)[-1],
                "sha": sha,
                "content": "" if large else _wrapped_b64(self.blobs[sha]),
                "encoding": "none" if large else "base64",
            })
        prefix = f"{target}/" if target else ""
        children = {}
        for path, sha in tree.items():
            if not path.startswith(prefix):
                continue
            head, _, tail = path[len(prefix):].partition("/")
            child = prefix + head
            if tail:
                children[child] = {"type": "dir", "path": child, "name": head, "sha": _sha("tree", child.encode())}
            else:
                children[child] = {"type": "file", "path": child, "name": head, "sha": sha}
        if not children:
            return httpx.Response(404, json={"message": "Not Found"})
        return httpx.Response(200, json=[children[k] for k in sorted(children)])

    def _put_contents(self, target: str, branch: str, body: dict) -> httpx.Response:
        tree = dict(self.tree_of(branch))
        if target in tree and body.get("sha") != tree[target]:
            if not body.get("sha"):
                return httpx.Response(422, json={"message": "Invalid request. \"sha\" wasn't supplied."})
            return httpx.Response(409, json={"message": f"{target} does not match {body['sha']}"})
        tree[target] = self._store_blob(base64.b64decode(body["content"]))
        commit = self._commit_change(branch, tree, body["message"])
        return httpx.Response(201, json={"content": {"path": target, "sha": tree[target]}, "commit": {"sha": commit}})

    def _delete_contents(self, target: str, branch: str, body: dict) -> httpx.Response:
        tree = dict(self.tree_of(branch))
        if target not in tree:
            return httpx.Response(404, json={"message": "Not Found"})
        if body.get("sha") != tree[target]:
            return httpx.Response(409, json={"message": f"{target} does not match {body.get('sha')}"})
        del tree[target]
        commit = self._commit_change(branch, tree, body["message"])
        return httpx.Response(200, json={"content": None, "commit": {"sha": commit}})

    def _get_commit(self, sha: str) -> httpx.Response:
        if sha not in self.commits:
            return httpx.Response(404, json={"message": "Not Found"})
        c = self.commits[sha]
        return httpx.Response(200, json={
            "sha": sha,
            "tree": {"sha": c["tree"]},
            "parents": [{"sha": p} for p in c["parents"]],
            "message": c["message"],
        })

    def _get_tree(self, sha: str) -> httpx.Response:
        if sha not in self.trees:
            return httpx.Response(404, json={"message": "Not Found"})
        entries = []
        dirs = set()
        for path, blob in sorted(self.trees[sha].items()):
            parts = path.split("/")
            for i in range(1, len(parts)):
                dirs.add("/".join(parts[:i]))
            entries.append({"path": path, "mode": "100644", "type": "blob", "sha": blob})
        for d in dirs:
            entries.append({"path": d, "mode": "040000", "type": "tree", "sha": _sha("tree", d.encode())})
        entries.sort(key=lambda e: e["path"])
        return httpx.Response(200, json={"sha": sha, "tree": entries, "truncated": self.truncated})

    def _create_tree(self, body: dict) -> httpx.Response:
        if "base_tree" in body:
            return httpx.Response(422, json={"message": "base_tree not supported by fake"})
        entries = {}
        for e in body["tree"]:
            if e["type"] != "blob" or e["sha"] not in self.blobs:
                return httpx.Response(422, json={"message": f"tree.sha {e['sha']} is not a valid blob"})
            entries[e["path"]] = e["sha"]
        return httpx.Response(201, json={"sha": self._store_tree(entries)})

    def _create_commit(self, body: dict) -> httpx.Response:
        if body["tree"] not in self.trees:
            return httpx.Response(422, json={"message": "Tree SHA does not exist"})
        sha = self._store_commit(body["tree"], body["parents"], body["message"])
        return httpx.Response(201, json={"sha": sha})

    def _update_ref(self, branch: str, body: dict) -> httpx.Response:
        if branch not in self.refs:
            return httpx.Response(422, json={"message": "Reference does not exist"})
        new = body["sha"]
        if new not in self.commits:
            return httpx.Response(422, json={"message": "Object does not exist"})
        if not body.get("force") and self.refs[branch] not in self.commits[new]["parents"]:
            return httpx.Response(422, json={"message": "Update is not a fast forward"})
        self.refs[branch] = new
        return httpx.Response(200, json={"ref": f"refs/heads/{branch}", "object": {"sha": new}})

@pytest.fixture
def github():
    return FakeGitHub(DEFAULT_FILES)

@pytest.fixture
def make_github():
    def _make(files: Optional[Dict[str, bytes]] = None) -> FakeGitHub:
        return FakeGitHub(files if files is not None else DEFAULT_FILES)
    return _make

@pytest_asyncio.fixture
async def gh(github):
    async with connect(github) as client:
        yield client

def connect(fake: FakeGitHub) -> GitHubClient:
    return GitHubClient(token="gh-token", owner=OWNER, repo=REPO, retry_backoff=0, transport=fake.transport())
