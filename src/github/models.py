from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

BLOB = "blob"
TREE = "tree"

@dataclass
class ContentEntry:
    """One item returned by the contents API (a file or a directory listing row)."""
    path: str
    type: str  # 'file', 'dir', 'symlink' or 'submodule'
    sha: str
    name: str = ""
    content: Optional[str] = None
    encoding: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ContentEntry":
        return cls(
            path=data.get("path", ""),
            type=data.get("type", ""),
            sha=data.get("sha", ""),
            name=data.get("name", ""),
            content=data.get("content"),
            encoding=data.get("encoding"),
        )

    @property
    def has_inline_content(self) -> bool:
        # Files over 1MB come back with encoding "none" and an empty body
        return self.encoding == "base64" and self.content is not None

    def base64_content(self) -> str:
        """The body as a single-line base64 string, ready to PUT back."""
        return "".join((self.content or "").split())

@dataclass
class BlobRef:
    path: str
    sha: str

@dataclass
class TreeEntry:
    path: str
    mode: str
    type: str
    sha: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "TreeEntry":
        return cls(
            path=data["path"],
            mode=data.get("mode", ""),
            type=data.get("type", ""),
            sha=data.get("sha", ""),
        )

    def to_api(self) -> Dict[str, str]:
        return {"path": self.path, "mode": self.mode, "type": self.type, "sha": self.sha}

@dataclass
class TreeSnapshot:
    sha: str
    entries: List[TreeEntry] = field(default_factory=list)
    truncated: bool = False

    @property
    def blobs(self) -> List[TreeEntry]:
        return [e for e in self.entries if e.type == BLOB]

    @property
    def directories(self) -> List[str]:
        return [e.path for e in self.entries if e.type == TREE]

@dataclass
class CommitInfo:
    sha: str
    tree_sha: str
    parent_shas: List[str] = field(default_factory=list)
    message: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "CommitInfo":
        return cls(
            sha=data["sha"],
            tree_sha=data["tree"]["sha"],
            parent_shas=[p["sha"] for p in data.get("parents", [])],
            message=data.get("message", ""),
        )

@dataclass
class BranchTip:
    """A branch resolved to its current commit and that commit's root tree."""
    branch: str
    commit_sha: str
    tree_sha: str
