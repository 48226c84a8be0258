from dataclasses import dataclass, field
from typing import List, Optional

from src.github.models import TreeEntry

FILE = "file"
DIR = "dir"

MOVED = "moved"
SKIPPED = "skipped"
SKIPPED_SAME_FOLDER = "skipped (same folder)"
SKIPPED_SAME_PARENT = "skipped (same parent)"

@dataclass
class SelectedItem:
    path: str
    type: str
    sha: Optional[str] = None

    @property
    def is_dir(self) -> bool:
        return self.type == DIR

@dataclass
class Validation:
    invalid: bool
    reason: Optional[str] = None

@dataclass
class DestinationOption:
    value: str
    label: str
    disabled: bool = False

@dataclass
class MoveDetail:
    src: str
    dest: str
    status: str

@dataclass
class MoveResult:
    """Running totals for one batch move, passed through each step and returned."""
    moved: int = 0
    skipped: int = 0
    details: List[MoveDetail] = field(default_factory=list)

    def record(self, src: str, dest: str, status: str) -> None:
        if status == MOVED:
            self.moved += 1
        else:
            self.skipped += 1
        self.details.append(MoveDetail(src=src, dest=dest, status=status))

@dataclass
class DeletionPlan:
    keep: List[TreeEntry]
    removed_paths: List[str] = field(default_factory=list)
    # Selected items that matched at least one blob
    matched: List[SelectedItem] = field(default_factory=list)

@dataclass
class DeleteResult:
    deleted: int
    commit_sha: Optional[str] = None
    removed_paths: List[str] = field(default_factory=list)

@dataclass
class FolderListing:
    folders: List[str]
    truncated: bool = False
