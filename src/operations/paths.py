"""Helpers for the slash-separated, root-relative paths used by the contents API.

The repository root is the empty string. Paths never start or end with '/'.
"""
from typing import Optional

ROOT_LABEL = "Root"

def normalize(path: Optional[str]) -> str:
    return (path or "").strip("/")

def parent_dir(path: str) -> str:
    """Containing folder of ``path`` ('' for top-level entries)."""
    path = normalize(path)
    return path.rsplit("/", 1)[0] if "/" in path else ""

def basename(path: str) -> str:
    return normalize(path).rsplit("/", 1)[-1]

def join(folder: str, name: str) -> str:
    folder = normalize(folder)
    return f"{folder}/{name}" if folder else name

def is_within(path: str, folder: str) -> bool:
    """True if ``path`` is strictly below ``folder``."""
    return normalize(path).startswith(normalize(folder) + "/")

def relative_to(path: str, folder: str) -> str:
    return normalize(path)[len(normalize(folder)):].lstrip("/")

def has_traversal(path: str) -> bool:
    return path.startswith("/") or ".." in path.split("/")

def from_label(label: Optional[str]) -> str:
    """Maps the folder picker's 'Root' entry back to the empty root path."""
    return "" if label == ROOT_LABEL else normalize(label)

def display(path: str) -> str:
    return normalize(path) or "root"
