"""Destination checks for batch moves.

``validate_destination`` is what the move dialog uses to grey out illegal
folders; ``find_cycle`` is the part of it the mover re-runs before touching
anything. Both go through the same code so they cannot disagree.
"""
from typing import Iterable, List, Optional

from src.operations import paths
from src.operations.models import DestinationOption, SelectedItem, Validation

SAME_AS_CURRENT = "same as current folder"
INTO_ITSELF = "cannot move folder into itself"
INTO_DESCENDANT = "cannot move folder into its descendant"

def find_cycle(selection: Iterable[SelectedItem], destination: Optional[str]) -> Optional[Validation]:
    """Returns the first selected folder the destination lies in, as a failed Validation."""
    dest = paths.normalize(destination)
    for item in selection:
        if not item.is_dir:
            continue
        folder = paths.normalize(item.path)
        if dest == folder:
            return Validation(invalid=True, reason=INTO_ITSELF)
        if paths.is_within(dest, folder):
            return Validation(invalid=True, reason=INTO_DESCENDANT)
    return None

def validate_destination(
    selection: Iterable[SelectedItem],
    destination: Optional[str],
    current_folder: Optional[str],
) -> Validation:
    if paths.normalize(destination) == paths.normalize(current_folder):
        return Validation(invalid=True, reason=SAME_AS_CURRENT)
    return find_cycle(selection, destination) or Validation(invalid=False)

def destination_options(
    folders: Iterable[str],
    selection: List[SelectedItem],
    current_folder: Optional[str],
) -> List[DestinationOption]:
    """Builds the destination picker: Root first, then every folder, illegal ones disabled."""
    current = paths.normalize(current_folder)
    options = []
    for label in [paths.ROOT_LABEL] + sorted(set(folders)):
        value = paths.from_label(label)
        check = validate_destination(selection, value, current)
        text = label
        if check.invalid:
            text = f"{label} (current)" if value == current else f"{label} ({check.reason})"
        options.append(DestinationOption(value=value, label=text, disabled=check.invalid))
    return options
