"""
Capture - Objective ownership, capture progress and income.

Progress on an objective belongs to one capturing faction at a time.
A different faction starting to capture wipes the previous progress.
Reaching the threshold flips ownership and resets progress to 0.
"""

from __future__ import annotations
from dataclasses import dataclass

from .board import Board, Tile, Unit


@dataclass
class CaptureReport:
    progress: int
    captured: bool
    owner: str | None
    previous_owner: str | None


def attempt_capture(
    tile: Tile,
    unit: Unit,
    increment: int = 50,
    threshold: int = 100,
) -> CaptureReport | None:
    """
    Advance capture of tile by unit's faction, in place.

    Returns None when the tile isn't an objective or the unit's faction
    already owns it; the caller reports those as rule errors.
    """
    objective = tile.objective
    if objective is None or objective.owner == unit.faction:
        return None

    previous_owner = objective.owner
    if objective.capturing_faction != unit.faction:
        objective.capturing_faction = unit.faction
        objective.capture_progress = 0

    objective.capture_progress += increment
    if objective.capture_progress >= threshold:
        objective.owner = unit.faction
        objective.capture_progress = 0
        objective.capturing_faction = None
        return CaptureReport(0, True, unit.faction, previous_owner)

    return CaptureReport(objective.capture_progress, False, objective.owner, previous_owner)


def owned_objective_counts(board: Board) -> dict[str, int]:
    counts: dict[str, int] = {}
    for tile in board.objective_tiles():
        owner = tile.objective.owner
        if owner is not None:
            counts[owner] = counts.get(owner, 0) + 1
    return counts


def collect_income(
    board: Board,
    factions: dict,
    amount: int,
    only: str | None = None,
    intervals: int = 1,
) -> dict[str, int]:
    """
    Credit each faction amount per owned objective, intervals times.

    factions maps faction id -> FactionState and is updated in place.
    With only set, just that faction is paid. Returns what each paid
    faction received.
    """
    credited: dict[str, int] = {}
    if intervals <= 0 or amount <= 0:
        return credited
    for faction, count in owned_objective_counts(board).items():
        if only is not None and faction != only:
            continue
        if faction not in factions:
            continue
        gained = amount * count * intervals
        factions[faction].resources += gained
        credited[faction] = gained
    return credited
