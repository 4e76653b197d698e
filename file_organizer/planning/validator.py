"""
Plan validation for the File Organizer.

Checks that a plan is safe before anything is executed.
"""

from pathlib import Path

from ..errors import PlanValidationError
from ..models import MoveAction
from ..utils import print_warning


def validate_plan(actions: list[MoveAction], destination_root: Path) -> list[MoveAction]:
    """
    Validate a move plan before applying it.

    Checks for:
    - No-op moves (same source and destination)
    - Destinations outside their category folder under the destination root
    - Destination collisions

    No-op moves are dropped with a warning; everything else is a hard
    failure because it would mean the planner produced a broken plan.

    Args:
        actions: The planned moves.
        destination_root: The folder the plan was built for.

    Returns:
        The list of valid moves, in the original order.

    Raises:
        PlanValidationError: If the plan cannot be executed safely.
    """
    destination_root = Path(destination_root)
    destinations: dict[Path, Path] = {}  # destination -> source
    collisions = []
    outside = []
    noops = 0
    valid = []

    for action in actions:
        if action.source == action.destination:
            noops += 1
            continue

        if action.destination.parent != destination_root / action.category:
            outside.append(f"{action.source} -> {action.destination}")
            continue

        if action.destination in destinations:
            collisions.append(
                f"'{destinations[action.destination]}' and '{action.source}' "
                f"both target '{action.destination}'"
            )
            continue

        destinations[action.destination] = action.source
        valid.append(action)

    if noops:
        print_warning(f"Dropped {noops} no-op moves from the plan")

    problems = [f"Collision: {c}" for c in collisions]
    problems += [f"Outside category folder: {o}" for o in outside]
    if problems:
        raise PlanValidationError(
            "Plan failed validation:\n" + "\n".join(f"  - {p}" for p in problems)
        )

    return valid
