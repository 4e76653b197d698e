"""
Exception types for the File Organizer.

Fatal errors abort the command before anything on disk is touched.
Action errors describe a single failed move and are recorded in the
execution report instead of being propagated.
"""


class OrganizerError(Exception):
    """Base error for the project."""


class FatalError(OrganizerError):
    """An error that aborts the whole command."""


class RootNotFoundError(FatalError):
    pass


class RootNotADirectoryError(FatalError):
    pass


class RootPermissionError(FatalError):
    pass


class CollisionUnresolvedError(FatalError):
    """No free disambiguated name was found for a destination."""


class PlanValidationError(FatalError):
    pass


class ActionError(OrganizerError):
    """A single move failed; the run continues."""


class MoveFailedError(ActionError):
    pass


class CrossDeviceVerificationError(ActionError):
    """The copied file did not match its source, so the source was kept."""
