"""
Planning module for the File Organizer.

Provides:
- Plan building: entries -> category moves with collision handling
- Plan validation
"""

from .builder import build_plan, MAX_DISAMBIGUATION_ATTEMPTS
from .validator import validate_plan

__all__ = [
    "build_plan",
    "validate_plan",
    "MAX_DISAMBIGUATION_ATTEMPTS",
]
