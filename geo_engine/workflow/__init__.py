"""
Workflow - step state machine and background run supervision.
"""

from .engine import WorkflowEngine, default_categories, merge_categories
from .steps import STEP_PROGRESS, can_transition, ensure_transition
from .supervisor import RunSupervisor

__all__ = [
    "WorkflowEngine",
    "default_categories",
    "merge_categories",
    "STEP_PROGRESS",
    "can_transition",
    "ensure_transition",
    "RunSupervisor",
]
