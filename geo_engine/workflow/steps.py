"""
Workflow step table.

pending -> sitemap -> content -> categories -> prompts -> execution -> completed

A step may be re-run (same step) or advance by one. Any non-terminal
step may move to failed. completed and failed are terminal.
"""

from typing import Dict

from geo_engine.errors import WorkflowError
from geo_engine.models import WorkflowStep

STEP_ORDER = (
    WorkflowStep.PENDING,
    WorkflowStep.SITEMAP,
    WorkflowStep.CONTENT,
    WorkflowStep.CATEGORIES,
    WorkflowStep.PROMPTS,
    WorkflowStep.EXECUTION,
    WorkflowStep.COMPLETED,
)

TERMINAL_STEPS = (WorkflowStep.COMPLETED, WorkflowStep.FAILED)

STEP_PROGRESS: Dict[WorkflowStep, int] = {
    WorkflowStep.PENDING: 0,
    WorkflowStep.SITEMAP: 10,
    WorkflowStep.CONTENT: 25,
    WorkflowStep.CATEGORIES: 40,
    WorkflowStep.PROMPTS: 55,
    WorkflowStep.EXECUTION: 70,
    WorkflowStep.COMPLETED: 100,
}

# Progress reported while answers are being scored, still in the execution step
ANALYSIS_PROGRESS = 85


def can_transition(current: WorkflowStep, target: WorkflowStep) -> bool:
    if current in TERMINAL_STEPS:
        return False
    if target == WorkflowStep.FAILED:
        return True
    if current == target:
        return current != WorkflowStep.PENDING
    return STEP_ORDER.index(target) == STEP_ORDER.index(current) + 1


def ensure_transition(current: WorkflowStep, target: WorkflowStep, run_id: str = None):
    if not can_transition(current, target):
        raise WorkflowError(
            f"Cannot move run from '{current.value}' to '{target.value}'",
            run_id=run_id,
            step=target.value,
        )
