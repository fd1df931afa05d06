"""Label-based issue workflow.

This package holds:
- the derived workflow state of an issue and the transition catalogue
- the individual remote mutation steps
- the engine that runs a transition's steps in order
"""

from trish.tracking.workflow.engine import TransitionReport, WorkflowEngine
from trish.tracking.workflow.state_machine import Transition, WorkflowState, workflow_status

__all__ = [
    "Transition",
    "TransitionReport",
    "WorkflowEngine",
    "WorkflowState",
    "workflow_status",
]
