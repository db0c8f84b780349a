"""Workflow status lookup for productions.

This module is the single source of truth for how a production stage is
labelled and coloured across calendar headers and exports.
"""

from __future__ import annotations

from dataclasses import dataclass

from .models import WorkflowStatus


@dataclass(frozen=True)
class WorkflowStatusInfo:
    """Display information for a workflow status."""

    label: str
    color: str
    description: str


_STATUS_INFO: dict[WorkflowStatus, WorkflowStatusInfo] = {
    WorkflowStatus.AUDITIONING: WorkflowStatusInfo(
        label="Auditioning",
        color="blue",
        description="Accepting audition signups and scheduling slots",
    ),
    WorkflowStatus.CASTING: WorkflowStatusInfo(
        label="Casting",
        color="purple",
        description="Reviewing auditions and making casting decisions",
    ),
    WorkflowStatus.OFFERING_ROLES: WorkflowStatusInfo(
        label="Offering Roles",
        color="yellow",
        description="Sending casting offers and awaiting responses",
    ),
    WorkflowStatus.REHEARSING: WorkflowStatusInfo(
        label="Rehearsing",
        color="green",
        description="Production in rehearsal phase",
    ),
    WorkflowStatus.PERFORMING: WorkflowStatusInfo(
        label="Performing",
        color="red",
        description="Show is currently running",
    ),
    WorkflowStatus.COMPLETED: WorkflowStatusInfo(
        label="Completed",
        color="gray",
        description="Production has finished",
    ),
}


def workflow_status_info(status: WorkflowStatus | str) -> WorkflowStatusInfo:
    """Look up label, colour and description for a status.

    Raises:
        ValueError: if ``status`` is not a known workflow status
    """
    return _STATUS_INFO[WorkflowStatus(status)]


def available_transitions(status: WorkflowStatus | str) -> list[WorkflowStatus]:
    """Statuses a production can move to from ``status``.

    Stages are labels, not an enforced state machine: any other status is allowed.
    """
    current = WorkflowStatus(status)
    return [candidate for candidate in WorkflowStatus if candidate is not current]
