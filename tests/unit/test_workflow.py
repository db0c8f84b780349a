"""Unit tests for workflow module."""

import pytest

from callboard.models import WorkflowStatus
from callboard.workflow import available_transitions, workflow_status_info

pytestmark = pytest.mark.unit


class TestWorkflowStatusInfo:
    def test_every_status_has_info(self):
        for status in WorkflowStatus:
            info = workflow_status_info(status)
            assert info.label
            assert info.color

    def test_lookup_by_value(self):
        info = workflow_status_info("offering_roles")
        assert info.label == "Offering Roles"
        assert info.color == "yellow"

    def test_unknown_status(self):
        with pytest.raises(ValueError):
            workflow_status_info("closed")

    def test_any_other_status_is_a_transition(self):
        transitions = available_transitions(WorkflowStatus.CASTING)

        assert WorkflowStatus.CASTING not in transitions
        assert len(transitions) == len(WorkflowStatus) - 1
        assert WorkflowStatus.AUDITIONING in transitions
