"""Unit tests for the transition guards.

The guards never touch the database, so plain namespaces stand in for jobs,
milestones, proposals and cancellation records.
"""
from types import SimpleNamespace

import pytest

from core import transitions
from core.constants import (
    CancellationStatus,
    JobStatus,
    MilestoneStatus,
    ProposalStatus,
    normalize_create_status,
)
from core.exceptions import ErrorKind, TransitionError


def _job(status, category='Web Development', budget_min=1000):
    return SimpleNamespace(status=status, category=category, budget_min=budget_min)


def _cancellation(status=CancellationStatus.PENDING, initiated_by_id=1):
    return SimpleNamespace(status=status, initiated_by_id=initiated_by_id)


def _assert_rejected(call, kind, message):
    with pytest.raises(TransitionError) as excinfo:
        call()
    assert excinfo.value.kind is kind
    assert excinfo.value.message == message


class TestRegistry:
    @pytest.mark.parametrize("hint", ["DRAFT", "OPEN"])
    def test_allowed_creation_status_is_kept(self, hint):
        assert normalize_create_status(hint) == hint

    @pytest.mark.parametrize("hint", ["ACTIVE", "IN_PROGRESS", "COMPLETED", "open", "", None, 42])
    def test_anything_else_falls_back_to_draft(self, hint):
        assert normalize_create_status(hint) is JobStatus.DRAFT


class TestJobGuards:
    @pytest.mark.parametrize("status", [JobStatus.DRAFT, JobStatus.OPEN])
    def test_update_and_delete_allowed_before_hiring(self, status):
        transitions.can_update_job(_job(status))
        transitions.can_delete_job(_job(status))

    @pytest.mark.parametrize("status", [JobStatus.IN_PROGRESS, JobStatus.COMPLETED, JobStatus.CANCELLED])
    def test_update_and_delete_rejected_after_hiring(self, status):
        _assert_rejected(lambda: transitions.can_update_job(_job(status)),
                         ErrorKind.INVALID_STATE, "Can only update draft or open jobs")
        _assert_rejected(lambda: transitions.can_delete_job(_job(status)),
                         ErrorKind.INVALID_STATE, "Can only delete draft or open jobs")

    def test_publish_draft(self):
        assert transitions.can_publish_job(_job(JobStatus.DRAFT)) is None

    def test_publish_requires_draft(self):
        _assert_rejected(lambda: transitions.can_publish_job(_job(JobStatus.OPEN)),
                         ErrorKind.INVALID_STATE, "Only draft jobs can be published")

    @pytest.mark.parametrize("category,budget_min", [("", 1000), ("Web Development", None), (None, None)])
    def test_publish_requires_category_and_budget(self, category, budget_min):
        job = _job(JobStatus.DRAFT, category=category, budget_min=budget_min)
        _assert_rejected(lambda: transitions.can_publish_job(job),
                         ErrorKind.INVALID_STATE, "Job must have category and budget to be published")

    def test_zero_budget_counts_as_missing(self):
        _assert_rejected(lambda: transitions.can_publish_job(_job(JobStatus.DRAFT, budget_min=0)),
                         ErrorKind.INVALID_STATE, "Job must have category and budget to be published")

    def test_mark_completed_requires_in_progress(self):
        transitions.can_mark_completed(_job(JobStatus.IN_PROGRESS))
        _assert_rejected(lambda: transitions.can_mark_completed(_job(JobStatus.OPEN)),
                         ErrorKind.INVALID_STATE, "Contract is not active, cannot mark as completed")

    def test_approve_completion_requires_completed(self):
        transitions.can_approve_completion(_job(JobStatus.COMPLETED))
        _assert_rejected(lambda: transitions.can_approve_completion(_job(JobStatus.IN_PROGRESS)),
                         ErrorKind.INVALID_STATE, "The contract is not marked completed yet")


class TestMilestoneGuards:
    def test_submit_active_milestone_on_active_job(self):
        milestone = SimpleNamespace(status=MilestoneStatus.ACTIVE)
        transitions.can_submit_milestone(_job(JobStatus.IN_PROGRESS), milestone)

    def test_submit_checks_job_before_milestone(self):
        milestone = SimpleNamespace(status=MilestoneStatus.SUBMITTED)
        _assert_rejected(lambda: transitions.can_submit_milestone(_job(JobStatus.OPEN), milestone),
                         ErrorKind.INVALID_STATE, "Contract is not active, cannot submit milestones")

    @pytest.mark.parametrize("status", [MilestoneStatus.SUBMITTED, MilestoneStatus.COMPLETED, MilestoneStatus.CANCELLED])
    def test_submit_rejects_non_active_milestone(self, status):
        milestone = SimpleNamespace(status=status)
        _assert_rejected(lambda: transitions.can_submit_milestone(_job(JobStatus.IN_PROGRESS), milestone),
                         ErrorKind.INVALID_STATE, "Milestone is not active, cannot submit")

    def test_approve_requires_submitted(self):
        transitions.can_approve_milestone(SimpleNamespace(status=MilestoneStatus.SUBMITTED))
        _assert_rejected(lambda: transitions.can_approve_milestone(SimpleNamespace(status=MilestoneStatus.ACTIVE)),
                         ErrorKind.INVALID_STATE, "Milestone has not been submitted")


class TestCancellationGuards:
    def test_request_on_active_job_without_record(self):
        transitions.can_request_cancellation(_job(JobStatus.IN_PROGRESS), None)

    @pytest.mark.parametrize("status", [CancellationStatus.ACCEPTED, CancellationStatus.REJECTED])
    def test_request_after_answered_request(self, status):
        transitions.can_request_cancellation(_job(JobStatus.IN_PROGRESS), _cancellation(status))

    def test_request_on_inactive_job(self):
        _assert_rejected(lambda: transitions.can_request_cancellation(_job(JobStatus.OPEN), None),
                         ErrorKind.INVALID_STATE, "Only active jobs can be cancelled")

    def test_request_while_pending(self):
        _assert_rejected(lambda: transitions.can_request_cancellation(_job(JobStatus.IN_PROGRESS), _cancellation()),
                         ErrorKind.INVALID_STATE, "Cancellation already requested")

    @pytest.mark.parametrize("action", ["accept", "reject"])
    def test_respond_by_other_party(self, action):
        transitions.can_respond_cancellation(_job(JobStatus.IN_PROGRESS), _cancellation(), 2, action)

    def test_respond_without_pending_request(self):
        for cancellation in (None, _cancellation(CancellationStatus.REJECTED)):
            _assert_rejected(
                lambda: transitions.can_respond_cancellation(_job(JobStatus.IN_PROGRESS), cancellation, 2, "accept"),
                ErrorKind.INVALID_STATE, "No pending cancellation request")

    def test_respond_on_inactive_job(self):
        _assert_rejected(
            lambda: transitions.can_respond_cancellation(_job(JobStatus.CANCELLED), _cancellation(), 2, "accept"),
            ErrorKind.INVALID_STATE, "Only active jobs can be cancelled")

    def test_initiator_cannot_respond(self):
        _assert_rejected(
            lambda: transitions.can_respond_cancellation(_job(JobStatus.IN_PROGRESS), _cancellation(), 1, "accept"),
            ErrorKind.FORBIDDEN, "Initiator cannot respond to cancellation")

    @pytest.mark.parametrize("action", ["ACCEPT", "approve", "", None])
    def test_unknown_action(self, action):
        _assert_rejected(
            lambda: transitions.can_respond_cancellation(_job(JobStatus.IN_PROGRESS), _cancellation(), 2, action),
            ErrorKind.INVALID_STATE, "Action must be accept or reject")


class TestProposalGuards:
    def test_create_requires_open_job(self):
        transitions.can_create_proposal(_job(JobStatus.OPEN))
        _assert_rejected(lambda: transitions.can_create_proposal(_job(JobStatus.DRAFT)),
                         ErrorKind.INVALID_STATE, "Job is not open for proposals")

    @pytest.mark.parametrize("status", [JobStatus.DRAFT, JobStatus.IN_PROGRESS, JobStatus.COMPLETED])
    def test_accept_requires_open_job(self, status):
        _assert_rejected(lambda: transitions.can_accept_proposal(_job(status)),
                         ErrorKind.INVALID_STATE,
                         "Contract is not open for hiring. Please publish your job first.")

    @pytest.mark.parametrize("job_status", [JobStatus.OPEN, JobStatus.IN_PROGRESS])
    def test_reject_pending(self, job_status):
        proposal = SimpleNamespace(status=ProposalStatus.PENDING)
        transitions.can_reject_proposal(_job(job_status), proposal)

    @pytest.mark.parametrize("proposal_status,message", [
        (ProposalStatus.ACCEPTED, "Accepted proposals cannot be rejected"),
        (ProposalStatus.WITHDRAWN, "Withdrawn proposals cannot be rejected"),
        (ProposalStatus.REJECTED, "Proposal is already rejected"),
    ])
    def test_reject_non_pending(self, proposal_status, message):
        proposal = SimpleNamespace(status=proposal_status)
        _assert_rejected(lambda: transitions.can_reject_proposal(_job(JobStatus.OPEN), proposal),
                         ErrorKind.INVALID_STATE, message)

    def test_reject_checks_job_first(self):
        proposal = SimpleNamespace(status=ProposalStatus.ACCEPTED)
        _assert_rejected(lambda: transitions.can_reject_proposal(_job(JobStatus.COMPLETED), proposal),
                         ErrorKind.INVALID_STATE, "Job is not open for rejection")

    def test_withdraw_only_pending(self):
        transitions.can_withdraw_proposal(SimpleNamespace(status=ProposalStatus.PENDING))
        _assert_rejected(lambda: transitions.can_withdraw_proposal(SimpleNamespace(status=ProposalStatus.WITHDRAWN)),
                         ErrorKind.INVALID_STATE, "You can only withdraw pending proposals")


class TestTransitionError:
    @pytest.mark.parametrize("kind,code", [
        (ErrorKind.NOT_FOUND, 404), (ErrorKind.FORBIDDEN, 403), (ErrorKind.INVALID_STATE, 400),
    ])
    def test_status_follows_kind(self, kind, code):
        assert TransitionError(kind, "nope").status_code == code

    def test_status_override(self):
        error = TransitionError(ErrorKind.INVALID_STATE, "lost the race", status_code=409)
        assert error.status_code == 409
        assert error.kind is ErrorKind.INVALID_STATE
