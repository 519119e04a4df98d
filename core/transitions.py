"""Transition guards for jobs, milestones and proposals.

Each guard inspects the current state of the entities it is given and raises
a ``TransitionError`` when the requested transition is not allowed. Guards
never touch the database and never mutate what they are passed, so callers
must run them against freshly loaded (and, for writes, locked) rows.
"""
from core.constants import (
    CANCELLATION_ACTIONS,
    JOB_EDITABLE_STATUSES,
    CancellationStatus,
    JobStatus,
    MilestoneStatus,
    ProposalStatus,
)
from core.exceptions import forbidden, invalid_state


def can_update_job(job):
    if job.status not in JOB_EDITABLE_STATUSES:
        raise invalid_state("Can only update draft or open jobs")


def can_publish_job(job):
    if job.status != JobStatus.DRAFT:
        raise invalid_state("Only draft jobs can be published")
    if not job.category or not job.budget_min:
        raise invalid_state("Job must have category and budget to be published")


def can_delete_job(job):
    if job.status not in JOB_EDITABLE_STATUSES:
        raise invalid_state("Can only delete draft or open jobs")


def can_mark_completed(job):
    if job.status != JobStatus.IN_PROGRESS:
        raise invalid_state("Contract is not active, cannot mark as completed")


def can_approve_completion(job):
    if job.status != JobStatus.COMPLETED:
        raise invalid_state("The contract is not marked completed yet")


def can_submit_milestone(job, milestone):
    if job.status != JobStatus.IN_PROGRESS:
        raise invalid_state("Contract is not active, cannot submit milestones")
    if milestone.status != MilestoneStatus.ACTIVE:
        raise invalid_state("Milestone is not active, cannot submit")


def can_approve_milestone(milestone):
    if milestone.status != MilestoneStatus.SUBMITTED:
        raise invalid_state("Milestone has not been submitted")


def can_request_cancellation(job, cancellation):
    if job.status != JobStatus.IN_PROGRESS:
        raise invalid_state("Only active jobs can be cancelled")
    if cancellation is not None and cancellation.status == CancellationStatus.PENDING:
        raise invalid_state("Cancellation already requested")


def can_respond_cancellation(job, cancellation, actor_id, action):
    if job.status != JobStatus.IN_PROGRESS:
        raise invalid_state("Only active jobs can be cancelled")
    if cancellation is None or cancellation.status != CancellationStatus.PENDING:
        raise invalid_state("No pending cancellation request")
    if cancellation.initiated_by_id == actor_id:
        raise forbidden("Initiator cannot respond to cancellation")
    if action not in CANCELLATION_ACTIONS:
        raise invalid_state("Action must be accept or reject")


def can_create_proposal(job):
    if job.status != JobStatus.OPEN:
        raise invalid_state("Job is not open for proposals")


def can_accept_proposal(job):
    if job.status != JobStatus.OPEN:
        raise invalid_state("Contract is not open for hiring. Please publish your job first.")


def can_reject_proposal(job, proposal):
    # Checked in this order so the caller gets the most specific reason.
    if job.status not in (JobStatus.OPEN, JobStatus.IN_PROGRESS):
        raise invalid_state("Job is not open for rejection")
    if proposal.status == ProposalStatus.ACCEPTED:
        raise invalid_state("Accepted proposals cannot be rejected")
    if proposal.status == ProposalStatus.WITHDRAWN:
        raise invalid_state("Withdrawn proposals cannot be rejected")
    if proposal.status == ProposalStatus.REJECTED:
        raise invalid_state("Proposal is already rejected")


def can_withdraw_proposal(proposal):
    if proposal.status != ProposalStatus.PENDING:
        raise invalid_state("You can only withdraw pending proposals")
