"""Milestone submit/approve flow.

Milestones live inside their job, so both operations lock the parent job
row and read the milestones through it. Who may call them (contractor for
submit, creator for approve) is checked by the caller beforehand.
"""
import logging
from django.db import transaction
from django.utils import timezone

from core.constants import JOB_TERMINAL_STATUSES, JobStatus, MilestoneStatus
from core.exceptions import invalid_state
from core import transitions
from .services import lock_job

logger = logging.getLogger(__name__)


def _parse_index(index):
    if isinstance(index, bool):
        raise invalid_state("Invalid milestone index")
    try:
        value = int(index)
    except (TypeError, ValueError):
        raise invalid_state("Invalid milestone index")
    if value < 0 or str(value) != str(index).strip():
        raise invalid_state("Invalid milestone index")
    return value


def _get_milestone(job, index):
    position = _parse_index(index)
    milestones = list(job.milestones.all())
    if position >= len(milestones):
        raise invalid_state("Milestone not found")
    return milestones, milestones[position]


def submit_milestone(job, index, evidence=None):
    with transaction.atomic():
        job = lock_job(job)
        _, milestone = _get_milestone(job, index)
        transitions.can_submit_milestone(job, milestone)

        milestone.status = MilestoneStatus.SUBMITTED
        if isinstance(evidence, str) and evidence.strip():
            milestone.evidence = evidence.strip()
        milestone.completed_at = timezone.now()
        milestone.save(update_fields=['status', 'evidence', 'completed_at'])

        job.save(update_fields=['updated_at'])

    logger.info(f"Milestone {milestone.position} of job {job.id} submitted")
    return job


def approve_milestone(job, index, approver):
    """Approve a submitted milestone; completes the job once every milestone is done.

    Returns ``(job, all_completed)`` so the caller can tell the two outcomes apart.
    """
    with transaction.atomic():
        job = lock_job(job)
        if job.status in JOB_TERMINAL_STATUSES:
            raise invalid_state("Contract is closed, cannot approve milestones")
        milestones, milestone = _get_milestone(job, index)
        transitions.can_approve_milestone(milestone)

        milestone.status = MilestoneStatus.COMPLETED
        if approver.id not in milestone.approved_by:
            milestone.approved_by = milestone.approved_by + [approver.id]
        milestone.save(update_fields=['status', 'approved_by'])

        all_completed = all(item.status == MilestoneStatus.COMPLETED for item in milestones)
        update_fields = ['updated_at']
        if all_completed:
            job.status = JobStatus.COMPLETED
            job.completed_at = timezone.now()
            update_fields += ['status', 'completed_at']
        job.save(update_fields=update_fields)

    logger.info(
        f"Milestone {milestone.position} of job {job.id} approved by user {approver.id}"
        f"{' - job completed' if all_completed else ''}"
    )
    return job, all_completed
