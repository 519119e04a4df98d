"""Proposal lifecycle: create, accept, reject, withdraw.

Accepting is the one operation with a fan-out: the accepted proposal, the
job, the contractor party and every competing pending proposal change
together inside a single transaction. Status-keyed conditional updates make
a lost race fail loudly instead of double-hiring.
"""
import logging
from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone
from rest_framework import status

from core.constants import PROPOSAL_ACTIVE_STATUSES, JobStatus, PartyRole, ProposalStatus
from core.exceptions import forbidden, invalid_state, not_found
from core import transitions
from apps.jobs.models import Job
from apps.jobs.services import lock_job
from .models import Proposal

logger = logging.getLogger(__name__)

PROPOSAL_FIELDS = ('amount', 'cover_letter', 'delivery_days', 'revisions_included', 'attachments')


def _lock_proposal(proposal):
    try:
        return Proposal.objects.select_for_update().get(pk=proposal.pk)
    except Proposal.DoesNotExist:
        raise not_found("Proposal not found")


def _clean_text(value):
    return value.strip() if isinstance(value, str) else ''


def create_proposal(job, freelancer, fields):
    if job is None:
        raise not_found("Job not found")

    with transaction.atomic():
        job = lock_job(job)
        if job.is_creator(freelancer.id):
            raise invalid_state("You cannot submit a proposal on your own job")
        transitions.can_create_proposal(job)

        duplicate = Proposal.objects.filter(
            job=job, freelancer=freelancer, status__in=PROPOSAL_ACTIVE_STATUSES
        ).exists()
        if duplicate:
            raise invalid_state("You have already submitted a proposal for this job")

        data = {name: fields[name] for name in PROPOSAL_FIELDS if name in fields}
        try:
            with transaction.atomic():
                proposal = Proposal.objects.create(
                    job=job, freelancer=freelancer, status=ProposalStatus.PENDING, **data
                )
        except IntegrityError:
            raise invalid_state("You have already submitted a proposal for this job")

        Job.objects.filter(pk=job.pk).update(proposal_count=F('proposal_count') + 1)

    logger.info(f"Proposal {proposal.id} created by user {freelancer.id} on job {job.id}")
    return proposal


def accept_proposal(proposal, job, actor):
    if not job.is_creator(actor.id):
        raise forbidden("You can't accept proposals for this job")

    with transaction.atomic():
        job = lock_job(job)
        transitions.can_accept_proposal(job)

        now = timezone.now()
        accepted = Proposal.objects.filter(
            pk=proposal.pk, job=job, status=ProposalStatus.PENDING
        ).update(status=ProposalStatus.ACCEPTED, accepted_at=now, updated_at=now)
        if not accepted:
            raise invalid_state("Proposal is no longer pending", status_code=status.HTTP_409_CONFLICT)

        hired = Job.objects.filter(
            pk=job.pk, status=JobStatus.OPEN, hired_freelancer__isnull=True
        ).update(status=JobStatus.IN_PROGRESS, hired_freelancer=proposal.freelancer, updated_at=now)
        if not hired:
            raise invalid_state("Job is no longer open for hiring", status_code=status.HTTP_409_CONFLICT)

        job.refresh_from_db()
        job.add_party(job.hired_freelancer, PartyRole.CONTRACTOR)

        rejected = Proposal.objects.filter(
            job=job, status=ProposalStatus.PENDING
        ).exclude(pk=proposal.pk).update(status=ProposalStatus.REJECTED, rejected_at=now, updated_at=now)

        proposal = Proposal.objects.get(pk=proposal.pk)

    logger.info(
        f"Proposal {proposal.id} accepted on job {job.id}; "
        f"{rejected} competing proposal(s) rejected"
    )
    return proposal, job


def reject_proposal(proposal, job, actor, reason=None):
    if not job.is_creator(actor.id):
        raise forbidden("You can't reject proposals for this job")

    with transaction.atomic():
        job = lock_job(job)
        proposal = _lock_proposal(proposal)
        transitions.can_reject_proposal(job, proposal)

        proposal.status = ProposalStatus.REJECTED
        proposal.rejection_reason = _clean_text(reason)
        proposal.rejected_at = timezone.now()
        proposal.save(update_fields=['status', 'rejection_reason', 'rejected_at', 'updated_at'])

    logger.info(f"Proposal {proposal.id} rejected by user {actor.id}")
    return proposal


def withdraw_proposal(proposal, actor):
    if proposal.freelancer_id != actor.id:
        raise forbidden("You can only withdraw your own proposals")

    with transaction.atomic():
        proposal = _lock_proposal(proposal)
        transitions.can_withdraw_proposal(proposal)

        proposal.status = ProposalStatus.WITHDRAWN
        proposal.withdrawn_at = timezone.now()
        proposal.save(update_fields=['status', 'withdrawn_at', 'updated_at'])

    logger.info(f"Proposal {proposal.id} withdrawn by user {actor.id}")
    return proposal


def mark_read(proposal):
    if not proposal.is_read:
        Proposal.objects.filter(pk=proposal.pk).update(is_read=True)
        proposal.is_read = True
    return proposal
