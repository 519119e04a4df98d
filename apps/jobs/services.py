"""Job lifecycle: create, edit, publish, delete, completion and the
cancellation handshake.

Every write re-reads the job with a row lock inside a transaction and runs
its guard against that locked row, so concurrent requests on the same job
are serialised and a guard never passes on stale state.
"""
import logging
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from core.constants import (
    CancellationStatus,
    JobStatus,
    MilestoneStatus,
    PartyRole,
    normalize_create_status,
)
from core.exceptions import forbidden, not_found
from core import transitions
from apps.proposals.models import Proposal
from .models import Cancellation, Job, Milestone

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    'title', 'description', 'category', 'job_type', 'budget_type', 'budget_min',
    'budget_max', 'currency', 'location', 'deadline', 'experience_level',
    'is_public', 'is_urgent', 'tags', 'required_skills', 'attachments', 'terms',
)


def lock_job(job):
    try:
        return Job.objects.select_for_update().get(pk=job.pk)
    except Job.DoesNotExist:
        raise not_found("Contract not found")


def _clean_text(value):
    return value.strip() if isinstance(value, str) else ''


def _replace_milestones(job, milestones):
    job.milestones.all().delete()
    Milestone.objects.bulk_create([
        Milestone(
            job=job,
            position=position,
            title=item.get('title', ''),
            description=item.get('description', ''),
            value=item.get('value') or 0,
            due_date=item.get('due_date'),
            status=MilestoneStatus.ACTIVE,
        )
        for position, item in enumerate(milestones)
    ])


def create_job(creator, data):
    data = dict(data)
    milestones = data.pop('milestones', None) or []
    parties = data.pop('parties', None) or []
    status_hint = data.pop('status', None)

    fields = {name: data[name] for name in EDITABLE_FIELDS if name in data}
    fields.setdefault('job_type', 'digital')
    fields.setdefault('budget_type', 'fixed')
    fields.setdefault('is_public', True)
    fields.setdefault('is_urgent', False)
    for name in ('tags', 'required_skills', 'attachments'):
        if not isinstance(fields.get(name), list):
            fields[name] = []

    with transaction.atomic():
        job = Job.objects.create(creator=creator, status=normalize_create_status(status_hint), **fields)
        job.add_party(creator, PartyRole.CREATOR)
        for party in parties:
            address = party.get('address')
            role = party.get('role')
            # Contractors only join through an accepted proposal.
            if not address or role != PartyRole.ARBITRATOR or address.pk == creator.pk:
                continue
            job.add_party(address, role)
        _replace_milestones(job, milestones)

    logger.info(f"Job {job.id} created by user {creator.id} as {job.status}")
    return job


def update_job(job, data):
    data = dict(data)
    with transaction.atomic():
        job = lock_job(job)
        transitions.can_update_job(job)

        for name in EDITABLE_FIELDS:
            if name in data:
                setattr(job, name, data[name])
        job.save()

        if 'milestones' in data and data['milestones'] is not None:
            _replace_milestones(job, data['milestones'])

    logger.info(f"Job {job.id} updated")
    return job


def publish_job(job):
    with transaction.atomic():
        job = lock_job(job)
        transitions.can_publish_job(job)

        job.status = JobStatus.OPEN
        job.published_at = timezone.now()
        job.save(update_fields=['status', 'published_at', 'updated_at'])

    logger.info(f"Job {job.id} published")
    return job


def delete_job(job):
    with transaction.atomic():
        job = lock_job(job)
        transitions.can_delete_job(job)

        job_id = job.id
        deleted, _ = Proposal.objects.filter(job=job).delete()
        job.delete()

    logger.info(f"Job {job_id} deleted along with {deleted} proposal(s)")


def mark_completed(job):
    with transaction.atomic():
        job = lock_job(job)
        transitions.can_mark_completed(job)

        job.status = JobStatus.COMPLETED
        job.completed_at = timezone.now()
        job.save(update_fields=['status', 'completed_at', 'updated_at'])

    logger.info(f"Job {job.id} marked completed by contractor")
    return job


def approve_completion(job):
    with transaction.atomic():
        job = lock_job(job)
        transitions.can_approve_completion(job)

        job.completion_approved_at = timezone.now()
        job.save(update_fields=['completion_approved_at', 'updated_at'])

    logger.info(f"Completion of job {job.id} approved by creator")
    return job


def record_view(job):
    Job.objects.filter(pk=job.pk).update(view_count=F('view_count') + 1)


def _party_role(job, user):
    if job.is_creator(user.id):
        return PartyRole.CREATOR
    if job.is_contractor(user.id):
        return PartyRole.CONTRACTOR
    return None


def request_cancellation(job, actor, reason=None):
    with transaction.atomic():
        job = lock_job(job)
        role = _party_role(job, actor)
        if role is None:
            raise forbidden("You are not authorized to cancel this job")

        cancellation = job.get_cancellation()
        transitions.can_request_cancellation(job, cancellation)

        # A rejected or accepted request is replaced by the new one.
        if cancellation is None:
            cancellation = Cancellation(job=job)
        cancellation.status = CancellationStatus.PENDING
        cancellation.initiated_by = actor
        cancellation.initiated_role = role
        cancellation.reason = _clean_text(reason)
        cancellation.requested_at = timezone.now()
        cancellation.responded_by = None
        cancellation.responded_at = None
        cancellation.save()

        job.save(update_fields=['updated_at'])

    logger.info(f"Cancellation of job {job.id} requested by user {actor.id} ({role})")
    return job


def respond_cancellation(job, actor, action):
    with transaction.atomic():
        job = lock_job(job)
        if _party_role(job, actor) is None:
            raise forbidden("You are not authorized to respond")

        cancellation = job.get_cancellation()
        transitions.can_respond_cancellation(job, cancellation, actor.id, action)

        accepted = action == 'accept'
        cancellation.status = CancellationStatus.ACCEPTED if accepted else CancellationStatus.REJECTED
        cancellation.responded_by = actor
        cancellation.responded_at = timezone.now()
        cancellation.save(update_fields=['status', 'responded_by', 'responded_at'])

        if accepted:
            job.status = JobStatus.CANCELLED
        job.save(update_fields=['status', 'updated_at'])

    logger.info(f"Cancellation of job {job.id} {cancellation.status.lower()} by user {actor.id}")
    return job, accepted
