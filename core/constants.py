from django.db import models


class JobStatus(models.TextChoices):
    DRAFT = 'DRAFT', 'Draft'                    # Created but not visible to freelancers
    OPEN = 'OPEN', 'Open'                       # Published, accepting proposals
    IN_PROGRESS = 'IN_PROGRESS', 'In Progress'  # A proposal was accepted, contractor is working
    COMPLETED = 'COMPLETED', 'Completed'        # Every milestone approved (terminal)
    CANCELLED = 'CANCELLED', 'Cancelled'        # Mutually cancelled while in progress (terminal)


class ProposalStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'        # Freelancer applied, awaiting client response
    ACCEPTED = 'ACCEPTED', 'Accepted'     # Client hired this freelancer
    REJECTED = 'REJECTED', 'Rejected'     # Client rejected, or another proposal was accepted
    WITHDRAWN = 'WITHDRAWN', 'Withdrawn'  # Freelancer pulled the proposal


class MilestoneStatus(models.TextChoices):
    ACTIVE = 'ACTIVE', 'Active'
    SUBMITTED = 'SUBMITTED', 'Submitted'
    COMPLETED = 'COMPLETED', 'Completed'
    CANCELLED = 'CANCELLED', 'Cancelled'


class CancellationStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    ACCEPTED = 'ACCEPTED', 'Accepted'
    REJECTED = 'REJECTED', 'Rejected'


class PartyRole(models.TextChoices):
    CREATOR = 'CREATOR', 'Creator'
    CONTRACTOR = 'CONTRACTOR', 'Contractor'
    ARBITRATOR = 'ARBITRATOR', 'Arbitrator'


JOB_STATUS_CHOICES = JobStatus.choices
PROPOSAL_STATUS_CHOICES = ProposalStatus.choices
MILESTONE_STATUS_CHOICES = MilestoneStatus.choices
CANCELLATION_STATUS_CHOICES = CancellationStatus.choices
PARTY_ROLE_CHOICES = PartyRole.choices

# Statuses a job may be created in; anything else falls back to DRAFT.
JOB_CREATE_STATUSES = (JobStatus.DRAFT, JobStatus.OPEN)
JOB_EDITABLE_STATUSES = (JobStatus.DRAFT, JobStatus.OPEN)
JOB_TERMINAL_STATUSES = (JobStatus.COMPLETED, JobStatus.CANCELLED)

# A freelancer may hold at most one proposal in these statuses per job.
PROPOSAL_ACTIVE_STATUSES = (ProposalStatus.PENDING, ProposalStatus.ACCEPTED)

CANCELLATION_ACTIONS = ('accept', 'reject')

JOB_CATEGORIES = (
    'Web Development',
    'Mobile Development',
    'UI/UX Design',
    'Graphic Design',
    'Content Writing',
    'Digital Marketing',
    'Video Editing',
    'Data Entry',
    'Accounting & Finance',
    'Translation',
    'Photography',
    'Tutoring',
    'Plumbing',
    'Electrical',
    'Carpentry',
    'Cleaning',
    'Delivery',
    'Event Planning',
    'Other',
)

JOB_CATEGORY_CHOICES = tuple((name, name) for name in JOB_CATEGORIES)

JOB_TYPE_CHOICES = (
    ('digital', 'Digital'),
    ('physical', 'Physical'),
)

BUDGET_TYPE_CHOICES = (
    ('fixed', 'Fixed'),
    ('hourly', 'Hourly'),
)

EXPERIENCE_LEVEL_CHOICES = (
    ('entry', 'Entry Level'),
    ('intermediate', 'Intermediate'),
    ('expert', 'Expert'),
)


def normalize_create_status(candidate):
    """Map an untrusted client-provided status hint to a creation status."""
    if candidate in JOB_CREATE_STATUSES:
        return JobStatus(candidate)
    return JobStatus.DRAFT
