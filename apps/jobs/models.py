from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator
from core.constants import (
    BUDGET_TYPE_CHOICES,
    CANCELLATION_STATUS_CHOICES,
    EXPERIENCE_LEVEL_CHOICES,
    JOB_CATEGORY_CHOICES,
    JOB_STATUS_CHOICES,
    JOB_TYPE_CHOICES,
    MILESTONE_STATUS_CHOICES,
    PARTY_ROLE_CHOICES,
    CancellationStatus,
    JobStatus,
    MilestoneStatus,
    PartyRole,
)


class Job(models.Model):
    creator = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='created_jobs')
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=100, choices=JOB_CATEGORY_CHOICES, blank=True)
    job_type = models.CharField(max_length=20, choices=JOB_TYPE_CHOICES, default='digital')
    budget_type = models.CharField(max_length=20, choices=BUDGET_TYPE_CHOICES, default='fixed')
    budget_min = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(0)])
    budget_max = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(0)])
    currency = models.CharField(max_length=3, default='NPR')
    location = models.CharField(max_length=200, blank=True)
    deadline = models.DateField(null=True, blank=True)
    experience_level = models.CharField(max_length=20, choices=EXPERIENCE_LEVEL_CHOICES, blank=True)
    is_public = models.BooleanField(default=True)
    is_urgent = models.BooleanField(default=False)
    tags = models.JSONField(default=list, blank=True)
    required_skills = models.JSONField(default=list, blank=True)
    attachments = models.JSONField(default=list, blank=True)
    terms = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=JOB_STATUS_CHOICES, default=JobStatus.DRAFT)
    hired_freelancer = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='hired_jobs'
    )
    view_count = models.PositiveIntegerField(default=0)
    proposal_count = models.PositiveIntegerField(default=0)
    published_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    completion_approved_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'is_public']),
            models.Index(fields=['creator', 'status']),
        ]

    def __str__(self):
        return f"{self.title} - {self.creator.username}"

    def get_cancellation(self):
        """Return the cancellation record, or None when none was ever requested."""
        try:
            return self.cancellation
        except Cancellation.DoesNotExist:
            return None

    def is_creator(self, user_id):
        return self.creator_id == user_id

    def is_contractor(self, user_id):
        return self.parties.filter(address_id=user_id, role=PartyRole.CONTRACTOR).exists()

    def add_party(self, user, role):
        """Add (user, role) to the parties unless it is already there."""
        party, _ = Party.objects.get_or_create(job=self, address=user, role=role)
        return party

    @property
    def milestone_total(self):
        return sum((m.value or 0) for m in self.milestones.all())


class Milestone(models.Model):
    job = models.ForeignKey(Job, on_delete=models.CASCADE, related_name='milestones')
    position = models.PositiveIntegerField()
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    value = models.DecimalField(max_digits=12, decimal_places=2, default=0, validators=[MinValueValidator(0)])
    due_date = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=MILESTONE_STATUS_CHOICES, default=MilestoneStatus.ACTIVE)
    evidence = models.TextField(blank=True)
    approved_by = models.JSONField(default=list, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['position']
        unique_together = ('job', 'position')

    def __str__(self):
        return f"{self.job.title} - Milestone {self.position}: {self.title}"


class Party(models.Model):
    job = models.ForeignKey(Job, on_delete=models.CASCADE, related_name='parties')
    address = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='job_parties')
    role = models.CharField(max_length=20, choices=PARTY_ROLE_CHOICES)
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['id']
        unique_together = ('job', 'address', 'role')
        verbose_name_plural = 'Parties'

    def __str__(self):
        return f"{self.address.username} ({self.role}) on {self.job.title}"


class Cancellation(models.Model):
    job = models.OneToOneField(Job, on_delete=models.CASCADE, related_name='cancellation')
    status = models.CharField(max_length=20, choices=CANCELLATION_STATUS_CHOICES, default=CancellationStatus.PENDING)
    initiated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='initiated_cancellations'
    )
    initiated_role = models.CharField(max_length=20, choices=PARTY_ROLE_CHOICES)
    reason = models.TextField(blank=True)
    requested_at = models.DateTimeField()
    responded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='responded_cancellations'
    )
    responded_at = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return f"Cancellation of {self.job.title} ({self.status})"
