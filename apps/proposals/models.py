from django.db import models
from django.conf import settings
from django.core.validators import MaxLengthValidator, MinValueValidator
from core.constants import PROPOSAL_ACTIVE_STATUSES, PROPOSAL_STATUS_CHOICES, ProposalStatus


class Proposal(models.Model):
    job = models.ForeignKey('jobs.Job', on_delete=models.CASCADE, related_name='proposals')
    freelancer = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='proposals')
    status = models.CharField(max_length=20, choices=PROPOSAL_STATUS_CHOICES, default=ProposalStatus.PENDING)
    amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(0)])
    cover_letter = models.TextField(validators=[MaxLengthValidator(5000)])
    delivery_days = models.PositiveIntegerField()
    revisions_included = models.PositiveIntegerField(default=0)
    attachments = models.JSONField(default=list, blank=True)
    is_read = models.BooleanField(default=False)
    rejection_reason = models.TextField(blank=True)
    accepted_at = models.DateTimeField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)
    withdrawn_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['job', 'freelancer'],
                condition=models.Q(status__in=PROPOSAL_ACTIVE_STATUSES),
                name='unique_active_proposal_per_freelancer',
            ),
        ]
        indexes = [
            models.Index(fields=['job', 'status']),
        ]

    def __str__(self):
        return f"{self.freelancer.username} proposed on {self.job.title} ({self.status})"
