from rest_framework import serializers
from apps.jobs.models import Job
from apps.users.serializers import PublicUserSerializer
from .models import Proposal


class JobSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Job
        fields = ['id', 'title', 'status', 'category', 'budget_min', 'budget_max', 'currency']
        read_only_fields = fields


class ProposalSerializer(serializers.ModelSerializer):
    job = JobSummarySerializer(read_only=True)
    freelancer = PublicUserSerializer(read_only=True)

    class Meta:
        model = Proposal
        fields = [
            'id', 'job', 'freelancer', 'status', 'amount', 'cover_letter',
            'delivery_days', 'revisions_included', 'attachments', 'is_read',
            'rejection_reason', 'accepted_at', 'rejected_at', 'withdrawn_at',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields


class ProposalCreateSerializer(serializers.Serializer):
    job = serializers.IntegerField(min_value=1)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True)
    cover_letter = serializers.CharField(max_length=5000)
    delivery_days = serializers.IntegerField(min_value=1)
    revisions_included = serializers.IntegerField(min_value=0, required=False, default=0)
    attachments = serializers.ListField(child=serializers.CharField(max_length=500), required=False, default=list)

    def validate(self, data):
        # Proposals always start PENDING.
        if 'status' in self.initial_data:
            raise serializers.ValidationError("Status cannot be set on proposal creation")
        return data


class ProposalRejectSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=2000)
