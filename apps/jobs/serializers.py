from rest_framework import serializers
from django.contrib.auth import get_user_model
from .models import Job, Milestone, Party, Cancellation
from apps.users.serializers import PublicUserSerializer
from core.constants import JOB_STATUS_CHOICES, PartyRole

User = get_user_model()


class MilestoneSerializer(serializers.ModelSerializer):
    class Meta:
        model = Milestone
        fields = [
            'id', 'position', 'title', 'description', 'value', 'due_date',
            'status', 'evidence', 'approved_by', 'completed_at'
        ]
        read_only_fields = fields


class MilestoneInputSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    value = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False, default=0)
    due_date = serializers.DateField(required=False, allow_null=True, default=None)


class PartySerializer(serializers.ModelSerializer):
    address = PublicUserSerializer(read_only=True)

    class Meta:
        model = Party
        fields = ['id', 'address', 'role', 'joined_at']
        read_only_fields = fields


class PartyInputSerializer(serializers.Serializer):
    address = serializers.PrimaryKeyRelatedField(queryset=User.objects.all())
    role = serializers.ChoiceField(choices=[PartyRole.ARBITRATOR])


class CancellationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Cancellation
        fields = [
            'status', 'initiated_by', 'initiated_role', 'reason', 'requested_at',
            'responded_by', 'responded_at'
        ]
        read_only_fields = fields


class JobSerializer(serializers.ModelSerializer):
    creator = PublicUserSerializer(read_only=True)
    hired_freelancer = PublicUserSerializer(read_only=True)
    milestones = MilestoneSerializer(many=True, read_only=True)
    parties = PartySerializer(many=True, read_only=True)
    cancellation = serializers.SerializerMethodField()
    status = serializers.ChoiceField(choices=JOB_STATUS_CHOICES, read_only=True)

    class Meta:
        model = Job
        fields = [
            'id', 'title', 'description', 'category', 'job_type', 'budget_type',
            'budget_min', 'budget_max', 'currency', 'location', 'deadline',
            'experience_level', 'is_public', 'is_urgent', 'tags', 'required_skills',
            'attachments', 'terms', 'status', 'creator', 'hired_freelancer',
            'parties', 'milestones', 'cancellation', 'view_count', 'proposal_count',
            'published_at', 'completed_at', 'completion_approved_at',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_cancellation(self, obj):
        cancellation = obj.get_cancellation()
        if cancellation is None:
            return None
        return CancellationSerializer(cancellation).data


class JobWriteSerializer(serializers.ModelSerializer):
    """Validates job create/edit payloads; the lifecycle service does the writes."""
    milestones = MilestoneInputSerializer(many=True, required=False)
    parties = PartyInputSerializer(many=True, required=False)
    status = serializers.CharField(required=False, allow_blank=True, write_only=True)
    tags = serializers.ListField(child=serializers.CharField(max_length=50), required=False)
    required_skills = serializers.ListField(child=serializers.CharField(max_length=100), required=False)
    attachments = serializers.ListField(child=serializers.CharField(max_length=500), required=False)

    class Meta:
        model = Job
        fields = [
            'title', 'description', 'category', 'job_type', 'budget_type',
            'budget_min', 'budget_max', 'currency', 'location', 'deadline',
            'experience_level', 'is_public', 'is_urgent', 'tags', 'required_skills',
            'attachments', 'terms', 'status', 'milestones', 'parties'
        ]

    def validate(self, data):
        budget_min = data.get('budget_min', getattr(self.instance, 'budget_min', None))
        budget_max = data.get('budget_max', getattr(self.instance, 'budget_max', None))
        if budget_min is not None and budget_max is not None and budget_max < budget_min:
            raise serializers.ValidationError("budget_max must not be lower than budget_min.")
        if self.instance is not None and 'parties' in data:
            raise serializers.ValidationError("Parties cannot be changed after creation.")
        return data


class JobCancellationRequestSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=2000)


class JobCancellationResponseSerializer(serializers.Serializer):
    action = serializers.CharField(max_length=20)


class MilestoneSubmitSerializer(serializers.Serializer):
    evidence = serializers.CharField(required=False, allow_blank=True, max_length=5000)
