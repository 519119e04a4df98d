from django.contrib import admin
from .models import Job, Milestone, Party, Cancellation


class MilestoneInline(admin.TabularInline):
    model = Milestone
    extra = 0


class PartyInline(admin.TabularInline):
    model = Party
    extra = 0


@admin.register(Job)
class JobAdmin(admin.ModelAdmin):
    list_display = ('title', 'creator', 'status', 'category', 'budget_min', 'proposal_count', 'created_at')
    list_filter = ('status', 'category', 'job_type')
    search_fields = ('title', 'creator__username')
    inlines = [PartyInline, MilestoneInline]


@admin.register(Cancellation)
class CancellationAdmin(admin.ModelAdmin):
    list_display = ('job', 'status', 'initiated_by', 'initiated_role', 'requested_at')
    list_filter = ('status',)
