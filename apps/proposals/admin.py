from django.contrib import admin
from .models import Proposal


@admin.register(Proposal)
class ProposalAdmin(admin.ModelAdmin):
    list_display = ('job', 'freelancer', 'status', 'amount', 'is_read', 'created_at')
    list_filter = ('status', 'is_read')
    search_fields = ('job__title', 'freelancer__username')
