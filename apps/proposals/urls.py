from django.urls import path
from .views import (
    ProposalCreateView, MyProposalListView, JobProposalListView, ProposalDetailView,
    ProposalAcceptView, ProposalRejectView, ProposalWithdrawView
)

urlpatterns = [
    path('', ProposalCreateView.as_view(), name='proposal_create'),
    path('mine/', MyProposalListView.as_view(), name='my_proposals'),
    path('job/<int:job_id>/', JobProposalListView.as_view(), name='job_proposals'),
    path('<int:pk>/', ProposalDetailView.as_view(), name='proposal_detail'),
    path('<int:pk>/accept/', ProposalAcceptView.as_view(), name='proposal_accept'),
    path('<int:pk>/reject/', ProposalRejectView.as_view(), name='proposal_reject'),
    path('<int:pk>/withdraw/', ProposalWithdrawView.as_view(), name='proposal_withdraw'),
]
