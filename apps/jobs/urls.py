from django.urls import path
from .views import (
    JobListCreateView, MyJobListView, JobCategoryListView, JobDetailView,
    JobPublishView, JobMarkCompletedView, JobApproveCompletionView,
    MilestoneSubmitView, MilestoneApproveView, JobCancellationView,
    JobCancellationRespondView
)

urlpatterns = [
    path('', JobListCreateView.as_view(), name='job_list_create'),
    path('mine/', MyJobListView.as_view(), name='my_jobs'),
    path('categories/', JobCategoryListView.as_view(), name='job_categories'),
    path('<int:pk>/', JobDetailView.as_view(), name='job_detail'),
    path('<int:pk>/publish/', JobPublishView.as_view(), name='job_publish'),
    path('<int:pk>/mark-completed/', JobMarkCompletedView.as_view(), name='job_mark_completed'),
    path('<int:pk>/approve-completion/', JobApproveCompletionView.as_view(), name='job_approve_completion'),
    path('<int:pk>/milestones/<int:index>/submit/', MilestoneSubmitView.as_view(), name='milestone_submit'),
    path('<int:pk>/milestones/<int:index>/approve/', MilestoneApproveView.as_view(), name='milestone_approve'),
    path('<int:pk>/cancellation/', JobCancellationView.as_view(), name='job_cancellation'),
    path('<int:pk>/cancellation/respond/', JobCancellationRespondView.as_view(), name='job_cancellation_respond'),
]
