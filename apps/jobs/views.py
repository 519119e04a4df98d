from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi
from .models import Job
from .serializers import (
    JobSerializer, JobWriteSerializer, JobCancellationRequestSerializer,
    JobCancellationResponseSerializer, MilestoneSubmitSerializer
)
from .utils import get_job_or_404, ensure_creator, ensure_contractor, get_contractor, send_notification
from . import milestones as milestone_service
from . import services as job_service
from core.constants import JOB_CATEGORIES, JobStatus
from core.exceptions import not_found
from core.utils import IsClient, IsFreelancer

job_list_response = openapi.Response('List of jobs', JobSerializer(many=True))


class JobListCreateView(APIView):

    def get_permissions(self):
        if self.request.method == 'POST':
            return [IsAuthenticated(), IsClient()]
        return [IsAuthenticated(), IsFreelancer()]

    @swagger_auto_schema(
        operation_description="List open public jobs, optionally filtered by category.",
        manual_parameters=[
            openapi.Parameter('category', openapi.IN_QUERY, type=openapi.TYPE_STRING),
        ],
        responses={200: job_list_response, 401: 'Unauthorized', 403: 'Forbidden'}
    )
    def get(self, request):
        jobs = Job.objects.filter(status=JobStatus.OPEN, is_public=True).select_related('creator')
        category = request.query_params.get('category')
        if category:
            jobs = jobs.filter(category=category)
        serializer = JobSerializer(jobs, many=True)
        return Response(serializer.data)

    @swagger_auto_schema(
        operation_description="Create a job with optional milestones. "
                              "The status hint is honoured only for DRAFT or OPEN.",
        request_body=JobWriteSerializer,
        responses={201: JobSerializer, 400: 'Bad Request', 401: 'Unauthorized', 403: 'Forbidden'}
    )
    def post(self, request):
        serializer = JobWriteSerializer(data=request.data)
        if serializer.is_valid():
            job = job_service.create_job(request.user, serializer.validated_data)
            return Response(JobSerializer(job).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


class MyJobListView(APIView):
    permission_classes = [IsAuthenticated, IsClient]

    @swagger_auto_schema(
        operation_description="List jobs created by the authenticated client.",
        responses={200: job_list_response, 401: 'Unauthorized'}
    )
    def get(self, request):
        jobs = Job.objects.filter(creator=request.user)
        serializer = JobSerializer(jobs, many=True)
        return Response(serializer.data)


class JobCategoryListView(APIView):

    @swagger_auto_schema(operation_description="List job categories.")
    def get(self, request):
        return Response(JOB_CATEGORIES)


class JobDetailView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(
        operation_description="Retrieve a job. Drafts are only visible to their creator.",
        responses={200: JobSerializer, 401: 'Unauthorized', 404: 'Not Found'}
    )
    def get(self, request, pk):
        job = get_job_or_404(pk)
        if job.is_creator(request.user.id):
            return Response(JobSerializer(job).data)
        if job.status == JobStatus.DRAFT:
            raise not_found("Contract not found")
        job_service.record_view(job)
        job.refresh_from_db(fields=['view_count'])
        return Response(JobSerializer(job).data)

    @swagger_auto_schema(
        operation_description="Edit a draft or open job (creator only). "
                              "Passing milestones replaces them all.",
        request_body=JobWriteSerializer,
        responses={200: JobSerializer, 400: 'Bad Request', 403: 'Forbidden', 404: 'Not Found'}
    )
    def patch(self, request, pk):
        job = get_job_or_404(pk)
        ensure_creator(job, request.user, "You are not authorized to update this job")
        serializer = JobWriteSerializer(job, data=request.data, partial=True)
        if serializer.is_valid():
            job = job_service.update_job(job, serializer.validated_data)
            return Response(JobSerializer(job).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    @swagger_auto_schema(
        operation_description="Delete a draft or open job and all its proposals (creator only).",
        responses={204: 'No Content', 400: 'Bad Request', 403: 'Forbidden', 404: 'Not Found'}
    )
    def delete(self, request, pk):
        job = get_job_or_404(pk)
        ensure_creator(job, request.user, "You are not authorized to delete this job")
        job_service.delete_job(job)
        return Response(status=status.HTTP_204_NO_CONTENT)


class JobPublishView(APIView):
    permission_classes = [IsAuthenticated, IsClient]

    @swagger_auto_schema(
        operation_description="Publish a draft job. Requires a category and a minimum budget.",
        responses={200: JobSerializer, 400: 'Bad Request', 403: 'Forbidden', 404: 'Not Found'}
    )
    def patch(self, request, pk):
        job = get_job_or_404(pk)
        ensure_creator(job, request.user, "You are not authorized to publish this job")
        job = job_service.publish_job(job)
        return Response({"status": "success", "message": "Job published.", "job": JobSerializer(job).data})


class JobMarkCompletedView(APIView):
    permission_classes = [IsAuthenticated, IsFreelancer]

    @swagger_auto_schema(
        operation_description="Contractor marks the whole contract as completed.",
        responses={200: JobSerializer, 400: 'Bad Request', 403: 'Forbidden', 404: 'Not Found'}
    )
    def patch(self, request, pk):
        job = get_job_or_404(pk)
        ensure_contractor(job, request.user, "Only the contractor can mark completion")
        job = job_service.mark_completed(job)

        email_subject = f"Contract Marked as Completed: {job.title}"
        email_message = (
            f"Dear {job.creator.first_name or job.creator.username},\n\n"
            f"The contractor has marked '{job.title}' as completed.\n"
            f"Please review the work and approve the completion.\n\n"
            f"Best regards,\nEverest Team"
        )
        sms_message = f"Contractor marked '{job.title}' as completed. Please review."
        send_notification(job.creator, email_subject, email_message, sms_message)

        return Response({"status": "success", "message": "Contract marked as completed.", "job": JobSerializer(job).data})


class JobApproveCompletionView(APIView):
    permission_classes = [IsAuthenticated, IsClient]

    @swagger_auto_schema(
        operation_description="Creator approves a completed contract.",
        responses={200: JobSerializer, 400: 'Bad Request', 403: 'Forbidden', 404: 'Not Found'}
    )
    def patch(self, request, pk):
        job = get_job_or_404(pk, "The contract was not found or you are not authorized")
        ensure_creator(job, request.user, "You are not authorized to approve completion for this contract")
        job = job_service.approve_completion(job)
        return Response({
            "status": "success",
            "message": "Successfully approved contract completion",
            "job": JobSerializer(job).data
        })


class MilestoneSubmitView(APIView):
    permission_classes = [IsAuthenticated, IsFreelancer]

    @swagger_auto_schema(
        operation_description="Contractor submits a milestone for approval, with optional evidence.",
        request_body=MilestoneSubmitSerializer,
        responses={200: JobSerializer, 400: 'Bad Request', 403: 'Forbidden', 404: 'Not Found'}
    )
    def patch(self, request, pk, index):
        job = get_job_or_404(pk)
        ensure_contractor(job, request.user, "Only the contractor can submit milestones")
        serializer = MilestoneSubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        job = milestone_service.submit_milestone(job, index, serializer.validated_data.get('evidence'))

        email_subject = f"Milestone Submitted: {job.title}"
        email_message = (
            f"Dear {job.creator.first_name or job.creator.username},\n\n"
            f"Milestone #{index + 1} of '{job.title}' was submitted for your approval.\n\n"
            f"Best regards,\nEverest Team"
        )
        sms_message = f"Milestone #{index + 1} of '{job.title}' awaits your approval."
        send_notification(job.creator, email_subject, email_message, sms_message)

        return Response({
            "status": "success",
            "message": "Milestone submitted for approval.",
            "job": JobSerializer(job).data
        })


class MilestoneApproveView(APIView):
    permission_classes = [IsAuthenticated, IsClient]

    @swagger_auto_schema(
        operation_description="Creator approves a submitted milestone. "
                              "Approving the last one completes the contract.",
        responses={200: JobSerializer, 400: 'Bad Request', 403: 'Forbidden', 404: 'Not Found'}
    )
    def patch(self, request, pk, index):
        job = get_job_or_404(pk)
        ensure_creator(job, request.user, "Only the creator can approve milestones")
        job, all_completed = milestone_service.approve_milestone(job, index, request.user)

        contractor = get_contractor(job)
        if contractor:
            email_subject = f"Milestone Approved: {job.title}"
            email_message = (
                f"Dear {contractor.first_name or contractor.username},\n\n"
                f"Milestone #{index + 1} of '{job.title}' has been approved."
                f"{' The contract is now completed.' if all_completed else ''}\n\n"
                f"Best regards,\nEverest Team"
            )
            sms_message = f"Milestone #{index + 1} of '{job.title}' approved."
            send_notification(contractor, email_subject, email_message, sms_message)

        return Response({
            "status": "success",
            "message": "Milestone approved and contract completed." if all_completed else "Milestone approved.",
            "job": JobSerializer(job).data
        })


class JobCancellationView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(
        operation_description="Creator or contractor requests cancellation of an in-progress job.",
        request_body=JobCancellationRequestSerializer,
        responses={200: JobSerializer, 400: 'Bad Request', 403: 'Forbidden', 404: 'Not Found'}
    )
    def post(self, request, pk):
        job = get_job_or_404(pk)
        serializer = JobCancellationRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        job = job_service.request_cancellation(job, request.user, serializer.validated_data.get('reason'))

        other_party = get_contractor(job) if job.is_creator(request.user.id) else job.creator
        email_subject = f"Cancellation Requested: {job.title}"
        email_message = (
            f"Dear {other_party.first_name or other_party.username},\n\n"
            f"{request.user.username} has asked to cancel '{job.title}'.\n"
            f"Reason: {job.cancellation.reason or 'No reason provided'}\n"
            f"Please accept or reject the request on Everest.\n\n"
            f"Best regards,\nEverest Team"
        ) if other_party else ''
        sms_message = f"Cancellation requested for '{job.title}'. Please respond on Everest."
        send_notification(other_party, email_subject, email_message, sms_message)

        return Response({
            "status": "success",
            "message": "Cancellation requested.",
            "job": JobSerializer(job).data
        })


class JobCancellationRespondView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(
        operation_description="The other party accepts or rejects a pending cancellation request.",
        request_body=JobCancellationResponseSerializer,
        responses={200: JobSerializer, 400: 'Bad Request', 403: 'Forbidden', 404: 'Not Found'}
    )
    def post(self, request, pk):
        job = get_job_or_404(pk)
        serializer = JobCancellationResponseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        job, accepted = job_service.respond_cancellation(job, request.user, serializer.validated_data['action'])

        initiator = job.cancellation.initiated_by
        email_subject = f"Cancellation {'Accepted' if accepted else 'Rejected'}: {job.title}"
        email_message = (
            f"Dear {initiator.first_name or initiator.username},\n\n"
            f"Your request to cancel '{job.title}' was {'accepted' if accepted else 'rejected'}.\n\n"
            f"Best regards,\nEverest Team"
        )
        sms_message = f"Cancellation of '{job.title}' {'accepted' if accepted else 'rejected'}."
        send_notification(initiator, email_subject, email_message, sms_message)

        return Response({
            "status": "success",
            "message": "Contract cancelled." if accepted else "Cancellation request rejected.",
            "job": JobSerializer(job).data
        })
