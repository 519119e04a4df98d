from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi
from apps.jobs.utils import get_job_or_404, ensure_creator, send_notification
from core.exceptions import forbidden, not_found
from core.utils import IsClient, IsFreelancer
from .models import Proposal
from .serializers import ProposalSerializer, ProposalCreateSerializer, ProposalRejectSerializer
from . import services as proposal_service

proposal_list_response = openapi.Response('List of proposals', ProposalSerializer(many=True))


def get_proposal_or_404(proposal_id):
    try:
        return Proposal.objects.select_related('job', 'freelancer').get(pk=proposal_id)
    except Proposal.DoesNotExist:
        raise not_found("Proposal not found")


class ProposalCreateView(APIView):
    permission_classes = [IsAuthenticated, IsFreelancer]

    @swagger_auto_schema(
        operation_description="Submit a proposal on an open job. New proposals are always PENDING.",
        request_body=ProposalCreateSerializer,
        responses={201: ProposalSerializer, 400: 'Bad Request', 403: 'Forbidden', 404: 'Not Found'}
    )
    def post(self, request):
        serializer = ProposalCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        job = get_job_or_404(data['job'], "Job not found")
        proposal = proposal_service.create_proposal(job, request.user, data)

        email_subject = f"New Proposal: {job.title}"
        email_message = (
            f"Dear {job.creator.first_name or job.creator.username},\n\n"
            f"{request.user.username} has submitted a proposal for '{job.title}'.\n"
            f"Delivery: {proposal.delivery_days} day(s)\n\n"
            f"Best regards,\nEverest Team"
        )
        sms_message = f"New proposal from {request.user.username} for '{job.title}'."
        send_notification(job.creator, email_subject, email_message, sms_message)

        return Response(ProposalSerializer(proposal).data, status=status.HTTP_201_CREATED)


class MyProposalListView(APIView):
    permission_classes = [IsAuthenticated, IsFreelancer]

    @swagger_auto_schema(
        operation_description="List proposals submitted by the authenticated freelancer.",
        responses={200: proposal_list_response, 401: 'Unauthorized'}
    )
    def get(self, request):
        proposals = Proposal.objects.filter(freelancer=request.user).select_related('job', 'freelancer')
        serializer = ProposalSerializer(proposals, many=True)
        return Response(serializer.data)


class JobProposalListView(APIView):
    permission_classes = [IsAuthenticated, IsClient]

    @swagger_auto_schema(
        operation_description="List proposals received on a job (creator only).",
        manual_parameters=[
            openapi.Parameter('status', openapi.IN_QUERY, type=openapi.TYPE_STRING),
        ],
        responses={200: proposal_list_response, 403: 'Forbidden', 404: 'Not Found'}
    )
    def get(self, request, job_id):
        job = get_job_or_404(job_id, "Job not found")
        ensure_creator(job, request.user, "You can't view proposals for this job")
        proposals = Proposal.objects.filter(job=job).select_related('job', 'freelancer')
        proposal_status = request.query_params.get('status')
        if proposal_status:
            proposals = proposals.filter(status=proposal_status.upper())
        serializer = ProposalSerializer(proposals, many=True)
        return Response(serializer.data)


class ProposalDetailView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(
        operation_description="Retrieve a proposal. Viewing it as the job creator marks it read.",
        responses={200: ProposalSerializer, 403: 'Forbidden', 404: 'Not Found'}
    )
    def get(self, request, pk):
        proposal = get_proposal_or_404(pk)
        if proposal.job.is_creator(request.user.id):
            proposal = proposal_service.mark_read(proposal)
        elif proposal.freelancer_id != request.user.id:
            raise forbidden("You are not authorized to view this proposal")
        return Response(ProposalSerializer(proposal).data)


class ProposalAcceptView(APIView):
    permission_classes = [IsAuthenticated, IsClient]

    @swagger_auto_schema(
        operation_description="Accept a pending proposal. The job moves to IN_PROGRESS, the freelancer "
                              "becomes its contractor and all other pending proposals are rejected.",
        responses={200: ProposalSerializer, 400: 'Bad Request', 403: 'Forbidden', 404: 'Not Found', 409: 'Conflict'}
    )
    def patch(self, request, pk):
        proposal = get_proposal_or_404(pk)
        proposal, job = proposal_service.accept_proposal(proposal, proposal.job, request.user)

        freelancer = proposal.freelancer
        email_subject = f"Proposal Accepted: {job.title}"
        email_message = (
            f"Dear {freelancer.first_name or freelancer.username},\n\n"
            f"Your proposal for '{job.title}' has been accepted.\n"
            f"The contract is now in progress.\n\n"
            f"Best regards,\nEverest Team"
        )
        sms_message = f"Your proposal for '{job.title}' was accepted."
        send_notification(freelancer, email_subject, email_message, sms_message)

        return Response({
            "status": "success",
            "message": "Proposal accepted.",
            "proposal": ProposalSerializer(proposal).data
        })


class ProposalRejectView(APIView):
    permission_classes = [IsAuthenticated, IsClient]

    @swagger_auto_schema(
        operation_description="Reject a pending proposal with an optional reason.",
        request_body=ProposalRejectSerializer,
        responses={200: ProposalSerializer, 400: 'Bad Request', 403: 'Forbidden', 404: 'Not Found'}
    )
    def patch(self, request, pk):
        proposal = get_proposal_or_404(pk)
        serializer = ProposalRejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        proposal = proposal_service.reject_proposal(
            proposal, proposal.job, request.user, serializer.validated_data.get('reason')
        )

        freelancer = proposal.freelancer
        email_subject = f"Proposal Update: {proposal.job.title}"
        email_message = (
            f"Dear {freelancer.first_name or freelancer.username},\n\n"
            f"Your proposal for '{proposal.job.title}' was not selected.\n\n"
            f"Best regards,\nEverest Team"
        )
        sms_message = f"Your proposal for '{proposal.job.title}' was not selected."
        send_notification(freelancer, email_subject, email_message, sms_message)

        return Response({
            "status": "success",
            "message": "Proposal rejected.",
            "proposal": ProposalSerializer(proposal).data
        })


class ProposalWithdrawView(APIView):
    permission_classes = [IsAuthenticated, IsFreelancer]

    @swagger_auto_schema(
        operation_description="Withdraw your own pending proposal.",
        responses={200: ProposalSerializer, 400: 'Bad Request', 403: 'Forbidden', 404: 'Not Found'}
    )
    def patch(self, request, pk):
        proposal = get_proposal_or_404(pk)
        proposal = proposal_service.withdraw_proposal(proposal, request.user)

        creator = proposal.job.creator
        email_subject = f"Proposal Withdrawn: {proposal.job.title}"
        email_message = (
            f"Dear {creator.first_name or creator.username},\n\n"
            f"{request.user.username} has withdrawn their proposal for '{proposal.job.title}'.\n\n"
            f"Best regards,\nEverest Team"
        )
        sms_message = f"{request.user.username} withdrew a proposal for '{proposal.job.title}'."
        send_notification(creator, email_subject, email_message, sms_message)

        return Response({
            "status": "success",
            "message": "Proposal withdrawn.",
            "proposal": ProposalSerializer(proposal).data
        })
