import logging
import re
from django.conf import settings
from django.core.mail import send_mail
from twilio.base.exceptions import TwilioException
from twilio.rest import Client as TwilioClient

from core.constants import PartyRole
from core.exceptions import forbidden, not_found
from .models import Job

logger = logging.getLogger(__name__)

PHONE_PATTERN = re.compile(r'^\+\d{9,15}$')


def get_job_or_404(job_id, message="Contract not found"):
    try:
        return Job.objects.get(pk=job_id)
    except Job.DoesNotExist:
        raise not_found(message)


def ensure_creator(job, user, message=None):
    if not job.is_creator(user.id):
        raise forbidden(message or "You are not authorized to perform this action")


def ensure_contractor(job, user, message=None):
    if not job.is_contractor(user.id):
        raise forbidden(message or "Only the contractor can perform this action")


def get_contractor(job):
    party = job.parties.filter(role=PartyRole.CONTRACTOR).select_related('address').first()
    return party.address if party else None


def send_notification(user, subject, email_message, sms_message):
    """
    Send notifications to users via email and SMS.

    Runs after a transition has been committed, so delivery failures are
    logged and never raised back to the caller.
    """
    if user is None:
        return

    if user.email:
        try:
            send_mail(
                subject=subject,
                message=email_message,
                from_email=settings.DEFAULT_FROM_EMAIL,
                recipient_list=[user.email],
                fail_silently=False,
            )
            logger.info(f"Email notification sent to user {user.id}")
        except Exception as e:
            logger.error(f"Failed to send email to {user.email}: {str(e)}")

    if not user.phone_number or not settings.TWILIO_ACCOUNT_SID:
        return
    if not PHONE_PATTERN.match(user.phone_number):
        logger.warning(f"Invalid phone number format for user {user.id}: {user.phone_number}")
        return
    try:
        twilio_client = TwilioClient(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)
        twilio_client.messages.create(
            body=sms_message,
            from_=settings.TWILIO_PHONE_NUMBER,
            to=user.phone_number
        )
        logger.info(f"SMS notification sent to user {user.id}")
    except (TwilioException, OSError) as e:
        logger.error(f"Failed to send SMS to {user.phone_number}: {str(e)}")
