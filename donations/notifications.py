import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


def admin_recipients():
    if settings.ADMIN_NOTIFICATION_EMAILS:
        return list(settings.ADMIN_NOTIFICATION_EMAILS)
    User = get_user_model()
    return list(
        User.objects.filter(role='admin', is_active=True)
        .exclude(email='')
        .values_list('email', flat=True)
    )


def notify_new_request(blood_request):
    """
    Email the admins about a newly created blood request.

    Fire-and-forget: a delivery failure is logged and reported as False,
    never raised to the caller.
    """
    recipients = admin_recipients()
    if not recipients:
        logger.info("No admin recipients for blood request %s notification", blood_request.pk)
        return False

    subject = f"New Blood Request - {blood_request.blood_type} ({blood_request.urgency} priority)"
    message = (
        "New blood request received\n\n"
        f"Patient: {blood_request.patient_name}\n"
        f"Blood type: {blood_request.blood_type}\n"
        f"Units needed: {blood_request.units_needed}\n"
        f"Urgency: {blood_request.urgency}\n"
        f"Hospital: {blood_request.hospital_name}\n"
        f"Required date: {blood_request.required_date:%Y-%m-%d}\n"
        f"Medical reason: {blood_request.medical_reason}\n"
    )
    try:
        send_mail(subject, message, settings.DEFAULT_FROM_EMAIL, recipients)
    except Exception:
        logger.exception("Failed to send notification for blood request %s", blood_request.pk)
        return False

    logger.info("Notified %d admin(s) of blood request %s", len(recipients), blood_request.pk)
    return True
