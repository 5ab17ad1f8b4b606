from datetime import timedelta

from django.conf import settings
from django.utils import timezone


def donation_interval_days():
    return settings.BLOODBANK.get('DONATION_INTERVAL_DAYS', 56)


def next_eligible_date(last_donation):
    """Date a donor may give again, or None if they never donated."""
    if last_donation is None:
        return None
    return last_donation + timedelta(days=donation_interval_days())


def is_eligible(last_donation, now=None):
    """
    True when the donor never donated or at least the minimum interval of
    whole days has passed since last_donation.
    """
    if last_donation is None:
        return True
    if now is None:
        now = timezone.now()
    return (now - last_donation).days >= donation_interval_days()
