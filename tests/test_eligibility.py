from datetime import timedelta

import pytest
from django.utils import timezone

from accounts.eligibility import is_eligible, next_eligible_date


NOW = timezone.now()


def test_never_donated_is_eligible():
    assert is_eligible(None, NOW) is True
    assert next_eligible_date(None) is None


@pytest.mark.parametrize('days_ago, expected', [
    (10, False),
    (55, False),
    (56, True),
    (90, True),
])
def test_eligibility_boundary(days_ago, expected):
    assert is_eligible(NOW - timedelta(days=days_ago), NOW) is expected


def test_partial_day_is_floored():
    last = NOW - timedelta(days=55, hours=23, minutes=59)
    assert is_eligible(last, NOW) is False


def test_next_eligible_date_is_56_days_later():
    last = NOW - timedelta(days=10)
    assert next_eligible_date(last) == last + timedelta(days=56)


def test_interval_comes_from_settings(settings):
    settings.BLOODBANK = {**settings.BLOODBANK, 'DONATION_INTERVAL_DAYS': 90}
    assert is_eligible(NOW - timedelta(days=60), NOW) is False


def test_user_check_eligibility_uses_last_donation(make_user):
    user = make_user('recent', last_donation=timezone.now() - timedelta(days=3))
    assert user.check_eligibility() is False
    assert user.next_eligible_date == user.last_donation + timedelta(days=56)
