"""
Status transition tables for donations and blood requests.

Each table maps a current status to the statuses an admin may move it to.
A status with no outgoing transitions is terminal.
"""
from accounts.exceptions import InvalidInput, InvalidState


DONATION_TRANSITIONS = {
    'scheduled': frozenset({'completed', 'cancelled', 'rejected'}),
    'completed': frozenset(),
    'cancelled': frozenset(),
    'rejected': frozenset(),
}

REQUEST_TRANSITIONS = {
    'pending': frozenset({'approved', 'cancelled', 'expired'}),
    'approved': frozenset({'fulfilled', 'cancelled', 'expired'}),
    'fulfilled': frozenset(),
    'cancelled': frozenset(),
    'expired': frozenset(),
}

DELETABLE_REQUEST_STATUSES = frozenset({'pending', 'cancelled'})


def check_transition(transitions, current, target, label):
    """Return target if (current -> target) is legal, else raise."""
    if target not in transitions:
        raise InvalidInput(f"Unknown {label} status '{target}'")
    if target not in transitions.get(current, ()):
        raise InvalidState(f"Cannot change {label} status from '{current}' to '{target}'")
    return target
