"""
Order status labels and transition policies

Encodes which status changes are allowed and keeps "what is allowed" separate
from "how persistence occurs". The default policy imposes no restriction; the
strict policy is opt-in through ORDER_STATUS_POLICY.
"""

from enum import Enum
from typing import Dict, Set

from backoffice.business.commerce.errors import InvalidArgumentError, StatusTransitionError


class OrderStatus(str, Enum):
    PENDING = 'pending'
    PROCESSING = 'processing'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'

    @classmethod
    def parse(cls, value) -> 'OrderStatus':
        """
        Coerce a raw label to an OrderStatus.

        Raises:
            InvalidArgumentError: If the value is not one of the four labels
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            allowed = ', '.join(s.value for s in cls)
            raise InvalidArgumentError(
                f"Invalid order status '{value}'. Expected one of: {allowed}",
                field='status',
            )

    def __str__(self):
        return self.value


class FreeTransitionPolicy:
    """
    Any status may follow any status.

    This mirrors how orders have always been handled in the dashboard:
    a completed order can be cancelled, a cancelled one re-opened.
    """

    name = 'free'

    def can_transition(self, from_status: OrderStatus, to_status: OrderStatus) -> bool:
        return True

    def validate_transition(self, from_status: OrderStatus, to_status: OrderStatus) -> None:
        """
        Raises:
            StatusTransitionError: If the transition is not allowed
        """
        if not self.can_transition(from_status, to_status):
            raise StatusTransitionError(str(from_status), str(to_status))

    def get_allowed_transitions(self, from_status: OrderStatus) -> Set[OrderStatus]:
        return set(OrderStatus)


class StrictTransitionPolicy(FreeTransitionPolicy):
    """
    Forward-only lifecycle: pending → processing → completed, cancel at any
    non-terminal point. Completed and cancelled are terminal.
    """

    name = 'strict'

    TERMINAL_STATES = {OrderStatus.COMPLETED, OrderStatus.CANCELLED}

    TRANSITIONS: Dict[OrderStatus, Set[OrderStatus]] = {
        OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.COMPLETED, OrderStatus.CANCELLED},
        OrderStatus.PROCESSING: {OrderStatus.COMPLETED, OrderStatus.CANCELLED},
        # COMPLETED and CANCELLED are terminal
    }

    def can_transition(self, from_status: OrderStatus, to_status: OrderStatus) -> bool:
        # Staying in the same state is a no-op
        if from_status == to_status:
            return True
        if from_status in self.TERMINAL_STATES:
            return False
        return to_status in self.TRANSITIONS.get(from_status, set())

    def get_allowed_transitions(self, from_status: OrderStatus) -> Set[OrderStatus]:
        if from_status in self.TERMINAL_STATES:
            return set()
        return set(self.TRANSITIONS.get(from_status, set()))


_POLICIES = {
    FreeTransitionPolicy.name: FreeTransitionPolicy,
    StrictTransitionPolicy.name: StrictTransitionPolicy,
}


def policy_for(name: str) -> FreeTransitionPolicy:
    """
    Build the transition policy named in configuration.

    Raises:
        ValueError: For an unknown policy name (a configuration mistake, not a request error)
    """
    try:
        return _POLICIES[(name or FreeTransitionPolicy.name).lower()]()
    except KeyError:
        raise ValueError(f"Unknown ORDER_STATUS_POLICY '{name}'. Expected one of: {', '.join(sorted(_POLICIES))}")
