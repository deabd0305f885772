"""Board mutations."""

from roomboard.services.mutations.add_payment import AddPaymentMutation
from roomboard.services.mutations.base_mutation import Mutation, require_amount
from roomboard.services.mutations.check_in import CheckInMutation
from roomboard.services.mutations.check_out import CheckOutMutation

__all__ = [
    "Mutation",
    "CheckInMutation",
    "CheckOutMutation",
    "AddPaymentMutation",
    "require_amount",
]
