from src.service.shared_kernel.domain.value_object.pricing import Pricing
from src.service.shared_kernel.domain.value_object.verification import (
    Cancellation,
    StaffNote,
    Verification,
)


__all__ = ['Cancellation', 'Pricing', 'StaffNote', 'Verification']
