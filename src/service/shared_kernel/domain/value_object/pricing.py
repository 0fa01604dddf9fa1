import attrs

from src.platform.exception.exceptions import DomainError


@attrs.frozen
class Pricing:
    is_free: bool = True
    price: int = 0  # minor units (cents)
    currency: str = 'USD'

    def __attrs_post_init__(self) -> None:
        if self.price < 0:
            raise DomainError('price must not be negative')
        if not self.is_free and self.price == 0:
            raise DomainError('paid events need a positive price')

    @property
    def amount_due(self) -> int:
        return 0 if self.is_free else self.price
