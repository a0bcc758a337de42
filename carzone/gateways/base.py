"""Base payment gateway interface.

All gateway adapters must implement this interface.
Business logic should NOT live in adapters - only gateway communication.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum

# Gateway receipts are limited to 40 characters
MAX_RECEIPT_LENGTH = 40


class GatewayType(str, Enum):
    """Supported payment gateways."""

    RAZORPAY = "razorpay"


@dataclass
class GatewayOrder:
    """Remote order created before the customer pays."""

    id: str
    amount: int
    currency: str
    receipt: str
    status: str = "created"
    raw_response: dict = field(default_factory=dict)


class PaymentGateway(ABC):
    """Abstract base class for payment gateways."""

    @property
    @abstractmethod
    def gateway_type(self) -> GatewayType:
        """Return the gateway type."""
        pass

    @property
    def key_id(self) -> str | None:
        """Public key handed to checkout clients, if any."""
        return None

    @abstractmethod
    async def create_order(
        self,
        amount: int,
        currency: str,
        receipt: str,
    ) -> GatewayOrder:
        """Create a payment order.

        Args:
            amount: Amount in smallest currency unit (paise)
            currency: Currency code (INR)
            receipt: Merchant receipt, at most 40 characters

        Returns:
            GatewayOrder with the gateway-assigned order id

        Raises:
            ExternalServiceError: If the gateway is unreachable or rejects the order
        """
        pass
