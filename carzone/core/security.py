"""Gateway confirmation signatures.

The gateway signs ``order_id|payment_id`` with HMAC-SHA256 using the shared
key secret and sends the hex digest back with the payment callback.
"""

import hashlib
import hmac

TEST_SIGNATURE_PREFIX = "test_signature_"


def sign_payment(secret: str, order_id: str, payment_id: str) -> str:
    """Compute the hex HMAC-SHA256 signature for an order/payment pair."""
    message = f"{order_id}|{payment_id}".encode()
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def verify_payment_signature(
    secret: str,
    order_id: str,
    payment_id: str,
    signature: str,
    allow_test_signatures: bool = False,
) -> bool:
    """Check a gateway signature in constant time.

    Args:
        secret: Shared key secret
        order_id: Gateway order ID
        payment_id: Gateway payment ID
        signature: Signature supplied by the caller
        allow_test_signatures: Accept ``test_signature_*`` values (non-production only)

    Returns:
        True if the signature is valid
    """
    if allow_test_signatures and signature.startswith(TEST_SIGNATURE_PREFIX):
        return True

    expected = sign_payment(secret, order_id, payment_id)
    return hmac.compare_digest(expected.encode(), signature.encode())


def is_test_signature(signature: str) -> bool:
    return signature.startswith(TEST_SIGNATURE_PREFIX)
