"""Razorpay client.

Every call returns a GatewayResult instead of raising, so callers branch on
``result.ok`` and never see requests or HTTP errors directly.
"""
import hashlib
import hmac
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Optional

import requests
from flask import current_app

logger = logging.getLogger(__name__)

KIND_TIMEOUT = "timeout"
KIND_NETWORK = "network"
KIND_DECLINED = "declined"
KIND_SIGNATURE = "signature_mismatch"
KIND_CONFIG = "not_configured"


@dataclass
class GatewayResult:
    ok: bool
    data: Dict[str, Any] = field(default_factory=dict)
    kind: Optional[str] = None
    detail: Optional[str] = None

    @classmethod
    def success(cls, data):
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, kind, detail=None):
        return cls(ok=False, kind=kind, detail=detail)


def to_paise(amount) -> int:
    return int((Decimal(str(amount)) * 100).to_integral_value())


class RazorpayGateway:
    def __init__(self, key_id: str, key_secret: str, base_url: str, timeout: float = 10):
        self.key_id = key_id
        self.key_secret = key_secret
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_config(cls, config=None):
        cfg = config or current_app.config
        return cls(
            cfg.get("RAZORPAY_KEY_ID", ""),
            cfg.get("RAZORPAY_KEY_SECRET", ""),
            cfg.get("RAZORPAY_API_BASE", "https://api.razorpay.com/v1"),
            cfg.get("PAYMENT_GATEWAY_TIMEOUT", 10),
        )

    def _post(self, endpoint: str, payload: dict) -> GatewayResult:
        if not self.key_id or not self.key_secret:
            return GatewayResult.failure(KIND_CONFIG, "Razorpay keys are not configured")
        url = f"{self.base_url}{endpoint}"
        try:
            response = requests.post(
                url,
                json=payload,
                auth=(self.key_id, self.key_secret),
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout:
            logger.warning("Razorpay request timed out: %s", endpoint)
            return GatewayResult.failure(KIND_TIMEOUT, f"No response within {self.timeout}s")
        except requests.exceptions.RequestException as e:
            logger.error("Razorpay request failed: %s", e)
            return GatewayResult.failure(KIND_NETWORK, str(e))

        if response.status_code >= 400:
            try:
                detail = response.json().get("error", {}).get("description")
            except ValueError:
                detail = None
            return GatewayResult.failure(KIND_DECLINED, detail or f"HTTP {response.status_code}")
        return GatewayResult.success(response.json())

    def create_order(self, amount, currency: str, receipt: str, notes: dict = None) -> GatewayResult:
        return self._post("/orders", {
            "amount": to_paise(amount),
            "currency": currency,
            "receipt": receipt,
            "notes": notes or {},
        })

    def verify_payment(self, order_id: str, payment_id: str, signature: str) -> GatewayResult:
        """Check the checkout signature, HMAC-SHA256 of ``order_id|payment_id``."""
        if not self.key_secret:
            return GatewayResult.failure(KIND_CONFIG, "Razorpay keys are not configured")
        expected = hmac.new(
            self.key_secret.encode("utf-8"),
            f"{order_id}|{payment_id}".encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()
        if not hmac.compare_digest(expected, signature or ""):
            return GatewayResult.failure(KIND_SIGNATURE, "Payment signature mismatch")
        return GatewayResult.success({"orderId": order_id, "paymentId": payment_id})


def get_gateway() -> RazorpayGateway:
    return RazorpayGateway.from_config()
