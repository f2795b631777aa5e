"""Builder Program credentials and request signing."""

import base64
import binascii
import hashlib
import hmac
import logging
import time
from dataclasses import dataclass, field
from typing import Dict, Optional

from polyrelay.core.errors import BuilderCredentialsRequiredError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuilderConfig:
    """API key, secret and passphrase issued by the Polymarket Builder Program."""

    api_key: str = ""
    secret: str = field(default="", repr=False)
    passphrase: str = field(default="", repr=False)

    @classmethod
    def from_settings(cls, settings=None) -> "BuilderConfig":
        if settings is None:
            from polyrelay.config.settings import settings
        return cls(
            api_key=settings.poly_builder_api_key,
            secret=settings.poly_builder_secret,
            passphrase=settings.poly_builder_passphrase,
        )

    def is_configured(self) -> bool:
        return bool(self.api_key and self.secret and self.passphrase)

    def validate(self, operation: str = "request") -> None:
        """
        Raises:
            BuilderCredentialsRequiredError: any of the three values is empty
        """
        missing = [
            name
            for name, value in (
                ("api_key", self.api_key),
                ("secret", self.secret),
                ("passphrase", self.passphrase),
            )
            if not value
        ]
        if missing:
            raise BuilderCredentialsRequiredError(operation, missing)

    def _secret_bytes(self) -> bytes:
        # The secret is URL-safe base64, same format as py-clob-client
        try:
            return base64.urlsafe_b64decode(self.secret)
        except (binascii.Error, ValueError):
            logger.debug("Builder secret is not base64, using raw bytes")
            return self.secret.encode("utf-8")

    def sign_request(self, method: str, path: str, timestamp: str, body: str = "") -> str:
        """
        Generate HMAC-SHA256 signature for a relayer request.

        Args:
            method: HTTP method (GET, POST, etc.)
            path: Request path
            timestamp: Unix timestamp string
            body: Request body exactly as sent

        Returns:
            URL-safe Base64-encoded signature
        """
        message = timestamp + method.upper() + path + body
        signature = hmac.new(self._secret_bytes(), message.encode("utf-8"), hashlib.sha256)
        return base64.urlsafe_b64encode(signature.digest()).decode("utf-8")

    def headers(
        self,
        method: str,
        path: str,
        body: str = "",
        timestamp: Optional[str] = None,
    ) -> Dict[str, str]:
        """
        Build authenticated headers (POLY_BUILDER_*) as per
        @polymarket/builder-signing-sdk.
        """
        self.validate(f"{method.upper()} {path}")
        timestamp = timestamp or str(int(time.time()))

        return {
            "POLY_BUILDER_API_KEY": self.api_key,
            "POLY_BUILDER_PASSPHRASE": self.passphrase,
            "POLY_BUILDER_SIGNATURE": self.sign_request(method, path, timestamp, body),
            "POLY_BUILDER_TIMESTAMP": timestamp,
            "Content-Type": "application/json",
        }
