"""CloudFront edge cache invalidation."""

from __future__ import annotations

import logging
import time
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from .api import create_session
from .config import config
from .exceptions import ConfigurationError, InvalidationError
from .utils import WILDCARD_INVALIDATION_PATH

logger = logging.getLogger(__name__)


class CloudFrontInvalidator:
    """Requests a full invalidation of one CloudFront distribution."""

    def __init__(
        self,
        distribution_id: str | None = None,
        region: str | None = None,
        profile: str | None = None,
        client: Any | None = None,
    ):
        """Initialize the invalidator.

        Args:
            distribution_id: CloudFront distribution ID (uses config if not
                provided)
            region: AWS region for the session
            profile: AWS profile name
            client: Pre-built boto3 CloudFront client (mainly for tests)

        Raises:
            ConfigurationError: If no distribution ID is available
        """
        self.distribution_id = distribution_id or config.distribution_id
        if not self.distribution_id:
            raise ConfigurationError(
                "CloudFront distribution not configured. "
                "Use --distribution or set PYGITS3_DISTRIBUTION_ID."
            )
        if client is None:
            client = create_session(
                region or config.region, profile or config.profile
            ).client("cloudfront")
        self._client = client

    def invalidate(self) -> str:
        """Invalidate every cached path of the distribution.

        The request always covers ``/*``; it carries no information about
        which objects changed.

        Returns:
            ID of the created invalidation

        Raises:
            InvalidationError: If CloudFront rejects the request
        """
        logger.info("Invalidating distribution: %s", self.distribution_id)
        caller_reference = str(int(time.time() * 1000))
        try:
            response = self._client.create_invalidation(
                DistributionId=self.distribution_id,
                InvalidationBatch={
                    "Paths": {
                        "Quantity": 1,
                        "Items": [WILDCARD_INVALIDATION_PATH],
                    },
                    "CallerReference": caller_reference,
                },
            )
        except (ClientError, BotoCoreError) as e:
            raise InvalidationError(
                f"Invalidation of distribution {self.distribution_id} failed: {e}"
            ) from e

        invalidation_id = response.get("Invalidation", {}).get("Id", "")
        logger.debug(
            "Created invalidation %s (caller reference %s)",
            invalidation_id,
            caller_reference,
        )
        return invalidation_id
