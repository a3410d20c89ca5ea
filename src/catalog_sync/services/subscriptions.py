"""Provisioning of the commercetools subscription that feeds ``/deltaSync``."""

from typing import Any

import structlog

from catalog_sync.config import Settings
from catalog_sync.exceptions import ConfigurationError
from catalog_sync.infrastructure.commercetools import CommercetoolsClient
from catalog_sync.services.events import PRODUCT_RESOURCE, EventKind

logger = structlog.get_logger()

PRODUCT_MESSAGE_TYPES = [
    kind.value for kind in EventKind if kind.value.startswith("Product")
]


def build_subscription_draft(
    key: str, project_id: str, topic: str, format_type: str = "Platform"
) -> dict[str, Any]:
    """SubscriptionDraft for a Google Pub/Sub destination."""
    if not project_id or not topic:
        raise ConfigurationError(
            "Subscription destination requires SUBSCRIPTION_PUBSUB_PROJECT_ID "
            "and SUBSCRIPTION_PUBSUB_TOPIC"
        )
    draft_format: dict[str, Any] = {"type": format_type}
    if format_type == "CloudEvents":
        draft_format["cloudEventsVersion"] = "1.0"
    return {
        "key": key,
        "destination": {
            "type": "GoogleCloudPubSub",
            "projectId": project_id,
            "topic": topic,
        },
        "messages": [{"resourceTypeId": PRODUCT_RESOURCE, "types": PRODUCT_MESSAGE_TYPES}],
        "format": draft_format,
    }


class SubscriptionManager:
    """Create, inspect and remove the product subscription by key."""

    def __init__(self, client: CommercetoolsClient, settings: Settings):
        self.client = client
        self.settings = settings

    @property
    def key(self) -> str:
        return self.settings.subscription_key

    def draft(self) -> dict[str, Any]:
        return build_subscription_draft(
            self.key,
            self.settings.subscription_pubsub_project_id,
            self.settings.subscription_pubsub_topic,
            self.settings.subscription_format,
        )

    async def get(self) -> dict[str, Any] | None:
        return await self.client.get_optional(f"subscriptions/key={self.key}")

    async def create(self) -> dict[str, Any]:
        """Create the subscription unless one with the same key exists."""
        existing = await self.get()
        if existing is not None:
            logger.info("Subscription already exists", key=self.key, id=existing.get("id"))
            return existing
        subscription = await self.client.post("subscriptions", self.draft())
        logger.info("Subscription created", key=self.key, id=subscription.get("id"))
        return subscription

    async def delete(self) -> bool:
        """Delete the subscription; False when there was nothing to delete."""
        existing = await self.get()
        if existing is None:
            logger.info("Subscription not found, nothing to clean up", key=self.key)
            return False
        deleted = await self.client.delete_optional(
            f"subscriptions/key={self.key}", params={"version": existing["version"]}
        )
        if deleted is None:
            logger.info("Subscription already removed", key=self.key)
            return False
        logger.info("Subscription deleted", key=self.key)
        return True
