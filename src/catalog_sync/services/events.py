"""Webhook event normalization.

commercetools delivers notifications in several envelopes (direct JSON, a
``{"data": ...}`` wrapper, Pub/Sub push with base64 ``message.data``, or
CloudEvents) and three notification shapes (Message, Change, Event).
``normalize_event`` unwraps the envelope and then tries an ordered chain of
small parsers, each returning a ``NormalizedEvent`` or ``None``.
"""

import base64
import binascii
import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

import orjson
import structlog

logger = structlog.get_logger()

PRODUCT_RESOURCE = "product"


@dataclass(frozen=True)
class NormalizedEvent:
    """What happened to which resource, independent of delivery shape."""

    resource_type_id: str
    resource_id: str
    event_type: str
    resource_version: int | None = None
    source: str = ""

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.resource_type_id, self.resource_id, self.event_type)

    @property
    def kind(self) -> "EventKind":
        return EventKind.from_name(self.event_type)


class SyncAction(str, Enum):
    UPSERT = "upsert"
    DELETE = "delete"
    IGNORE = "ignore"


class EventKind(str, Enum):
    """Recognized product event names."""

    PRODUCT_CREATED = "ProductCreated"
    PRODUCT_PUBLISHED = "ProductPublished"
    PRODUCT_DELETED = "ProductDeleted"
    PRODUCT_UNPUBLISHED = "ProductUnpublished"

    PRODUCT_VARIANT_ADDED = "ProductVariantAdded"
    PRODUCT_VARIANT_REMOVED = "ProductVariantRemoved"
    PRODUCT_VARIANT_UPDATED = "ProductVariantUpdated"
    PRODUCT_PRICE_CHANGED = "ProductPriceChanged"
    PRODUCT_PRICE_REMOVED = "ProductPriceRemoved"
    PRODUCT_PRICE_ADDED = "ProductPriceAdded"
    PRODUCT_SLUG_CHANGED = "ProductSlugChanged"
    PRODUCT_NAME_CHANGED = "ProductNameChanged"
    PRODUCT_DESCRIPTION_CHANGED = "ProductDescriptionChanged"
    PRODUCT_META_TITLE_CHANGED = "ProductMetaTitleChanged"
    PRODUCT_META_DESCRIPTION_CHANGED = "ProductMetaDescriptionChanged"
    PRODUCT_META_KEYWORDS_CHANGED = "ProductMetaKeywordsChanged"
    PRODUCT_CATEGORY_ADDED = "ProductCategoryAdded"
    PRODUCT_CATEGORY_REMOVED = "ProductCategoryRemoved"
    PRODUCT_IMAGES_CHANGED = "ProductImagesChanged"
    PRODUCT_ATTRIBUTE_ADDED = "ProductAttributeAdded"
    PRODUCT_ATTRIBUTE_REMOVED = "ProductAttributeRemoved"
    PRODUCT_ATTRIBUTE_CHANGED = "ProductAttributeChanged"
    PRODUCT_STATE_CHANGED = "ProductStateChanged"
    PRODUCT_TAX_CATEGORY_CHANGED = "ProductTaxCategoryChanged"
    PRODUCT_SEARCH_KEYWORDS_CHANGED = "ProductSearchKeywordsChanged"
    PRODUCT_EXTERNAL_IMAGE_CHANGED = "ProductExternalImageChanged"
    PRODUCT_ASSET_ADDED = "ProductAssetAdded"
    PRODUCT_ASSET_REMOVED = "ProductAssetRemoved"
    PRODUCT_ASSET_CHANGED = "ProductAssetChanged"

    # Change notifications
    RESOURCE_CREATED = "ResourceCreated"
    RESOURCE_UPDATED = "ResourceUpdated"
    RESOURCE_DELETED = "ResourceDeleted"

    UNKNOWN = "Unknown"

    @classmethod
    def from_name(cls, name: str | None) -> "EventKind":
        try:
            return cls(name)
        except ValueError:
            return cls.UNKNOWN


_CREATED = {EventKind.PRODUCT_CREATED, EventKind.RESOURCE_CREATED}
_PUBLISHED = {EventKind.PRODUCT_PUBLISHED}
_DELETED = {EventKind.PRODUCT_DELETED, EventKind.RESOURCE_DELETED}
_UNPUBLISHED = {EventKind.PRODUCT_UNPUBLISHED}
_IGNORED = {EventKind.UNKNOWN}
_UPDATED = set(EventKind) - _CREATED - _PUBLISHED - _DELETED - _UNPUBLISHED - _IGNORED


def action_for(kind: EventKind) -> SyncAction:
    """Map every event kind to exactly one sync action."""
    if kind in _DELETED or kind in _UNPUBLISHED:
        return SyncAction.DELETE
    if kind in _IGNORED:
        return SyncAction.IGNORE
    return SyncAction.UPSERT


def action_label(kind: EventKind) -> str:
    """Label reported back to the webhook caller."""
    if kind in _CREATED:
        return "created"
    if kind in _PUBLISHED:
        return "published"
    if kind in _DELETED:
        return "deleted"
    if kind in _UNPUBLISHED:
        return "unpublished"
    if kind in _UPDATED:
        return "updated"
    return "ignored"


# =============================================================================
# Envelope unwrapping
# =============================================================================


def _decode_text(text: str) -> Any:
    """JSON-decoded value of ``text``, or the text itself if it is not JSON."""
    try:
        return orjson.loads(text)
    except orjson.JSONDecodeError:
        return text


def _decode_base64(value: str) -> Any:
    try:
        text = base64.b64decode(value, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return value
    return _decode_text(text)


def unwrap_envelope(payload: Any) -> Any:
    """Strip transport envelopes; returns a dict, raw text, or the input."""
    if isinstance(payload, (bytes, bytearray)):
        payload = payload.decode("utf-8", errors="replace")
    if isinstance(payload, str):
        payload = _decode_text(payload)
    if not isinstance(payload, dict):
        return payload

    # Pub/Sub push: {"message": {"data": "<base64>", ...}, "subscription": ...}
    message = payload.get("message")
    if isinstance(message, dict) and isinstance(message.get("data"), str):
        return _descend(_decode_base64(message["data"]))

    # CloudEvents binary data
    if isinstance(payload.get("data_base64"), str):
        return _descend(_decode_base64(payload["data_base64"]))

    return _descend(payload)


def _descend(payload: Any) -> Any:
    """Step into a ``data`` or ``message`` wrapper, e.g. a CloudEvent body."""
    if not isinstance(payload, dict):
        return payload
    data = payload.get("data")
    if isinstance(data, dict):
        return data
    if isinstance(data, str) and data:
        decoded = _decode_text(data)
        return decoded if isinstance(decoded, dict) else _decode_base64(data)

    message = payload.get("message")
    if isinstance(message, dict) and "resource" not in payload:
        return message
    return payload


# =============================================================================
# Parsers
# =============================================================================


def _first(*values: Any) -> str | None:
    for value in values:
        if isinstance(value, str) and value:
            return value
    return None


def _version(payload: dict[str, Any]) -> int | None:
    for key in ("resourceVersion", "version"):
        value = payload.get(key)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def _resource(payload: dict[str, Any]) -> dict[str, Any]:
    resource = payload.get("resource")
    return resource if isinstance(resource, dict) else {}


def _build(
    source: str,
    payload: dict[str, Any],
    type_id: str | None,
    resource_id: str | None,
    event_type: str | None,
) -> NormalizedEvent | None:
    if not (type_id and resource_id and event_type):
        return None
    return NormalizedEvent(
        resource_type_id=type_id,
        resource_id=resource_id,
        event_type=event_type,
        resource_version=_version(payload),
        source=source,
    )


def parse_message_notification(payload: Any) -> NormalizedEvent | None:
    if not isinstance(payload, dict) or payload.get("notificationType") != "Message":
        return None
    resource = _resource(payload)
    return _build(
        "message",
        payload,
        _first(resource.get("typeId")),
        _first(resource.get("id")),
        _first(payload.get("type")),
    )


def parse_change_notification(payload: Any) -> NormalizedEvent | None:
    if not isinstance(payload, dict) or payload.get("notificationType") != "Change":
        return None
    return _build(
        "change",
        payload,
        _first(payload.get("resourceTypeId")),
        _first(payload.get("resourceId")),
        _first(payload.get("changeType"), payload.get("type")),
    )


def parse_event_notification(payload: Any) -> NormalizedEvent | None:
    if not isinstance(payload, dict) or payload.get("notificationType") != "Event":
        return None
    return _build(
        "event",
        payload,
        _first(payload.get("resourceType")),
        _first(payload.get("resourceId")),
        _first(payload.get("type")),
    )


def parse_generic_fields(payload: Any) -> NormalizedEvent | None:
    """Best effort over every field name any known shape uses."""
    if not isinstance(payload, dict):
        return None
    resource = _resource(payload)
    return _build(
        "generic",
        payload,
        _first(
            resource.get("typeId"),
            payload.get("resourceTypeId"),
            payload.get("resourceType"),
            payload.get("typeId"),
        ),
        _first(resource.get("id"), payload.get("resourceId"), payload.get("id")),
        _first(
            payload.get("type"),
            payload.get("messageType"),
            payload.get("eventType"),
            payload.get("changeType"),
        ),
    )


_ID_PATTERN = re.compile(r'"id"\s*:\s*"([^"]+)"')
_TYPE_PATTERN = re.compile(r'"type"\s*:\s*"([^"]+)"')
# Only the notification's own resource reference; projections embed others.
_RESOURCE_PATTERN = re.compile(r'"resource"\s*:\s*\{([^}]*)')
_TYPE_ID_PATTERN = re.compile(r'"typeId"\s*:\s*"([^"]+)"')


def parse_raw_text(payload: Any) -> NormalizedEvent | None:
    """Last resort for decoded text that is not valid JSON."""
    if not isinstance(payload, str):
        return None
    resource = _RESOURCE_PATTERN.search(payload)
    scope = resource.group(1) if resource else ""
    id_match = _ID_PATTERN.search(scope) or _ID_PATTERN.search(payload)
    type_match = _TYPE_PATTERN.search(payload)
    if not (id_match and type_match):
        return None
    type_id_match = _TYPE_ID_PATTERN.search(scope)
    return NormalizedEvent(
        resource_type_id=type_id_match.group(1) if type_id_match else PRODUCT_RESOURCE,
        resource_id=id_match.group(1),
        event_type=type_match.group(1),
        source="raw",
    )


EventParser = Callable[[Any], NormalizedEvent | None]

PARSERS: tuple[EventParser, ...] = (
    parse_message_notification,
    parse_change_notification,
    parse_event_notification,
    parse_generic_fields,
    parse_raw_text,
)


def normalize_event(payload: Any) -> NormalizedEvent | None:
    """Unwrap ``payload`` and return the first parser match, if any."""
    working = unwrap_envelope(payload)
    for parser in PARSERS:
        event = parser(working)
        if event is not None:
            return event
    logger.warning("Could not parse event payload", payload_type=type(working).__name__)
    return None
