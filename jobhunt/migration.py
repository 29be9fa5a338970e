"""Upgrade persisted records to the current model.

Older records carried a single free-text ``recruitingContact`` string. The
current model keeps recruiter details in a structured ``contacts`` list, so
a legacy record is upgraded by turning that string into one Contact.
"""

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any

from .models import Contact, Job
from .records import coerce_contact, coerce_job, coerce_many

logger = logging.getLogger(__name__)

LEGACY_CONTACT_FIELD = "recruitingContact"


class RecordShape(str, Enum):
    """Which layout a raw persisted record is in."""

    CURRENT = "current"  # populated contacts list
    LEGACY = "legacy"  # deprecated contact string, no contacts
    BARE = "bare"  # neither


def as_mapping(raw: Any) -> Mapping:
    if isinstance(raw, Job):
        return raw.to_document()
    if isinstance(raw, Mapping):
        return raw
    return {}


def classify(raw: Any) -> RecordShape:
    data = as_mapping(raw)
    contacts = data.get("contacts")
    if isinstance(contacts, list) and any(isinstance(c, Mapping) for c in contacts):
        return RecordShape.CURRENT
    legacy = data.get(LEGACY_CONTACT_FIELD)
    if isinstance(legacy, str) and legacy.strip():
        return RecordShape.LEGACY
    return RecordShape.BARE


def resolve_contacts(raw: Any) -> list[Contact]:
    """Return the contacts list a raw record should have after migration."""
    data = as_mapping(raw)
    shape = classify(data)
    if shape is RecordShape.CURRENT:
        return coerce_many(data.get("contacts"), coerce_contact)
    if shape is RecordShape.LEGACY:
        logger.debug(f"Migrating legacy contact on record {data.get('id')!r}")
        return [Contact(organization=data[LEGACY_CONTACT_FIELD])]
    return []


def migrate(raw: Any) -> Job:
    """Return a current-model Job for one raw persisted record.

    Never raises on malformed input, and applying it twice gives the same
    result as applying it once.
    """
    data = as_mapping(raw)
    return coerce_job(data, contacts=resolve_contacts(data))
