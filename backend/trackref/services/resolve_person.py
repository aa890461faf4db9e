"""Person Resolver - finds the person behind an assignee or lead reference.

Invariants:
    - Lookup order, each step only when every earlier one found nothing:
        1. exact email channel (provider email, value == reference)
        2. exact person name
        3. substring match on channel values ($like, wildcards escaped)
        4. substring match on person names
    - A channel whose owning person cannot be loaded is skipped, never fatal
    - resolve() returns None when all steps are exhausted; require() raises
      PersonNotFoundError carrying the raw reference
    - Only a blank reference raises InvalidPersonReferenceError; any other
      text, "@" tokens included, goes through the lookup as given

Design Decisions:
    - Exact steps run before substring steps, so an exact email always beats
      an unrelated person whose name merely contains the same text
    - Substring matching is case-insensitive; exact matching is not
"""

import logging

from trackref.core.domain_types import ChannelProvider, EntityKind
from trackref.core.errors import InvalidPersonReferenceError, PersonNotFoundError
from trackref.core.store_protocol import DocumentStore, Record
from trackref.schemas.entities import Channel, Person
from trackref.services.locate_entities import EntityLocator

logger = logging.getLogger(__name__)

_SUBSTRING_CANDIDATES = 20


def validate_person_reference(reference: str) -> str:
    """Stripped reference; InvalidPersonReferenceError when nothing is left."""
    value = (reference or "").strip()
    if not value:
        raise InvalidPersonReferenceError(reference or "")
    return value


class PersonResolver:
    """Email-then-name person lookup with exact-before-substring precedence."""

    def __init__(self, store: DocumentStore, locator: EntityLocator | None = None):
        self.store = store
        self.locator = locator or EntityLocator(store)

    async def _owner_of(self, channels: list[Record]) -> Person | None:
        for record in channels:
            channel = Channel.model_validate(record)
            person = await self.store.find_one(
                EntityKind.PERSON, {"id": channel.attached_to},
            )
            if person is not None:
                return Person.model_validate(person)
            logger.warning(
                f"Channel {channel.id} points at missing person {channel.attached_to}",
                extra={"entity_kind": EntityKind.CHANNEL.value},
            )
        return None

    async def resolve(self, reference: str) -> Person | None:
        value = validate_person_reference(reference)

        exact_channels = await self.store.find_all(
            EntityKind.CHANNEL,
            {"provider": ChannelProvider.EMAIL.value, "value": value},
        )
        person = await self._owner_of(exact_channels)
        if person is not None:
            return person

        record = await self.store.find_one(EntityKind.PERSON, {"name": value})
        if record is not None:
            return Person.model_validate(record)

        like_channels = await self.locator.find_by_substring(
            EntityKind.CHANNEL, {}, "value", value, limit=_SUBSTRING_CANDIDATES,
        )
        person = await self._owner_of(like_channels)
        if person is not None:
            return person

        like_persons = await self.locator.find_by_substring(
            EntityKind.PERSON, {}, "name", value, limit=1,
        )
        if like_persons:
            return Person.model_validate(like_persons[0])
        return None

    async def require(self, reference: str) -> Person:
        person = await self.resolve(reference)
        if person is None:
            raise PersonNotFoundError(reference)
        return person
