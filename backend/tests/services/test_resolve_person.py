"""Person Resolver - tests for lookup precedence and reference validation.

Tests cover:
    - Exact email beats an unrelated person whose name contains the same text
    - Exact name, substring email, substring name, in that order
    - Orphaned channels fall through to name matching
    - Only blank references rejected; "@" tokens of any shape are looked up
"""

import pytest

from trackref.core.domain_types import ChannelProvider, EntityKind
from trackref.core.errors import InvalidPersonReferenceError, PersonNotFoundError
from trackref.services.resolve_person import PersonResolver, validate_person_reference


@pytest.mark.asyncio
async def test_exact_email(store):
    person = await PersonResolver(store).resolve("bob@example.com")
    assert person.id == "person-bob"


@pytest.mark.asyncio
async def test_exact_email_beats_substring_name(store):
    store.seed(EntityKind.PERSON, {
        "id": "person-decoy", "name": "fan of bob@example.com",
    })
    person = await PersonResolver(store).resolve("bob@example.com")
    assert person.id == "person-bob"


@pytest.mark.asyncio
async def test_exact_name(store):
    assert (await PersonResolver(store).resolve("Alice Smith")).id == "person-alice"


@pytest.mark.asyncio
async def test_substring_email_before_substring_name(store):
    store.seed(EntityKind.PERSON, {"id": "person-carol", "name": "Carol example"})
    person = await PersonResolver(store).resolve("example")
    assert person.id in {"person-alice", "person-bob"}


@pytest.mark.asyncio
async def test_substring_name_is_case_insensitive(store):
    assert (await PersonResolver(store).resolve("jones")).id == "person-bob"


@pytest.mark.asyncio
async def test_orphaned_channel_falls_through_to_name(store):
    store.seed(EntityKind.CHANNEL, {
        "id": "ch-ghost", "attached_to": "person-deleted",
        "provider": ChannelProvider.EMAIL.value, "value": "ghost@example.com",
    })
    store.seed(EntityKind.PERSON, {"id": "person-ghost", "name": "ghost@example.com"})
    person = await PersonResolver(store).resolve("ghost@example.com")
    assert person.id == "person-ghost"


@pytest.mark.asyncio
async def test_not_found_returns_none_and_require_raises(store):
    resolver = PersonResolver(store)
    assert await resolver.resolve("Zed") is None
    with pytest.raises(PersonNotFoundError) as exc_info:
        await resolver.require("Zed")
    assert exc_info.value.identifier == "Zed"


@pytest.mark.asyncio
async def test_non_email_channel_not_used_for_exact_match(store):
    store.seed(EntityKind.CHANNEL, {
        "id": "ch-phone", "attached_to": "person-alice",
        "provider": ChannelProvider.PHONE.value, "value": "Bob Jones",
    })
    assert (await PersonResolver(store).resolve("Bob Jones")).id == "person-bob"


@pytest.mark.parametrize("value", ["", "   ", None])
def test_blank_references_rejected(value):
    with pytest.raises(InvalidPersonReferenceError):
        validate_person_reference(value)


def test_valid_references_stripped():
    assert validate_person_reference("  Alice ") == "Alice"
    assert validate_person_reference("a.b@c.io") == "a.b@c.io"
    assert validate_person_reference("a@b") == "a@b"


@pytest.mark.asyncio
async def test_email_without_domain_dot_resolves(store):
    store.seed(EntityKind.PERSON, {"id": "person-ops", "name": "Ops Rota"})
    store.seed(EntityKind.CHANNEL, {
        "id": "ch-ops", "attached_to": "person-ops",
        "provider": ChannelProvider.EMAIL.value, "value": "ops@localhost",
    })
    person = await PersonResolver(store).resolve("ops@localhost")
    assert person.id == "person-ops"


@pytest.mark.asyncio
async def test_name_containing_at_sign_resolves(store):
    store.seed(EntityKind.PERSON, {"id": "person-bot", "name": "deploy@ci"})
    assert (await PersonResolver(store).resolve("deploy@ci")).id == "person-bot"


@pytest.mark.asyncio
async def test_unmatched_at_token_is_not_found(store):
    resolver = PersonResolver(store)
    assert await resolver.resolve("@zed") is None
    with pytest.raises(PersonNotFoundError):
        await resolver.require("@zed")
