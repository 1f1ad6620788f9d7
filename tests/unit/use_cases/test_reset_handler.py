"""
Unit tests for ResetHandler

Orchestration is checked with mocked collaborators; the full flow runs
against the in-memory identity store.
"""
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock
from urllib.parse import parse_qs, urlparse
from uuid import uuid4

import bcrypt
import pytest

from src.adapter.repositories.in_memory_user_repository import InMemoryUserRepository
from src.app.errors import (
    DispatchError,
    ExpiredTokenError,
    InvalidTokenError,
    NotFoundError,
    ValidationError,
)
from src.app.services.token_consumer import ResetTokenConsumer
from src.app.services.token_issuer import ResetTokenIssuer
from src.app.use_cases.auth import ResetHandler, build_reset_url
from tests.fixtures.dispatcher import RecordingDispatcher
from tests.fixtures.seed import build_user

BASE_URL = "http://test/app/"


def make_handler(uow, clock, dispatcher):
    return ResetHandler(
        uow=uow,
        clock=clock,
        dispatcher=dispatcher,
        password_min_length=8,
        reset_token_ttl=timedelta(hours=24),
        bcrypt_rounds=4,
    )


def test_default_issuer_and_consumer_share_handler_clock(uow, clock):
    handler = ResetHandler(uow, clock, RecordingDispatcher(), reset_token_ttl=timedelta(hours=2))

    assert isinstance(handler.issuer, ResetTokenIssuer)
    assert isinstance(handler.consumer, ResetTokenConsumer)
    assert handler.issuer.clock is clock
    assert handler.consumer.clock is clock
    assert handler.consumer.ttl == timedelta(hours=2)


def test_build_reset_url():
    user_id = uuid4()

    url = build_reset_url("http://host/ctx", user_id, "tok-123")

    assert url == f"http://host/ctx/setNewPassword?id={user_id}&token=tok-123"


@pytest.fixture
def mock_collaborators(mock_uow):
    user = build_user("alice")
    mock_uow.users = MagicMock()
    mock_uow.users.get_by_email = AsyncMock(return_value=user)
    issuer = MagicMock()
    issuer.issue = AsyncMock(return_value="tok-123")
    consumer = MagicMock()
    consumer.consume = AsyncMock(return_value=user)
    dispatcher = MagicMock()
    dispatcher.send_password_reset = AsyncMock()
    return user, issuer, consumer, dispatcher


@pytest.mark.asyncio
async def test_request_reset_issues_then_dispatches(mock_uow, clock, mock_collaborators):
    user, issuer, consumer, dispatcher = mock_collaborators
    handler = ResetHandler(mock_uow, clock, dispatcher, issuer=issuer, consumer=consumer)

    response = await handler.request_reset("A@B.com", BASE_URL)

    mock_uow.users.get_by_email.assert_called_once_with("a@b.com")
    issuer.issue.assert_called_once_with(user)
    dispatcher.send_password_reset.assert_called_once_with(
        user, f"{BASE_URL}setNewPassword?id={user.id}&token=tok-123"
    )
    assert "a@b.com" in response.message


@pytest.mark.asyncio
async def test_request_reset_unknown_email(mock_uow, clock, mock_collaborators):
    _, issuer, consumer, dispatcher = mock_collaborators
    mock_uow.users.get_by_email.return_value = None
    handler = ResetHandler(mock_uow, clock, dispatcher, issuer=issuer, consumer=consumer)

    with pytest.raises(NotFoundError) as exc_info:
        await handler.request_reset("nobody@example.com", BASE_URL)

    assert "nobody@example.com" in exc_info.value.message
    issuer.issue.assert_not_called()
    dispatcher.send_password_reset.assert_not_called()


@pytest.mark.asyncio
async def test_dispatch_failure_does_not_fail_request(mock_uow, clock, mock_collaborators):
    _, issuer, consumer, dispatcher = mock_collaborators
    dispatcher.send_password_reset.side_effect = DispatchError("SMTP down")
    handler = ResetHandler(mock_uow, clock, dispatcher, issuer=issuer, consumer=consumer)

    response = await handler.request_reset("a@b.com", BASE_URL)

    assert response.message
    issuer.issue.assert_called_once()


@pytest.mark.asyncio
async def test_perform_reset_rejects_short_password(mock_uow, clock, mock_collaborators):
    _, issuer, consumer, dispatcher = mock_collaborators
    handler = ResetHandler(
        mock_uow, clock, dispatcher, issuer=issuer, consumer=consumer, password_min_length=8
    )

    with pytest.raises(ValidationError) as exc_info:
        await handler.perform_reset("tok-123", "short")

    assert exc_info.value.code == "INVALID_PASSWORD"
    consumer.consume.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize("new_password", ["x" * 73, "é" * 37])
async def test_perform_reset_rejects_password_over_72_bytes(
    mock_uow, clock, mock_collaborators, new_password
):
    _, issuer, consumer, dispatcher = mock_collaborators
    handler = ResetHandler(mock_uow, clock, dispatcher, issuer=issuer, consumer=consumer)

    with pytest.raises(ValidationError) as exc_info:
        await handler.perform_reset("tok-123", new_password)

    assert exc_info.value.code == "INVALID_PASSWORD"
    consumer.consume.assert_not_called()


@pytest.mark.asyncio
async def test_perform_reset_accepts_password_of_exactly_72_bytes(
    mock_uow, clock, mock_collaborators
):
    _, issuer, consumer, dispatcher = mock_collaborators
    handler = ResetHandler(mock_uow, clock, dispatcher, issuer=issuer, consumer=consumer)

    await handler.perform_reset("tok-123", "x" * 72)

    consumer.consume.assert_called_once_with(None, "tok-123", "x" * 72)


@pytest.mark.asyncio
async def test_perform_reset_rejects_empty_token(mock_uow, clock, mock_collaborators):
    _, issuer, consumer, dispatcher = mock_collaborators
    handler = ResetHandler(mock_uow, clock, dispatcher, issuer=issuer, consumer=consumer)

    with pytest.raises(ValidationError) as exc_info:
        await handler.perform_reset("", "NewPass123!")

    assert exc_info.value.code == "INVALID_INPUT"
    consumer.consume.assert_not_called()


@pytest.mark.asyncio
async def test_perform_reset_delegates_to_consumer(mock_uow, clock, mock_collaborators):
    user, issuer, consumer, dispatcher = mock_collaborators
    handler = ResetHandler(mock_uow, clock, dispatcher, issuer=issuer, consumer=consumer)

    await handler.perform_reset("tok-123", "NewPass123!", user_id=user.id)

    consumer.consume.assert_called_once_with(user.id, "tok-123", "NewPass123!")


@pytest.mark.asyncio
async def test_end_to_end_reset_flow(store, uow, clock, alice):
    dispatcher = RecordingDispatcher()
    handler = make_handler(uow, clock, dispatcher)

    await handler.request_reset("A@B.com", BASE_URL)

    assert len(dispatcher.sent) == 1
    email, url = dispatcher.sent[0]
    assert email == "a@b.com"
    token = parse_qs(urlparse(url).query)["token"][0]
    assert token in url

    with pytest.raises(InvalidTokenError):
        await handler.perform_reset("wrong-token", "NewPass1")
    unchanged = await InMemoryUserRepository(store).get_by_id(alice.id)
    assert unchanged.password_hash == alice.password_hash

    await handler.perform_reset(token, "NewPass1")
    updated = await InMemoryUserRepository(store).get_by_id(alice.id)
    assert bcrypt.checkpw(b"NewPass1", updated.password_hash.encode())

    with pytest.raises(InvalidTokenError):
        await handler.perform_reset(token, "AnotherPass")


@pytest.mark.asyncio
async def test_unknown_email_creates_no_token(store, uow, clock, alice):
    dispatcher = RecordingDispatcher()
    handler = make_handler(uow, clock, dispatcher)

    with pytest.raises(NotFoundError):
        await handler.request_reset("nobody@example.com", BASE_URL)

    assert dispatcher.sent == []
    assert (await InMemoryUserRepository(store).get_by_id(alice.id)).reset_token_hash is None


@pytest.mark.asyncio
async def test_token_kept_when_dispatch_fails(store, uow, clock, alice):
    handler = make_handler(uow, clock, RecordingDispatcher(fail=True))

    await handler.request_reset("a@b.com", BASE_URL)

    assert (await InMemoryUserRepository(store).get_by_id(alice.id)).reset_token_hash is not None


@pytest.mark.asyncio
async def test_expired_link_is_reported(uow, clock, alice):
    dispatcher = RecordingDispatcher()
    handler = make_handler(uow, clock, dispatcher)
    await handler.request_reset("a@b.com", BASE_URL)
    clock.advance(timedelta(hours=25))

    with pytest.raises(ExpiredTokenError):
        await handler.perform_reset(dispatcher.last_token(), "NewPass123!")
