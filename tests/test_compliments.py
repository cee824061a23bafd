"""Tests for the compliment ledger: send, read receipts and masking."""
from datetime import datetime, timedelta

import pytest
from sqlalchemy import update

from oomf.domain.common.errors import (
    AuthorizationError,
    InsufficientTokensError,
    NotFoundError,
    RateLimitedError,
    ValidationError,
)
from oomf.domain.compliments.models import ComplimentOrigin, Reaction
from oomf.domain.notifications.events import EventType
from oomf.domain.policy.rate_limit import RateLimitAction, RateLimitPolicy, RateLimitRule
from oomf.domain.scoring.models import TokenReason, TransactionCategory
from oomf.infra.db.models.compliment import ComplimentModel
from oomf.infra.db.models.secret_admirer import SecretAdmirerChatModel, SecretAdmirerMessageModel
from oomf.infra.db.models.template import TemplateModel
from oomf.infra.db.models.token_transaction import TokenTransactionModel
from oomf.infra.db.models.user import StreakMilestoneModel, UserModel

from tests.conftest import FakeRateLimiter, befriend, block, build_services, count_rows, create_user, get_user_row


async def test_send_template_compliment(db_session, services, alice, bob, template):
    compliment = await services.compliments.send_compliment(alice, bob, template_id=template)

    assert compliment.origin == ComplimentOrigin.NORMAL
    assert compliment.guesses_remaining == 3
    assert compliment.hints_used == 0
    assert compliment.is_read is False
    assert compliment.is_revealed is False
    assert compliment.tokens_spent == 0
    assert compliment.emoji == "✨"
    assert compliment.category == "vibes"

    sender = await get_user_row(db_session, alice)
    receiver = await get_user_row(db_session, bob)
    assert sender.oomf_score == 1
    assert sender.compliments_sent == 1
    assert sender.tokens == 3
    assert receiver.oomf_score == 3
    assert receiver.compliments_received == 1

    tpl = await db_session.get(TemplateModel, template, populate_existing=True)
    assert tpl.usage_count == 1


async def test_new_compliment_event_does_not_name_sender(services, alice, bob, template):
    compliment = await services.compliments.send_compliment(alice, bob, template_id=template)

    assert services.events.for_user(alice) == []
    [(event_type, payload)] = services.events.for_user(bob)
    assert event_type == EventType.NEW_COMPLIMENT
    assert payload["compliment_id"] == compliment.id
    assert alice not in payload.values()


@pytest.mark.parametrize(
    "kwargs",
    [
        {},
        {"template_id": "t", "custom_text": "You are great"},
    ],
)
async def test_exactly_one_content_source(services, alice, bob, kwargs):
    with pytest.raises(ValidationError):
        await services.compliments.send_compliment(alice, bob, **kwargs)


async def test_cannot_send_to_self(services, alice, template):
    with pytest.raises(ValidationError):
        await services.compliments.send_compliment(alice, alice, template_id=template)


async def test_only_friends_can_send(db_session, services, alice, template):
    stranger = await create_user(db_session, "stranger")
    with pytest.raises(AuthorizationError):
        await services.compliments.send_compliment(alice, stranger, template_id=template)


async def test_block_in_either_direction_forbids_send(db_session, services, alice, bob, template):
    await block(db_session, bob, alice)
    with pytest.raises(AuthorizationError):
        await services.compliments.send_compliment(alice, bob, template_id=template)


async def test_unknown_or_inactive_template(db_session, services, alice, bob, template):
    with pytest.raises(NotFoundError):
        await services.compliments.send_compliment(alice, bob, template_id="missing")

    await db_session.execute(update(TemplateModel).where(TemplateModel.id == template).values(is_active=False))
    await db_session.commit()
    with pytest.raises(NotFoundError):
        await services.compliments.send_compliment(alice, bob, template_id=template)
    assert await count_rows(db_session, ComplimentModel) == 0


async def test_secret_admirer_send(db_session, services, alice, bob):
    compliment = await services.compliments.send_compliment(alice, bob, custom_text="  Your laugh is contagious  ")

    assert compliment.origin == ComplimentOrigin.SECRET_ADMIRER
    assert compliment.custom_text == "Your laugh is contagious"
    assert compliment.tokens_spent == 3
    assert compliment.emoji == "💌"

    sender = await get_user_row(db_session, alice)
    assert sender.tokens == 0
    assert sender.oomf_score == 15

    chats = await count_rows(db_session, SecretAdmirerChatModel, SecretAdmirerChatModel.compliment_id == compliment.id)
    assert chats == 1
    assert await count_rows(db_session, SecretAdmirerMessageModel) == 1

    ledger = await count_rows(
        db_session,
        TokenTransactionModel,
        TokenTransactionModel.user_id == alice,
        TokenTransactionModel.category == TransactionCategory.SPEND,
        TokenTransactionModel.reason == TokenReason.SECRET_ADMIRER,
    )
    assert ledger == 1


async def test_secret_admirer_without_enough_tokens_creates_nothing(db_session, services, alice, bob):
    poor = await create_user(db_session, "poor", tokens=2)
    await befriend(db_session, poor, bob)

    with pytest.raises(InsufficientTokensError) as exc_info:
        await services.compliments.send_compliment(poor, bob, custom_text="I think you are wonderful")

    assert exc_info.value.required == 3
    assert exc_info.value.available == 2
    assert await count_rows(db_session, ComplimentModel) == 0
    assert await count_rows(db_session, SecretAdmirerChatModel) == 0
    assert await count_rows(db_session, SecretAdmirerMessageModel) == 0
    assert await count_rows(db_session, TokenTransactionModel) == 0

    row = await get_user_row(db_session, poor)
    assert row.tokens == 2
    assert row.oomf_score == 0
    assert row.compliments_sent == 0
    assert services.events.sent == []


@pytest.mark.parametrize("text", ["hey", "    ok    ", "x" * 281])
async def test_custom_text_length(services, alice, bob, text):
    with pytest.raises(ValidationError):
        await services.compliments.send_compliment(alice, bob, custom_text=text)


async def test_every_fifth_send_earns_a_token(db_session, services, alice, bob, template):
    for _ in range(5):
        await services.compliments.send_compliment(alice, bob, template_id=template)

    sender = await get_user_row(db_session, alice)
    assert sender.compliments_sent == 5
    assert sender.tokens == 4
    rewards = await count_rows(
        db_session,
        TokenTransactionModel,
        TokenTransactionModel.user_id == alice,
        TokenTransactionModel.reason == TokenReason.SEND_REWARD,
    )
    assert rewards == 1


async def test_send_rate_limit(db_session, events, alice, bob, template):
    policy = RateLimitPolicy(
        FakeRateLimiter(),
        {RateLimitAction.SEND_COMPLIMENT: RateLimitRule(max_requests=2, window_seconds=86400)},
    )
    limited = build_services(db_session, events=events, rate_limit=policy)

    await limited.compliments.send_compliment(alice, bob, template_id=template)
    await limited.compliments.send_compliment(alice, bob, template_id=template)
    with pytest.raises(RateLimitedError) as exc_info:
        await limited.compliments.send_compliment(alice, bob, template_id=template)

    assert exc_info.value.retry_after == 86400
    assert await count_rows(db_session, ComplimentModel) == 2


async def test_receiver_sees_anonymous_sender(services, alice, bob, template):
    compliment = await services.compliments.send_compliment(alice, bob, template_id=template)

    [received] = await services.compliments.list_received(bob)
    assert received.compliment.id == compliment.id
    assert received.sender_id is None
    assert received.sender is None
    assert received.compliment.text == "You light up every room"

    [sent] = await services.compliments.list_sent(alice)
    assert sent.sender_id == alice


async def test_only_parties_can_view(services, alice, bob, carol, template):
    compliment = await services.compliments.send_compliment(alice, bob, template_id=template)
    with pytest.raises(AuthorizationError):
        await services.compliments.get_compliment(compliment.id, carol)


async def test_secret_admirer_view_links_chat(services, alice, bob):
    compliment = await services.compliments.send_compliment(alice, bob, custom_text="You make Mondays better")
    view = await services.compliments.get_compliment(compliment.id, bob)
    assert view.chat_id is not None
    assert view.sender_id is None


async def test_mark_read_is_idempotent(services, alice, bob, template):
    compliment = await services.compliments.send_compliment(alice, bob, template_id=template)

    first = await services.compliments.mark_read(compliment.id, bob)
    assert first.is_read is True
    assert first.read_at is not None
    assert first.is_revealed is False

    second = await services.compliments.mark_read(compliment.id, bob)
    assert second.read_at == first.read_at


async def test_mark_read_by_sender_is_forbidden(services, alice, bob, template):
    compliment = await services.compliments.send_compliment(alice, bob, template_id=template)
    with pytest.raises(AuthorizationError):
        await services.compliments.mark_read(compliment.id, alice)
    with pytest.raises(NotFoundError):
        await services.compliments.mark_read("missing", bob)


async def test_list_templates_filters_by_category(services, template):
    assert [t.id for t in await services.compliments.list_templates()] == [template]
    assert await services.compliments.list_templates("funny") == []


def _send_policy(limiter, max_requests=10):
    return RateLimitPolicy(
        limiter,
        {RateLimitAction.SEND_COMPLIMENT: RateLimitRule(max_requests=max_requests, window_seconds=86400)},
    )


async def test_rejected_sends_do_not_use_quota(db_session, events, alice, bob, template):
    limiter = FakeRateLimiter()
    limited = build_services(db_session, events=events, rate_limit=_send_policy(limiter))
    key = f"oomf_rl:send_compliment:{alice}"
    await db_session.execute(update(UserModel).where(UserModel.id == alice).values(tokens=0))
    await db_session.commit()

    with pytest.raises(InsufficientTokensError):
        await limited.compliments.send_compliment(alice, bob, custom_text="You are a great friend")
    with pytest.raises(ValidationError):
        await limited.compliments.send_compliment(alice, bob, custom_text="hey")
    with pytest.raises(NotFoundError):
        await limited.compliments.send_compliment(alice, bob, template_id="missing")
    assert limiter.counts.get(key, 0) == 0

    await limited.compliments.send_compliment(alice, bob, template_id=template)
    assert limiter.counts[key] == 1


async def test_receiver_reacts_to_compliment(services, alice, bob, template):
    compliment = await services.compliments.send_compliment(alice, bob, template_id=template)
    assert compliment.reaction is None

    reacted = await services.compliments.react(compliment.id, bob, "fire")
    assert reacted.reaction == Reaction.FIRE

    changed = await services.compliments.react(compliment.id, bob, Reaction.CROWN)
    assert changed.reaction == Reaction.CROWN
    assert changed.version == reacted.version

    cleared = await services.compliments.react(compliment.id, bob, None)
    assert cleared.reaction is None


async def test_reaction_rules(services, alice, bob, template):
    compliment = await services.compliments.send_compliment(alice, bob, template_id=template)

    with pytest.raises(AuthorizationError):
        await services.compliments.react(compliment.id, alice, Reaction.HEART)
    with pytest.raises(NotFoundError):
        await services.compliments.react("missing", bob, Reaction.HEART)
    with pytest.raises(ValidationError):
        await services.compliments.react(compliment.id, bob, "thumbs_up")


async def test_reaction_survives_disclosure(services, alice, bob, template):
    compliment = await services.compliments.send_compliment(alice, bob, template_id=template)
    await services.compliments.react(compliment.id, bob, Reaction.LAUGH)

    result = await services.guessing.guess(compliment.id, bob, alice)
    assert result.is_correct is True

    view = await services.compliments.get_compliment(compliment.id, bob)
    assert view.compliment.is_revealed is True
    assert view.compliment.reaction == Reaction.LAUGH


async def _set_streak(session, user_id, current, last_date, freezes=0):
    await session.execute(
        update(UserModel)
        .where(UserModel.id == user_id)
        .values(streak_current=current, streak_best=current, streak_last_date=last_date, streak_freezes=freezes)
    )
    await session.commit()


async def test_first_send_starts_streak(db_session, services, alice, bob, template):
    await services.compliments.send_compliment(alice, bob, template_id=template)
    await services.compliments.send_compliment(alice, bob, template_id=template)

    sender = await get_user_row(db_session, alice)
    assert sender.streak_current == 1
    assert sender.streak_last_date == datetime.utcnow().date()
    receiver = await get_user_row(db_session, bob)
    assert receiver.streak_current == 0


async def test_send_on_next_day_extends_streak(db_session, services, alice, bob, template):
    today = datetime.utcnow().date()
    await _set_streak(db_session, alice, 6, today - timedelta(days=1))

    await services.compliments.send_compliment(alice, bob, template_id=template)

    sender = await get_user_row(db_session, alice)
    assert sender.streak_current == 7
    assert sender.streak_best == 7
    milestones = await count_rows(db_session, StreakMilestoneModel, StreakMilestoneModel.user_id == alice)
    assert milestones == 2  # 3 and 7


async def test_send_after_broken_streak_restarts(db_session, services, alice, bob, template):
    today = datetime.utcnow().date()
    await _set_streak(db_session, alice, 12, today - timedelta(days=4), freezes=1)

    await services.compliments.send_compliment(alice, bob, template_id=template)

    sender = await get_user_row(db_session, alice)
    assert sender.streak_current == 1
    assert sender.streak_best == 12
    assert sender.streak_freezes == 1


async def test_failed_send_leaves_streak(db_session, services, alice, bob):
    today = datetime.utcnow().date()
    await _set_streak(db_session, alice, 2, today - timedelta(days=1))
    await db_session.execute(update(UserModel).where(UserModel.id == alice).values(tokens=0))
    await db_session.commit()

    with pytest.raises(InsufficientTokensError):
        await services.compliments.send_compliment(alice, bob, custom_text="You are a great friend")

    sender = await get_user_row(db_session, alice)
    assert sender.streak_current == 2
    assert sender.streak_last_date == today - timedelta(days=1)
    assert await count_rows(db_session, StreakMilestoneModel) == 0
