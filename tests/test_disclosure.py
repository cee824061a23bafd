"""Tests for the compliment disclosure state machine."""
from datetime import datetime

import pytest

from oomf.domain.common.errors import (
    AlreadyPurchasedError,
    AlreadyRevealedError,
    OutOfGuessesError,
    OutOfSequenceError,
    ValidationError,
)
from oomf.domain.compliments.disclosure import (
    DisclosureState,
    check_hint_number,
    consume_guess,
    disclose,
    disclosure_state,
    unlock_hint,
)
from oomf.domain.compliments.models import Compliment, ComplimentOrigin, RevealMethod


def make_compliment(**overrides) -> Compliment:
    fields = dict(
        id="c1",
        sender_id="sender",
        receiver_id="receiver",
        template_id="t1",
        custom_text=None,
        emoji="✨",
        category="vibes",
        origin=ComplimentOrigin.NORMAL,
        tokens_spent=0,
        is_read=False,
        read_at=None,
        is_revealed=False,
        reveal_method=None,
        revealed_at=None,
        guesses_remaining=3,
        hints_used=0,
        version=0,
        created_at=datetime(2025, 3, 1),
    )
    fields.update(overrides)
    return Compliment(**fields)


def test_disclose_sets_cause_and_bumps_version():
    now = datetime(2025, 3, 2, 12, 0)
    revealed = disclose(make_compliment(), RevealMethod.TOKENS, now)

    assert revealed.is_revealed is True
    assert revealed.reveal_method == RevealMethod.TOKENS
    assert revealed.revealed_at == now
    assert revealed.version == 1
    assert disclosure_state(revealed) == DisclosureState.REVEALED


def test_disclose_twice_fails():
    revealed = disclose(make_compliment(), RevealMethod.GUESSED)
    with pytest.raises(AlreadyRevealedError):
        disclose(revealed, RevealMethod.TOKENS)


def test_disclose_does_not_touch_guesses_or_hints():
    revealed = disclose(make_compliment(guesses_remaining=2, hints_used=1), RevealMethod.EXCHANGE)
    assert revealed.guesses_remaining == 2
    assert revealed.hints_used == 1


def test_consume_guess_down_to_exhausted():
    c = make_compliment()
    for expected in (2, 1, 0):
        c = consume_guess(c)
        assert c.guesses_remaining == expected
    assert disclosure_state(c) == DisclosureState.EXHAUSTED
    assert c.is_revealed is False
    with pytest.raises(OutOfGuessesError):
        consume_guess(c)


def test_consume_guess_after_reveal_reports_already_revealed():
    c = make_compliment(is_revealed=True, reveal_method=RevealMethod.TOKENS, guesses_remaining=0)
    with pytest.raises(AlreadyRevealedError):
        consume_guess(c)


def test_input_is_not_mutated():
    c = make_compliment()
    consume_guess(c)
    assert c.guesses_remaining == 3
    assert c.version == 0


def test_hints_unlock_in_order():
    c = make_compliment()
    with pytest.raises(OutOfSequenceError) as exc_info:
        check_hint_number(c, 2)
    assert exc_info.value.next_hint == 1

    c = unlock_hint(c, 1)
    c = unlock_hint(c, 2)
    assert c.hints_used == 2
    assert c.version == 2


def test_rebuying_a_hint_is_already_purchased():
    c = unlock_hint(make_compliment(), 1)
    with pytest.raises(AlreadyPurchasedError) as exc_info:
        check_hint_number(c, 1)
    assert exc_info.value.next_hint == 2
    assert exc_info.value.message == "This hint has already been used"


@pytest.mark.parametrize("hint_number", [0, 4, -1])
def test_hint_number_out_of_range(hint_number):
    with pytest.raises(ValidationError):
        check_hint_number(make_compliment(), hint_number)


def test_no_hints_after_reveal():
    c = make_compliment(is_revealed=True, reveal_method=RevealMethod.GUESSED)
    with pytest.raises(AlreadyRevealedError):
        check_hint_number(c, 1)


def test_hints_do_not_consume_guesses():
    c = unlock_hint(make_compliment(), 1)
    assert c.guesses_remaining == 3
