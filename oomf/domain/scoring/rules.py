"""Economy constants for points, tokens and disclosure."""
from dataclasses import dataclass

# Upper bound of guesses_remaining in the compliments table.
MAX_GUESSES = 3


@dataclass(frozen=True)
class EconomyRules:
    """Tunable numbers of the compliment economy.

    Defaults match production; ``oomf.api.deps`` builds an instance from settings.
    """
    guess_limit: int = 3
    hint_cost: int = 1
    reveal_cost: int = 3
    secret_admirer_cost: int = 3
    exchange_reveal_threshold: int = 6
    points_send: int = 1
    points_secret_admirer_send: int = 15
    points_receive: int = 3
    points_correct_guess: int = 5
    send_reward_every: int = 5  # every Nth sent compliment earns a token
    send_reward_tokens: int = 1
    custom_text_min_length: int = 5
    custom_text_max_length: int = 280
    message_max_length: int = 280

    def __post_init__(self):
        if not 1 <= self.guess_limit <= MAX_GUESSES:
            raise ValueError(f"guess_limit must be between 1 and {MAX_GUESSES}")
