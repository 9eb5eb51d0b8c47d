from enum import Enum


class Prediction(str, Enum):
    HIGHER = 'higher'
    LOWER = 'lower'

    @classmethod
    def parse(cls, value) -> 'Prediction':
        """Accept a Prediction or its name/value in any case."""
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


class Outcome(str, Enum):
    WIN = 'win'
    LOSE = 'lose'


def decide_result(prediction: Prediction, dealer_total: int, player_total: int) -> Outcome:
    """Score a round.

    The player wins only on a strictly correct prediction; a tie loses
    whichever way the player called it.
    """
    if prediction is Prediction.HIGHER:
        won = player_total > dealer_total
    else:
        won = player_total < dealer_total
    return Outcome.WIN if won else Outcome.LOSE


def settle_balance(balance: int, bet: int, result: Outcome) -> int:
    delta = bet if result is Outcome.WIN else -bet
    return max(0, balance + delta)
