from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from dicegame.services.games.dice import roll_pair
from dicegame.services.games.scoring import Outcome, Prediction, decide_result, settle_balance

STARTING_BALANCE = 100
DEFAULT_BET = 10
HISTORY_LIMIT = 5

UNROLLED: Tuple[int, int] = (0, 0)


class GameError(Exception):
    """Base class for game rule violations."""


class RoundNotReady(GameError):
    """Raised when the player tries to roll before the dealer has."""

    def __init__(self, message='The dealer must roll first.'):
        super().__init__(message)


class BetError(Enum):
    INVALID_AMOUNT = 'InvalidAmount'
    INSUFFICIENT_BALANCE = 'InsufficientBalance'


@dataclass(frozen=True)
class BetResult:
    ok: bool
    error: Optional[BetError] = None
    message: Optional[str] = None

    def __bool__(self):
        return self.ok

    def to_dict(self):
        return {
            'ok': self.ok,
            'error': self.error.value if self.error else None,
            'message': self.message,
        }


@dataclass(frozen=True)
class DealerRoll:
    dealer_dice: Tuple[int, int]
    dealer_total: int

    def to_dict(self):
        return {
            'dealer_dice': list(self.dealer_dice),
            'dealer_total': self.dealer_total,
        }


@dataclass(frozen=True)
class RoundRecord:
    round_number: int
    dealer_total: int
    player_total: int
    prediction: Prediction
    result: Outcome
    balance_after: int
    bet: int
    dealer_dice: Tuple[int, int]
    player_dice: Tuple[int, int]

    @property
    def won(self) -> bool:
        return self.result is Outcome.WIN

    def to_dict(self):
        return {
            'round_number': self.round_number,
            'dealer_total': self.dealer_total,
            'player_total': self.player_total,
            'prediction': self.prediction.value,
            'result': self.result.value,
            'balance_after': self.balance_after,
            'bet': self.bet,
            'dealer_dice': list(self.dealer_dice),
            'player_dice': list(self.player_dice),
        }


def _is_int(amount) -> bool:
    return isinstance(amount, int) and not isinstance(amount, bool)


class HigherLowerGame:
    """A single higher/lower dice game.

    Each round the dealer rolls two dice, the player bets on whether their
    own two dice will total higher or lower, and then rolls. Resolving a
    round requires a dealer roll first; placing bets and resolving rounds
    once the game is over is left to the caller to prevent.
    """

    def __init__(self, starting_balance: int = STARTING_BALANCE, default_bet: int = DEFAULT_BET,
                 history_limit: int = HISTORY_LIMIT, rng=None):
        self.starting_balance = starting_balance
        self.default_bet = default_bet
        self.history_limit = history_limit
        self.rng = rng
        self.reset()

    def reset(self) -> None:
        self.balance = self.starting_balance
        self.round_number = 0
        self.dealer_dice = UNROLLED
        self.player_dice = UNROLLED
        self.dealer_total = 0
        self.player_total = 0
        self.last_bet = self.default_bet
        self.last_prediction = Prediction.HIGHER
        self.history: List[RoundRecord] = []
        self.dealer_has_rolled = False

    def roll_dealer(self) -> DealerRoll:
        """Start (or restart) the round with a fresh dealer roll.

        Rolling again before the player rolls replaces the previous dealer
        dice. The player's dice are cleared for the new round.
        """
        self.player_dice = UNROLLED
        self.player_total = 0
        self.dealer_dice = roll_pair(self.rng)
        self.dealer_total = sum(self.dealer_dice)
        self.dealer_has_rolled = True
        return DealerRoll(self.dealer_dice, self.dealer_total)

    def place_bet(self, amount, prediction) -> BetResult:
        """Validate and store the bet for the next resolution.

        Nothing is changed when validation fails. An unknown prediction
        string raises ValueError.
        """
        prediction = Prediction.parse(prediction)
        if not _is_int(amount):
            return BetResult(False, BetError.INVALID_AMOUNT, 'Enter a valid number for the bet.')
        if amount < 1:
            return BetResult(False, BetError.INVALID_AMOUNT, 'Bet must be at least 1.')
        if amount > self.balance:
            return BetResult(False, BetError.INSUFFICIENT_BALANCE,
                             f'Bet must be between 1 and {self.balance}.')
        self.last_bet = amount
        self.last_prediction = prediction
        return BetResult(True)

    def resolve_round(self) -> RoundRecord:
        if not self.dealer_has_rolled:
            raise RoundNotReady()
        self.round_number += 1
        self.player_dice = roll_pair(self.rng)
        self.player_total = sum(self.player_dice)

        result = decide_result(self.last_prediction, self.dealer_total, self.player_total)
        self.balance = settle_balance(self.balance, self.last_bet, result)
        self.dealer_has_rolled = False

        record = RoundRecord(
            round_number=self.round_number,
            dealer_total=self.dealer_total,
            player_total=self.player_total,
            prediction=self.last_prediction,
            result=result,
            balance_after=self.balance,
            bet=self.last_bet,
            dealer_dice=self.dealer_dice,
            player_dice=self.player_dice,
        )
        self.history.insert(0, record)
        del self.history[self.history_limit:]
        return record

    def is_game_over(self) -> bool:
        return self.balance <= 0

    def has_dealer_rolled(self) -> bool:
        return self.dealer_has_rolled

    def to_dict(self):
        return {
            'balance': self.balance,
            'last_bet': self.last_bet,
            'last_prediction': self.last_prediction.value,
            'round_number': self.round_number,
            'dealer_dice': list(self.dealer_dice),
            'dealer_total': self.dealer_total,
            'player_dice': list(self.player_dice),
            'player_total': self.player_total,
            'dealer_has_rolled': self.dealer_has_rolled,
            'game_over': self.is_game_over(),
            'history': [record.to_dict() for record in self.history],
        }
