import random
import string
import threading
from typing import Dict, Optional, Tuple

from dicegame.models import DEFAULT_BET, HISTORY_LIMIT, STARTING_BALANCE, HigherLowerGame


def generate_game_code(length=4):
    return ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))


class GameStore:
    """In-process registry of running games keyed by game code."""

    def __init__(self):
        self._games: Dict[str, HigherLowerGame] = {}
        self._lock = threading.Lock()
        self.starting_balance = STARTING_BALANCE
        self.default_bet = DEFAULT_BET
        self.history_limit = HISTORY_LIMIT
        self.dice_seed = None

    def init_app(self, app):
        cfg = app.config
        self.starting_balance = int(cfg.get('STARTING_BALANCE', STARTING_BALANCE))
        self.default_bet = int(cfg.get('DEFAULT_BET', DEFAULT_BET))
        self.history_limit = int(cfg.get('HISTORY_LIMIT', HISTORY_LIMIT))
        self.dice_seed = cfg.get('DICE_SEED')
        self.clear()
        app.extensions['games_store'] = self

    def new_game(self, rng=None) -> HigherLowerGame:
        if rng is None and self.dice_seed is not None:
            rng = random.Random(self.dice_seed)
        return HigherLowerGame(
            starting_balance=self.starting_balance,
            default_bet=self.default_bet,
            history_limit=self.history_limit,
            rng=rng,
        )

    def create(self, rng=None) -> Tuple[str, HigherLowerGame]:
        game = self.new_game(rng)
        with self._lock:
            code = generate_game_code()
            while code in self._games:
                code = generate_game_code()
            self._games[code] = game
        return code, game

    def get(self, code: str) -> Optional[HigherLowerGame]:
        if not code:
            return None
        with self._lock:
            return self._games.get(code.upper())

    def remove(self, code: str) -> Optional[HigherLowerGame]:
        with self._lock:
            return self._games.pop(code.upper(), None)

    def clear(self) -> None:
        with self._lock:
            self._games.clear()

    def __len__(self):
        with self._lock:
            return len(self._games)

    def __contains__(self, code):
        return self.get(code) is not None
