import os


def _optional_int(name):
    value = os.environ.get(name)
    return int(value) if value not in (None, '') else None


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Game defaults applied on create and reset
    STARTING_BALANCE = int(os.environ.get('STARTING_BALANCE', '100'))
    DEFAULT_BET = int(os.environ.get('DEFAULT_BET', '10'))
    HISTORY_LIMIT = int(os.environ.get('HISTORY_LIMIT', '5'))
    # Optional: seed for reproducible dice. Unset uses system randomness.
    DICE_SEED = _optional_int('DICE_SEED')
    # Optional: debounce round actions per game (ms). 0 disables.
    CONTROLLER_DEBOUNCE_MS = int(os.environ.get('CONTROLLER_DEBOUNCE_MS', '0'))
    # Seconds to wait after the last session owner disconnects before ending the game
    SESSION_END_GRACE_SEC = float(os.environ.get('SESSION_END_GRACE_SEC', '2'))
