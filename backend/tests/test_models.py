import pytest

from dicegame.models import BetError, HigherLowerGame, RoundNotReady
from dicegame.services.games.scoring import Outcome, Prediction, decide_result, settle_balance


def test_new_game_defaults():
    game = HigherLowerGame()
    assert game.balance == 100
    assert game.last_bet == 10
    assert game.last_prediction is Prediction.HIGHER
    assert game.round_number == 0
    assert game.history == []
    assert not game.has_dealer_rolled()
    assert not game.is_game_over()


def test_place_bet_accepts_every_amount_up_to_balance():
    game = HigherLowerGame()
    for amount in (1, 37, 100):
        result = game.place_bet(amount, Prediction.LOWER)
        assert result.ok
        assert game.last_bet == amount
        assert game.last_prediction is Prediction.LOWER


@pytest.mark.parametrize('amount,message', [
    (0, 'Bet must be at least 1.'),
    (-5, 'Bet must be at least 1.'),
    (2.5, 'Enter a valid number for the bet.'),
    ('10', 'Enter a valid number for the bet.'),
    (None, 'Enter a valid number for the bet.'),
    (True, 'Enter a valid number for the bet.'),
])
def test_place_bet_rejects_invalid_amount(amount, message):
    game = HigherLowerGame()
    result = game.place_bet(amount, Prediction.LOWER)
    assert not result
    assert result.error is BetError.INVALID_AMOUNT
    assert result.message == message
    # Nothing changes on failure
    assert game.last_bet == 10
    assert game.last_prediction is Prediction.HIGHER


def test_place_bet_rejects_more_than_balance():
    game = HigherLowerGame()
    result = game.place_bet(game.balance + 1, Prediction.HIGHER)
    assert result.error is BetError.INSUFFICIENT_BALANCE
    assert result.message == 'Bet must be between 1 and 100.'
    assert game.last_bet == 10


def test_place_bet_parses_prediction_strings():
    game = HigherLowerGame()
    assert game.place_bet(5, 'Lower')
    assert game.last_prediction is Prediction.LOWER
    with pytest.raises(ValueError):
        game.place_bet(5, 'sideways')


def test_roll_dealer_clears_player_dice(scripted_dice):
    game = HigherLowerGame(rng=scripted_dice(2, 5, 1, 1, 6, 6))
    game.roll_dealer()
    game.resolve_round()
    assert game.player_total == 2

    roll = game.roll_dealer()
    assert roll.dealer_dice == (6, 6)
    assert roll.dealer_total == 12
    assert game.has_dealer_rolled()
    assert game.player_total == 0
    assert game.player_dice == (0, 0)


def test_roll_dealer_is_reentrant(scripted_dice):
    game = HigherLowerGame(rng=scripted_dice(1, 2, 5, 6))
    game.roll_dealer()
    game.roll_dealer()
    assert game.dealer_total == 11
    assert game.round_number == 0
    assert game.balance == 100


def test_resolve_requires_dealer_roll(scripted_dice):
    game = HigherLowerGame(rng=scripted_dice(3, 3, 4, 4))
    with pytest.raises(RoundNotReady):
        game.resolve_round()

    game.roll_dealer()
    game.resolve_round()
    # A second resolve without a new dealer roll is refused and changes nothing
    with pytest.raises(RoundNotReady):
        game.resolve_round()
    assert game.round_number == 1
    assert len(game.history) == 1


@pytest.mark.parametrize('prediction', [Prediction.HIGHER, Prediction.LOWER])
def test_tie_always_loses(scripted_dice, prediction):
    game = HigherLowerGame(rng=scripted_dice(3, 4, 2, 5))
    game.roll_dealer()
    game.place_bet(10, prediction)
    record = game.resolve_round()
    assert record.dealer_total == 7
    assert record.player_total == 7
    assert record.result is Outcome.LOSE
    assert game.balance == 90


def test_win_lower_end_to_end(scripted_dice):
    game = HigherLowerGame(rng=scripted_dice(3, 4, 1, 1))
    roll = game.roll_dealer()
    assert roll.dealer_dice == (3, 4)
    assert roll.dealer_total == 7
    assert game.place_bet(10, Prediction.LOWER)

    record = game.resolve_round()

    assert record.player_dice == (1, 1)
    assert record.won
    assert game.balance == 110
    assert game.round_number == 1
    assert not game.has_dealer_rolled()
    assert [r.to_dict() for r in game.history] == [{
        'round_number': 1,
        'dealer_total': 7,
        'player_total': 2,
        'prediction': 'lower',
        'result': 'win',
        'balance_after': 110,
        'bet': 10,
        'dealer_dice': [3, 4],
        'player_dice': [1, 1],
    }]


def test_losing_last_credits_ends_game(scripted_dice):
    game = HigherLowerGame(starting_balance=5, rng=scripted_dice(4, 5, 1, 2))
    game.roll_dealer()
    assert game.place_bet(5, Prediction.HIGHER)
    record = game.resolve_round()
    assert record.dealer_total == 9
    assert record.player_total == 3
    assert record.result is Outcome.LOSE
    assert game.balance == 0
    assert game.is_game_over()


def test_balance_never_negative(scripted_dice):
    game = HigherLowerGame(starting_balance=25, rng=scripted_dice())
    for _ in range(5):
        game.rng.push(6, 6, 1, 1)
        game.roll_dealer()
        game.resolve_round()
        assert game.balance >= 0
    assert game.balance == 0
    # Bet stays 10 from default while the balance drops; the floor holds
    assert [r.balance_after for r in reversed(game.history)] == [15, 5, 0, 0, 0]


def test_history_keeps_five_newest(scripted_dice):
    game = HigherLowerGame(rng=scripted_dice())
    for _ in range(6):
        game.rng.push(6, 6, 1, 1)
        game.roll_dealer()
        game.place_bet(1, Prediction.LOWER)
        game.resolve_round()
    assert len(game.history) == 5
    assert [r.round_number for r in game.history] == [6, 5, 4, 3, 2]


def test_reset_restores_defaults(scripted_dice):
    game = HigherLowerGame(rng=scripted_dice(1, 1, 6, 6))
    game.roll_dealer()
    game.place_bet(40, Prediction.LOWER)
    game.resolve_round()
    assert game.balance == 60

    game.reset()

    assert game.balance == 100
    assert game.round_number == 0
    assert game.history == []
    assert game.last_bet == 10
    assert game.last_prediction is Prediction.HIGHER
    assert game.dealer_total == 0
    assert game.player_total == 0
    assert game.dealer_dice == (0, 0)
    assert not game.has_dealer_rolled()


def test_games_do_not_share_state(scripted_dice):
    first = HigherLowerGame(rng=scripted_dice(1, 1))
    second = HigherLowerGame()
    first.roll_dealer()
    assert first.has_dealer_rolled()
    assert not second.has_dealer_rolled()


def test_to_dict_snapshot():
    state = HigherLowerGame().to_dict()
    assert state['balance'] == 100
    assert state['last_prediction'] == 'higher'
    assert state['dealer_dice'] == [0, 0]
    assert state['game_over'] is False
    assert state['history'] == []


@pytest.mark.parametrize('prediction,dealer,player,expected', [
    (Prediction.HIGHER, 6, 7, Outcome.WIN),
    (Prediction.HIGHER, 7, 6, Outcome.LOSE),
    (Prediction.LOWER, 7, 6, Outcome.WIN),
    (Prediction.LOWER, 6, 7, Outcome.LOSE),
    (Prediction.LOWER, 12, 12, Outcome.LOSE),
])
def test_decide_result(prediction, dealer, player, expected):
    assert decide_result(prediction, dealer, player) is expected


def test_settle_balance_floors_at_zero():
    assert settle_balance(100, 10, Outcome.WIN) == 110
    assert settle_balance(3, 10, Outcome.LOSE) == 0
