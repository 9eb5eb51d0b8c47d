from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config
from dicegame.store import GameStore

games_store = GameStore()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5174",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    games_store.init_app(flask_app)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from dicegame.main import main
    flask_app.register_blueprint(main)

    from dicegame.api.games import games
    # Mount game routes under /api to match frontend API client
    flask_app.register_blueprint(games, url_prefix='/api/games')

    from dicegame.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @click.command('simulate')
    @click.option('--rounds', default=10, show_default=True, help='Rounds to play.')
    @click.option('--seed', type=int, default=None, help='Seed for reproducible dice.')
    @click.option('--bet', type=int, default=None, help='Bet per round (defaults to DEFAULT_BET).')
    @click.option('--prediction', type=click.Choice(['higher', 'lower'], case_sensitive=False),
                  default='higher', show_default=True)
    def simulate_command(rounds, seed, bet, prediction):
        """Plays automated rounds against a fresh game."""
        import random
        game = games_store.new_game(rng=random.Random(seed) if seed is not None else None)
        stake = bet if bet is not None else game.default_bet
        for _ in range(rounds):
            if game.is_game_over():
                break
            game.roll_dealer()
            placed = game.place_bet(min(stake, game.balance), prediction)
            if not placed:
                raise click.ClickException(placed.message)
            record = game.resolve_round()
            click.echo(
                f"Round {record.round_number}: dealer {record.dealer_total} "
                f"player {record.player_total} ({record.prediction.value}) "
                f"{record.result.value} -> {record.balance_after}"
            )
        click.echo(f"Final balance: {game.balance}")
        if game.is_game_over():
            click.echo('Game over - balance is empty!')

    flask_app.cli.add_command(simulate_command)

    return flask_app
