# tilemath/__init__.py
from __future__ import annotations
import logging
import os
import random
import secrets
from logging.handlers import RotatingFileHandler
from typing import Optional

import click
from flask import Flask
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# --- extensions ---
# dev-friendly in-memory limiter; point RATELIMIT_STORAGE_URI at redis in prod
limiter = Limiter(get_remote_address)


def _configure_logging(app: Flask) -> None:
    level_name = str(app.config.get("LOG_LEVEL") or "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    app.logger.setLevel(level)
    for name in ("tilemath", "tilemath.games", "tilemath.games.core", "tilemath.games.tile_puzzle"):
        logging.getLogger(name).setLevel(level)

    log_file = app.config.get("LOG_FILE")
    if log_file and not app.debug and not app.testing:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)
        # File handler - rotates logs when they get too big
        file_handler = RotatingFileHandler(log_file, maxBytes=10240, backupCount=10)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]"
        ))
        file_handler.setLevel(level)
        app.logger.addHandler(file_handler)
        logging.getLogger("tilemath").addHandler(file_handler)


def create_app(config_object: Optional[object] = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)

    # ---------------------------
    # Config
    # ---------------------------
    app.config.from_object(config_object or "tilemath.config.Config")
    app.config.from_pyfile("config.py", silent=True)  # instance/config.py (optional)

    # Ensure SECRET_KEY is truthy (override falsy values from any loaded config)
    if not app.config.get("SECRET_KEY"):
        app.config["SECRET_KEY"] = os.environ.get("SECRET_KEY") or secrets.token_hex(32)

    _configure_logging(app)

    # ---------------------------
    # Extensions init
    # ---------------------------
    limiter.init_app(app)

    # ---------------------------
    # Blueprints
    # ---------------------------
    from .games.tile_puzzle.routes import bp as tiles_bp
    from .games.tile_puzzle.logic import RoundRules

    # fail at boot, not on the first request, when TILE_* settings are bad
    app.extensions["tilemath.rules"] = RoundRules.from_config(app.config)
    app.register_blueprint(tiles_bp)

    # ---------------------------
    # CLI commands
    # ---------------------------
    @app.cli.command("tiles-deal")
    @click.option("--seed", type=int, default=None, help="Seed for a reproducible board.")
    def tiles_deal(seed):
        """Deal a board and print it with the tile pool."""
        from .games.tile_puzzle.logic import new_round, read_model

        rules = app.extensions["tilemath.rules"]
        view = read_model(new_round(rules=rules, rng=random.Random(seed)))
        click.echo("Board: " + " ".join(str(c["value"]) for c in view["cells"]))
        click.echo("Pool:  " + ", ".join(f"{k}x{v}" for k, v in view["pool_counts"].items()))
        click.echo(f"Time:  {view['time_remaining']}s")

    @app.cli.command("tiles-check")
    @click.argument("cells", nargs=-1, type=int, required=True)
    @click.option("--ops", default="", help="One glyph per gap, '.' keeps the default '+'.")
    def tiles_check(cells, ops):
        """Evaluate and score a board, e.g. `flask tiles-check 3 7 2 --ops X+`."""
        from .games.core.expression_utils import normalize_tile
        from .games.tile_puzzle.logic import PuzzleState, RoundTimer, validate
        from .games.tile_puzzle.logic.evaluator import build_expression, render_expression

        rules = app.extensions["tilemath.rules"]
        operators = {}
        for idx, glyph in enumerate(ops):
            if glyph == ".":
                continue
            tile = normalize_tile(glyph)
            if tile is None or tile in "()":
                raise click.BadParameter(f"not an operator: {glyph!r}", param_hint="--ops")
            operators[idx] = tile

        state = PuzzleState(
            cells=tuple(cells),
            operators={k: v for k, v in operators.items() if k < len(cells) - 1},
            timer=RoundTimer.started(rules.round_seconds),
        )
        tokens, equation_score = build_expression(state.cells, state.operators, state.parens)
        checked = validate(state, rules)
        click.echo(f"Expression: {render_expression(tokens)}")
        click.echo(f"Result:     {checked.last_result}")
        click.echo(f"Status:     {checked.status.value}")
        click.echo(f"Operators:  {equation_score}")
        click.echo(f"Award:      {checked.last_award}")

    return app
