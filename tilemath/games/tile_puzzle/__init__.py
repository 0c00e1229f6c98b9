# tilemath/games/tile_puzzle/__init__.py
from flask import Blueprint

bp = Blueprint(
    "tiles",
    __name__,
    url_prefix="/games/tiles",
)
