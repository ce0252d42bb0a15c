"""Starting businesses and market listings for newly registered players."""

from __future__ import annotations

from idletycoon.business import Business
from idletycoon.market import Investment
from idletycoon.mining import MiningFarm
from idletycoon.player import Player

STARTING_BALANCE = 100.0


def default_businesses() -> list[Business]:
    return [
        Business("kiosk", "Street Kiosk", "retail", base_cost=50, base_income=1, icon="store"),
        Business("coffee", "Coffee Shop", "service", base_cost=400, base_income=6, icon="coffee"),
        Business("taxi", "Taxi Fleet", "transport", base_cost=2_500, base_income=30, icon="car"),
        Business("bakery", "Bakery", "retail", base_cost=12_000, base_income=120, icon="croissant"),
        Business("logistics", "Logistics Hub", "transport", base_cost=80_000, base_income=700, icon="truck"),
        Business("factory", "Factory", "industry", base_cost=500_000, base_income=4_000, icon="factory"),
    ]


def default_investments() -> list[Investment]:
    return [
        Investment("aapl", "AAPL", "Apple", current_price=185.0),
        Investment("tsla", "TSLA", "Tesla", current_price=240.0),
        Investment("gazp", "GAZP", "Gazprom", current_price=160.0),
        Investment("btc", "BTC", "Bitcoin", current_price=64_000.0),
    ]


def new_player(player_id: str, username: str = "", now: int = 0) -> Player:
    """A freshly registered player with the default catalog."""
    return Player(
        id=player_id,
        username=username,
        registration_date=now,
        last_login=now,
        balance=STARTING_BALANCE,
        max_money=STARTING_BALANCE,
        businesses=default_businesses(),
        investments=default_investments(),
        mining_farm=MiningFarm(),
    )
