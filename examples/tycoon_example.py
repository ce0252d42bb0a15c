"""Example world: a few players at different stages, used by the CLI seed command."""
from __future__ import annotations

from dataclasses import replace

from idletycoon.catalog import new_player
from idletycoon.database import CustomTrack, GameDatabase, GlobalConfig
from idletycoon.mining import MiningFarm


def define_world() -> GameDatabase:
    rookie = new_player("rookie", "Rookie")

    veteran = new_player("veteran", "Veteran")
    veteran = replace(
        veteran,
        balance=25_000.0,
        max_money=40_000.0,
        click_level=4,
        playtime=7_200,
        businesses=[
            replace(b, owned=True, level=3) if b.id in ("kiosk", "coffee", "taxi") else b
            for b in veteran.businesses
        ],
        mining_farm=MiningFarm(gpu_level=2, gpu_count=4, max_slots=10),
    )

    cheater = new_player("cheater", "Cheater")
    cheater = replace(cheater, banned_until=-1, ban_reason="Autoclicker")

    admin = replace(new_player("admin", "Admin"), is_admin=True)

    return GameDatabase(
        players=[rookie, veteran, cheater, admin],
        config=GlobalConfig(
            version="1.0",
            global_multiplier=1.0,
            tax_rate=0.1,
            energy_cost_per_gpu=2.0,
            active_track="christmas",
            is_music_enabled=True,
            custom_tracks=[
                CustomTrack("lofi", "Lofi Beats", "https://example.com/lofi.mp3"),
                CustomTrack("retired", "Old Anthem", "https://example.com/old.mp3", is_hidden=True),
            ],
        ),
    )
