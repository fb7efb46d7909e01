"""
Skirmish - Classic hot-seat rules.

Square 10x10 map with mountains, forests, a few cities and a winding
road. Each side starts with infantry, a tank and artillery in its
corner. Players alternate turns; every unit moves once and attacks
once per turn. Damage is attack minus terrain-boosted defense, never
below 10.
"""

from ..engine_core.catalog import Catalog, TerrainKind, UnitArchetype
from ..engine_core.rules import (
    ActionEconomy,
    DamageModel,
    GenerationConfig,
    IncomeModel,
    MovementModel,
    Placement,
    Rules,
    Ruleset,
    Scatter,
)

RULES_ID = "skirmish"


def create_catalog() -> Catalog:
    return Catalog.build(
        terrains=[
            TerrainKind("plain", movement_cost=1, defense_bonus_pct=0),
            TerrainKind("mountain", movement_cost=3, defense_bonus_pct=30),
            TerrainKind("forest", movement_cost=2, defense_bonus_pct=10),
            TerrainKind("city", movement_cost=1, defense_bonus_pct=20, is_objective=True),
            TerrainKind("road", movement_cost=0.5, defense_bonus_pct=0),
            TerrainKind(
                "base", movement_cost=1, defense_bonus_pct=20,
                is_objective=True, deployable=True,
            ),
        ],
        archetypes=[
            UnitArchetype(
                "infantry", max_health=100, attack=55, defense=10, move_range=3,
                min_attack_range=1, max_attack_range=1, cost=1000, can_capture=True,
            ),
            UnitArchetype(
                "tank", max_health=100, attack=75, defense=30, move_range=5,
                min_attack_range=1, max_attack_range=1, cost=7000,
            ),
            UnitArchetype(
                "artillery", max_health=100, attack=90, defense=5, move_range=3,
                min_attack_range=1, max_attack_range=3, cost=6000,
            ),
            UnitArchetype(
                "apc", max_health=100, attack=0, defense=15, move_range=6,
                min_attack_range=0, max_attack_range=0, cost=4000,
            ),
        ],
    )


def create_rules() -> Rules:
    """Build the skirmish rules bundle."""
    return Rules(
        rules_id=RULES_ID,
        name="Skirmish",
        catalog=create_catalog(),
        ruleset=Ruleset(
            damage_model=DamageModel.FLAT,
            action_economy=ActionEconomy.PER_TURN,
            income_model=IncomeModel.TURN_START,
            movement_model=MovementModel.TERRAIN,
            min_damage=10,
            income_amount=100,
        ),
        generation=GenerationConfig(
            base_weights={"plain": 1, "mountain": 1, "forest": 1, "city": 1, "road": 1},
            scatters=(
                Scatter("mountain", 8),
                Scatter("forest", 12),
                Scatter("city", 6),
            ),
            roads=1,
            road_kind="road",
            road_drift=0.3,
            base_kind="base",
            home_rows=0,
        ),
        placements=(
            Placement(0, "infantry", (1, 0)),
            Placement(0, "tank", (0, 1)),
            Placement(0, "artillery", (1, 2)),
            Placement(1, "infantry", (-2, -1)),
            Placement(1, "tank", (-1, -2)),
            Placement(1, "artillery", (-2, -3)),
        ),
        factions=("red", "blue"),
        default_width=10,
        default_height=10,
        min_width=6,
        min_height=6,
    )
