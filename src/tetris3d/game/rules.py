from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ScoringRules:
    hard_drop_per_cell: int = 3
    hard_drop_clear_bonus: int = 50
    efficiency_base: int = 40
    efficiency_rotation_cost: int = 2
    efficiency_translation_cost: int = 1
    base_points: tuple[int, ...] = (0, 100, 300, 500, 800)
    rarity_factor: tuple[float, ...] = (0.0, 1.0, 1.8, 3.2, 5.0)
    difficult_clear_layers: int = 3
    back_to_back_multiplier: float = 1.5
    streak_chain_multiplier: float = 1.10
    tier_multipliers: tuple[float, ...] = (1.0, 1.0, 1.06, 1.12)
    xp_per_cube: float = 0.07
    xp_per_layer: int = 1
    xp_difficult_bonus: int = 2
    streak_history_length: int = 2

    def efficiency_score(self, rotations: int, translations: int) -> int:
        cost = self.efficiency_rotation_cost * rotations + self.efficiency_translation_cost * translations
        return max(0, self.efficiency_base - cost)

    def clear_points(self, layers: int, level: int) -> float:
        if layers <= 0:
            return 0.0
        # Tables stop at four layers; bigger clears reuse the last entry
        base = self.base_points[min(layers, len(self.base_points) - 1)]
        rarity = self.rarity_factor[min(layers, len(self.rarity_factor) - 1)]
        return base * level * rarity

    def is_difficult(self, layers: int) -> bool:
        return layers >= self.difficult_clear_layers

    def tier_multiplier(self, tier: int) -> float:
        if 0 <= tier < len(self.tier_multipliers):
            return self.tier_multipliers[tier]
        return 1.0


XP_BASE_REQUIREMENT = 40
XP_PER_LEVEL = 8

MIN_DROP_INTERVAL_MS = 100
DROP_INTERVAL_STEP_MS = 50


def required_xp(level: int) -> int:
    """XP needed to finish `level`."""
    return XP_BASE_REQUIREMENT + XP_PER_LEVEL * (level - 1)


def apply_xp(xp: float, level: int) -> tuple[float, int]:
    """Drain as many level thresholds as `xp` covers; return (xp, level)."""
    needed = required_xp(level)
    while xp >= needed:
        xp -= needed
        level += 1
        needed = required_xp(level)
    return xp, level


def drop_interval_ms(
    initial_ms: int,
    level: int,
    step_ms: int = DROP_INTERVAL_STEP_MS,
    minimum_ms: int = MIN_DROP_INTERVAL_MS,
) -> int:
    return max(minimum_ms, initial_ms - step_ms * (level - 1))


def unlocked_tiers(level: int, hard: bool) -> set[int]:
    """Tiers opened by reaching `level`; tier 1 is always available."""
    tier_2_level = 2 if hard else 3
    tier_3_level = 4 if hard else 6
    tiers = {1}
    if level >= tier_2_level:
        tiers.add(2)
    if level >= tier_3_level:
        tiers.add(3)
    return tiers
