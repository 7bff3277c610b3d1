"""
Arm Statistics — Per-arm reward state and the update rule.

Both `compute_reward` and `update_statistic` are pure; nothing here
touches a store or runs a build.
"""

import math
from dataclasses import dataclass


EMA_ALPHA = 0.2
TIME_PENALTY_WEIGHT = 0.2
TIME_PENALTY_SCALE_MS = 8000.0
SUCCESS_REWARD = 1.0
FAILURE_REWARD = -1.0


@dataclass(frozen=True)
class ArmStatistic:
    """Reward history of one arm."""
    trials: int = 0
    cumulative_reward: float = 0.0
    ema: float = 0.0
    last_reward: float = 0.0

    @property
    def mean_reward(self) -> float:
        if self.trials == 0:
            return 0.0
        return self.cumulative_reward / self.trials


def compute_reward(success: bool, duration_ms: float) -> float:
    """
    +1 for a successful build, minus a bounded time penalty
    `0.2 * tanh(ms / 8000)`; -1 for a failed one.
    """
    if not success:
        return FAILURE_REWARD
    penalty = TIME_PENALTY_WEIGHT * math.tanh(max(0.0, duration_ms) / TIME_PENALTY_SCALE_MS)
    return SUCCESS_REWARD - penalty


def update_statistic(stat: ArmStatistic, reward: float) -> ArmStatistic:
    """Apply one observed reward."""
    if stat.trials == 0:
        ema = reward
    else:
        ema = (1 - EMA_ALPHA) * stat.ema + EMA_ALPHA * reward
    return ArmStatistic(
        trials=stat.trials + 1,
        cumulative_reward=stat.cumulative_reward + reward,
        ema=ema,
        last_reward=reward,
    )
