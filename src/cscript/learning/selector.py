"""
Adaptive Selector — Epsilon-greedy / UCB choice over build arms.

With probability ε a uniformly random arm is explored. Otherwise the arm
maximizing

    prior + ema + c * sqrt(ln(max(1, total_trials)) / max(1, arm_trials))

is exploited. Arms never tried score +inf, so each arm is tried once
before any is repeated. Ties break by prior, then by key.

The store is an explicit dependency; the selector holds no global state.
"""

import math
import random
from dataclasses import dataclass, field

from cscript.diagnostics import Diagnostic, LearningStoreError
from cscript.observability import get_logger, get_metrics
from cscript.vocabulary import DiagnosticCode, Metric
from cscript.learning.arms import BuildArm, default_arms, prior
from cscript.learning.statistics import ArmStatistic, compute_reward
from cscript.learning.store import LearningStore


logger = get_logger("learning.selector")

DEFAULT_EPSILON = 0.12
DEFAULT_EXPLORATION = 1.2


@dataclass
class Selection:
    """Outcome of one `choose()` call."""
    arm: BuildArm
    explored: bool = False
    scores: dict[str, float] = field(default_factory=dict)
    diagnostics: list[Diagnostic] = field(default_factory=list)


def ucb_score(
    arm: BuildArm,
    stat: ArmStatistic | None,
    total_trials: int,
    exploration: float = DEFAULT_EXPLORATION,
) -> float:
    """Exploitation score; +inf for an untried arm."""
    if stat is None or stat.trials == 0:
        return math.inf
    bonus = exploration * math.sqrt(math.log(max(1, total_trials)) / max(1, stat.trials))
    return prior(arm) + stat.ema + bonus


class AdaptiveSelector:
    """
    Chooses a build arm and feeds build outcomes back into the store.
    """

    def __init__(
        self,
        store: LearningStore,
        arms: list[BuildArm] | None = None,
        epsilon: float = DEFAULT_EPSILON,
        exploration: float = DEFAULT_EXPLORATION,
        rng: random.Random | None = None,
    ):
        if not 0.0 <= epsilon <= 1.0:
            raise ValueError(f"epsilon must be within [0, 1], got {epsilon}")
        self.store = store
        self.arms = list(arms) if arms is not None else default_arms()
        if not self.arms:
            raise ValueError("AdaptiveSelector needs at least one arm")
        self.epsilon = epsilon
        self.exploration = exploration
        self.rng = rng or random.Random()

    def _load(self, diagnostics: list[Diagnostic]) -> dict[str, ArmStatistic]:
        try:
            return self.store.snapshot()
        except LearningStoreError as e:
            message = f"learning store unavailable, using empty statistics: {e}"
            logger.warning(message)
            get_metrics().count(Metric.LEARNING_STORE_ERRORS)
            diagnostics.append(Diagnostic.warning(
                DiagnosticCode.LEARNING_STORE_UNAVAILABLE, message,
            ))
            return {}

    def choose(self) -> Selection:
        diagnostics: list[Diagnostic] = []
        stats = self._load(diagnostics)

        if self.rng.random() < self.epsilon:
            arm = self.rng.choice(self.arms)
            logger.info(f"exploring arm {arm.key}")
            return Selection(arm, explored=True, diagnostics=diagnostics)

        total = sum(stats[a.key].trials for a in self.arms if a.key in stats)
        scores = {
            a.key: ucb_score(a, stats.get(a.key), total, self.exploration)
            for a in self.arms
        }
        ranked = sorted(self.arms, key=lambda a: (-scores[a.key], -prior(a), a.key))
        arm = ranked[0]
        logger.info(f"selected arm {arm.key} (score {scores[arm.key]:.4f})")
        return Selection(arm, explored=False, scores=scores, diagnostics=diagnostics)

    def record(self, arm: BuildArm, success: bool, duration_ms: float) -> ArmStatistic:
        """
        Persist one build outcome for `arm`.

        Raises:
            LearningStoreError: The store could not be written
        """
        reward = compute_reward(success, duration_ms)
        stat = self.store.record(arm.key, reward)
        logger.debug(
            f"arm {arm.key}: reward {reward:+.3f}, trials {stat.trials}, ema {stat.ema:.3f}"
        )
        return stat


def create_selector(
    store: LearningStore,
    rng: random.Random | None = None,
    **kwargs,
) -> AdaptiveSelector:
    """Factory with the default arm catalogue."""
    return AdaptiveSelector(store, rng=rng, **kwargs)
