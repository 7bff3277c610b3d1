"""
Learning — Adaptive choice of build settings across invocations.

- BuildArm: one optimization-knob combination
- ArmStatistic + update_statistic: per-arm reward state and update rule
- LearningStore: persisted statistics (file or in-memory)
- AdaptiveSelector: epsilon-greedy / UCB policy
"""

from cscript.learning.arms import BuildArm, default_arms, prior
from cscript.learning.statistics import (
    ArmStatistic,
    compute_reward,
    update_statistic,
)
from cscript.learning.store import (
    LearningStore,
    InMemoryLearningStore,
    FileLearningStore,
    create_learning_store,
    create_memory_store,
)
from cscript.learning.selector import (
    DEFAULT_EPSILON,
    DEFAULT_EXPLORATION,
    Selection,
    AdaptiveSelector,
    ucb_score,
    create_selector,
)

__all__ = [
    # Arms
    "BuildArm",
    "default_arms",
    "prior",
    # Statistics
    "ArmStatistic",
    "compute_reward",
    "update_statistic",
    # Stores
    "LearningStore",
    "InMemoryLearningStore",
    "FileLearningStore",
    "create_learning_store",
    "create_memory_store",
    # Selection
    "DEFAULT_EPSILON",
    "DEFAULT_EXPLORATION",
    "Selection",
    "AdaptiveSelector",
    "ucb_score",
    "create_selector",
]
