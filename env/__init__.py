"""
Environment Layer - Gymnasium 兼容环境

Modules:
    palace_env: 主环境类
    observation: 观测空间构建
    reward: 奖励函数
"""
from .palace_env import (
    PalaceEnv,
    MAX_ACTIONS,
    make_env,
)

from .observation import (
    Observation,
    ObservationBuilder,
    NUM_RANKS,
)

from .reward import (
    RewardType,
    RewardConfig,
    RewardCalculator,
)

__all__ = [
    # env
    "PalaceEnv",
    "MAX_ACTIONS",
    "make_env",
    # observation
    "Observation",
    "ObservationBuilder",
    "NUM_RANKS",
    # reward
    "RewardType",
    "RewardConfig",
    "RewardCalculator",
]
