"""
规则配置

定义发牌、补牌、回合数和宇宙牌概率等常量
"""
from dataclasses import dataclass, field
from typing import Dict

from .cards import Rank


# 各宇宙牌在每个回合加入牌组的概率 (第 1 回合全部为 0)
DEFAULT_SPECIAL_PROBABILITIES: Dict[Rank, Dict[int, float]] = {
    Rank.GLITCH: {1: 0.0, 2: 0.0, 3: 0.0, 4: 0.0, 5: 0.1},
    Rank.BLACK_HOLE: {1: 0.0, 2: 0.1, 3: 0.2, 4: 0.3, 5: 0.4},
    Rank.WORMHOLE: {1: 0.0, 2: 0.2, 3: 0.2, 4: 0.3, 5: 0.4},
    Rank.SUPERNOVA: {1: 0.0, 2: 0.1, 3: 0.2, 4: 0.3, 5: 0.4},
    Rank.ASTEROID_FIELD: {1: 0.0, 2: 0.2, 3: 0.3, 4: 0.4, 5: 0.5},
}


def _default_probabilities() -> Dict[Rank, Dict[int, float]]:
    return {rank: dict(table) for rank, table in DEFAULT_SPECIAL_PROBABILITIES.items()}


@dataclass
class RulesConfig:
    """
    规则配置

    Attributes:
        trim_count: 洗牌后移除的牌数
        deal_count: 手牌/明牌/暗牌各发几张
        hand_floor: 自动补牌的手牌下限
        total_rounds: 总回合数
        forced_draw_count: 小行星带强制摸牌数
        max_ace_chain: 电脑一个回合内 A 可获得的额外回合数上限
        special_probabilities: 宇宙牌概率表 {rank: {round: p}}
        computer_palace_rearrange: 发牌后电脑是否整理手牌与明牌
    """
    # 牌组
    trim_count: int = 15
    deal_count: int = 3

    # 回合
    hand_floor: int = 3
    total_rounds: int = 5

    # 特殊效果
    forced_draw_count: int = 2
    max_ace_chain: int = 1

    # 宇宙牌
    special_probabilities: Dict[Rank, Dict[int, float]] = field(
        default_factory=_default_probabilities
    )

    # 电脑整理
    computer_palace_rearrange: bool = True

    def __post_init__(self):
        if self.total_rounds < 1:
            raise ValueError(f"total_rounds must be positive, got {self.total_rounds}")
        if self.max_ace_chain < 0:
            raise ValueError(f"max_ace_chain must be >= 0, got {self.max_ace_chain}")
        for rank, table in self.special_probabilities.items():
            if not rank.is_cosmic:
                raise ValueError(f"{rank.value} is not a cosmic card")
            for round_number, p in table.items():
                if not 0.0 <= p <= 1.0:
                    raise ValueError(
                        f"Invalid probability {p} for {rank.value} in round {round_number}"
                    )

    def special_probability(self, rank: Rank, round_number: int) -> float:
        """某张宇宙牌在指定回合的加入概率 (未配置为 0)"""
        return self.special_probabilities.get(rank, {}).get(round_number, 0.0)

    @classmethod
    def from_dict(cls, d: dict) -> 'RulesConfig':
        valid_keys = cls.__dataclass_fields__.keys()
        filtered = {k: v for k, v in d.items() if k in valid_keys}
        if "special_probabilities" in filtered:
            filtered["special_probabilities"] = {
                Rank(rank) if not isinstance(rank, Rank) else rank: {
                    int(r): float(p) for r, p in table.items()
                }
                for rank, table in filtered["special_probabilities"].items()
            }
        return cls(**filtered)
