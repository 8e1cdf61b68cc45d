"""
奖励函数

支持两种奖励设计:
- 终局奖励 (sparse)
- 过程奖励 (shaped): 终局奖励 + 减少自己区域牌数的小奖励
"""
from dataclasses import dataclass
from typing import Optional
from enum import Enum

from palace.state import GameState, Phase, Side


class RewardType(Enum):
    """奖励类型"""
    SPARSE = "sparse"      # 仅终局奖励
    SHAPED = "shaped"      # 过程奖励


@dataclass
class RewardConfig:
    """奖励配置"""
    reward_type: RewardType = RewardType.SPARSE
    win_reward: float = 1.0
    lose_reward: float = -1.0
    invalid_action_penalty: float = -0.1
    card_shed_bonus: float = 0.01   # 每减少一张牌
    pickup_penalty: float = 0.0     # 收牌的额外惩罚


class RewardCalculator:
    """
    奖励计算器

    根据配置计算不同类型的奖励
    """

    def __init__(self, config: Optional[RewardConfig] = None):
        self.config = config or RewardConfig()

    def compute(
        self,
        state: GameState,
        prev_state: Optional[GameState] = None,
        player: Side = Side.HUMAN,
    ) -> float:
        """
        计算奖励

        Args:
            state: 当前状态
            prev_state: 前一状态 (用于 shaped 奖励)
            player: 计算奖励的玩家视角

        Returns:
            奖励值
        """
        if self.config.reward_type == RewardType.SHAPED:
            return self._shaped_reward(state, prev_state, player)
        return self._sparse_reward(state, player)

    def _sparse_reward(self, state: GameState, player: Side) -> float:
        """
        稀疏奖励：仅在回合结束时给予

        Returns:
            胜利: +1, 失败: -1, 其他: 0
        """
        if state.phase != Phase.GAME_OVER or state.winner is None:
            return 0.0
        if state.winner == player:
            return self.config.win_reward
        return self.config.lose_reward

    def _shaped_reward(
        self,
        state: GameState,
        prev_state: Optional[GameState],
        player: Side,
    ) -> float:
        reward = self._sparse_reward(state, player)
        if reward != 0.0 or prev_state is None:
            return reward

        prev_cards = len(prev_state.zones(player))
        curr_cards = len(state.zones(player))
        if curr_cards < prev_cards:
            reward += (prev_cards - curr_cards) * self.config.card_shed_bonus
        elif curr_cards > prev_cards:
            reward += self.config.pickup_penalty
        return reward
