"""
观察空间编码

将游戏状态转换为 numpy 特征 (只包含该视角可见的信息)
"""
from dataclasses import dataclass
from typing import Dict, List, Optional
import numpy as np

from palace.cards import ALL_RANKS, RANK_TO_INDEX, rank_counts
from palace.engine import TurnEngine
from palace.rules import RuleEngine
from palace.state import GameState, Side


NUM_RANKS = len(ALL_RANKS)

# 标量特征的归一化分母
DECK_SCALE = 57.0   # 52 张 + 5 张宇宙牌
PALACE_SCALE = 3.0


@dataclass
class Observation:
    """
    结构化观测

    Attributes:
        hand: 自己的手牌牌面计数 (18,)
        face_up: 自己的明牌 (18,)
        opponent_face_up: 对手的明牌 (18,)
        pile: 牌堆 (18,)
        burned: 烧牌区 (18,)
        pile_base: 牌堆有效基准牌 one-hot (18,)
        seven_constraint: 下一张是否必须小于 7 (1,)
        sizes: 牌组、对手手牌、双方暗牌、牌堆、回合数 (6,)
        legal_actions: 合法动作
        phase: 游戏阶段
    """
    hand: np.ndarray
    face_up: np.ndarray
    opponent_face_up: np.ndarray
    pile: np.ndarray
    burned: np.ndarray
    pile_base: np.ndarray
    seven_constraint: np.ndarray
    sizes: np.ndarray
    legal_actions: List
    phase: str

    def to_dict(self) -> Dict[str, np.ndarray]:
        """转换为字典格式"""
        return {
            "hand": self.hand,
            "face_up": self.face_up,
            "opponent_face_up": self.opponent_face_up,
            "pile": self.pile,
            "burned": self.burned,
            "pile_base": self.pile_base,
            "seven_constraint": self.seven_constraint,
            "sizes": self.sizes,
        }

    def to_flat_array(self) -> np.ndarray:
        """
        展平为单一向量

        特征维度: 6 * 18 + 1 + 6 = 115
        """
        return np.concatenate([
            self.hand,
            self.face_up,
            self.opponent_face_up,
            self.pile,
            self.burned,
            self.pile_base,
            self.seven_constraint,
            self.sizes,
        ])


class ObservationBuilder:
    """
    观测构建器

    负责将 GameState 转换为 Observation
    """

    def __init__(self, engine: Optional[TurnEngine] = None):
        """
        Args:
            engine: 用于枚举合法动作的状态机
        """
        self.engine = engine or TurnEngine()

    def build(self, state: GameState, perspective: Side = Side.HUMAN) -> Observation:
        """
        从游戏状态构建观测

        Args:
            state: 游戏状态
            perspective: 视角玩家

        Returns:
            Observation 对象
        """
        own = state.zones(perspective)
        other = state.zones(perspective.opponent)

        return Observation(
            hand=rank_counts(own.hand),
            face_up=rank_counts(own.face_up),
            opponent_face_up=rank_counts(other.face_up),
            pile=rank_counts(state.pile),
            burned=rank_counts(state.burned),
            pile_base=self._encode_pile_base(state),
            seven_constraint=np.array(
                [1.0 if RuleEngine.seven_constraint(state.pile) else 0.0], dtype=np.float32
            ),
            sizes=self._encode_sizes(state, perspective),
            legal_actions=self.engine.legal_actions(state, perspective),
            phase=state.phase.value,
        )

    def _encode_pile_base(self, state: GameState) -> np.ndarray:
        """有效基准牌 one-hot (空牌堆全 0)"""
        result = np.zeros(NUM_RANKS, dtype=np.float32)
        base = RuleEngine.effective_base(state.pile)
        if base is not None:
            result[RANK_TO_INDEX[base.rank]] = 1
        return result

    def _encode_sizes(self, state: GameState, perspective: Side) -> np.ndarray:
        """
        编码各区域大小

        Returns:
            (6,) 数组，归一化到 [0, 1]
        """
        own = state.zones(perspective)
        other = state.zones(perspective.opponent)
        return np.array([
            len(state.deck) / DECK_SCALE,
            min(len(other.hand) / DECK_SCALE, 1.0),
            len(own.face_down) / PALACE_SCALE,
            len(other.face_down) / PALACE_SCALE,
            min(len(state.pile) / DECK_SCALE, 1.0),
            state.round.round_number / state.round.total_rounds,
        ], dtype=np.float32)
