"""
Space Palace Gymnasium 环境

智能体坐在人类位置，电脑位置由 ComputerPolicy 控制
遵循标准 Gymnasium API
"""
from typing import Dict, Any, Tuple, Optional, List, Union
import numpy as np

import gymnasium as gym
from gymnasium import spaces

from palace.actions import Action
from palace.cards import cards_to_str
from palace.config import RulesConfig
from palace.engine import TurnEngine
from palace.policy import ComputerPolicy
from palace.rounds import RoundContext
from palace.state import GameState, Phase, Side, PLAY_ORDER

from .observation import ObservationBuilder, NUM_RANKS
from .reward import RewardCalculator, RewardConfig, RewardType


# 整数动作为合法动作列表中的下标
MAX_ACTIONS = 64


class PalaceEnv(gym.Env):
    """
    Space Palace Gymnasium 环境

    每一步:
    1. 执行智能体 (人类位置) 的动作
    2. 电脑连续行动直到轮到智能体或回合结束

    API:
    - reset() -> observation, info
    - step(action) -> observation, reward, terminated, truncated, info
    """

    metadata = {
        "render_modes": ["human", "ansi"],
        "name": "SpacePalace-v0",
    }

    def __init__(
        self,
        render_mode: Optional[str] = None,
        reward_type: str = "sparse",
        reward_config: Optional[RewardConfig] = None,
        rules: Optional[RulesConfig] = None,
        round_number: int = 1,
        max_turns: int = 500,
        seed: Optional[int] = None,
    ):
        """
        Args:
            render_mode: 渲染模式 ("human", "ansi", None)
            reward_type: 奖励类型 ("sparse", "shaped")
            reward_config: 完整奖励配置 (优先于 reward_type)
            rules: 规则配置
            round_number: 默认回合 (决定对手和宇宙牌概率)
            max_turns: 回合交接次数上限，超过后 truncated
            seed: 随机种子
        """
        super().__init__()

        self.render_mode = render_mode
        self._seed = seed
        self.rules = rules or RulesConfig()
        self.round_number = round_number
        self.max_turns = max_turns

        # 奖励计算器
        self._reward_config = reward_config or RewardConfig(reward_type=RewardType(reward_type))
        self._reward_calculator = RewardCalculator(self._reward_config)

        # 状态机与对手
        self._engine = TurnEngine(self.rules, seed=seed)
        self._opponent = ComputerPolicy(self._engine.rng, side=Side.COMPUTER, rules=self.rules)
        self._obs_builder = ObservationBuilder(self._engine)

        # 状态
        self._state: Optional[GameState] = None
        self._prev_state: Optional[GameState] = None

        # 定义空间
        self._define_spaces()

    def _define_spaces(self):
        """定义观测和动作空间"""
        self.action_space = spaces.Discrete(MAX_ACTIONS)

        self.observation_space = spaces.Dict({
            "hand": spaces.Box(0, 4, shape=(NUM_RANKS,), dtype=np.float32),
            "face_up": spaces.Box(0, 4, shape=(NUM_RANKS,), dtype=np.float32),
            "opponent_face_up": spaces.Box(0, 4, shape=(NUM_RANKS,), dtype=np.float32),
            "pile": spaces.Box(0, 4, shape=(NUM_RANKS,), dtype=np.float32),
            "burned": spaces.Box(0, 4, shape=(NUM_RANKS,), dtype=np.float32),
            "pile_base": spaces.Box(0, 1, shape=(NUM_RANKS,), dtype=np.float32),
            "seven_constraint": spaces.Box(0, 1, shape=(1,), dtype=np.float32),
            "sizes": spaces.Box(0, 1, shape=(6,), dtype=np.float32),
        })

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        重置环境: 发牌、跳过交换阶段，电脑先行动时推进到轮到智能体

        Args:
            seed: 随机种子
            options: {"round_number": n}

        Returns:
            (observation, info) 元组
        """
        super().reset(seed=seed)

        if seed is not None:
            self._engine.rng = np.random.default_rng(seed)
            self._opponent.rng = self._engine.rng

        round_number = (options or {}).get("round_number", self.round_number)
        ctx = RoundContext(round_number, self.rules.total_rounds)

        state = self._engine.new_game(ctx)
        state = self._engine.apply(state, Action.begin_round()).state
        state = self._engine.apply(state, Action.finish_swapping()).state
        self._state = self._run_opponent(state)
        self._prev_state = None

        obs = self._build_observation()
        info = self._build_info()

        if self.render_mode == "human":
            self.render()

        return obs, info

    def step(
        self,
        action: Union[int, Action],
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        执行动作

        Args:
            action: 合法动作下标或 Action 对象

        Returns:
            (observation, reward, terminated, truncated, info) 元组
        """
        if self._state is None:
            raise RuntimeError("Environment not reset. Call reset() first.")
        if self._state.is_finished:
            raise RuntimeError("Round is over. Call reset() first.")

        self._prev_state = self._state

        concrete_action = self._decode_action(action)
        error = None
        if concrete_action is None:
            error = f"Invalid action index: {action}"
        elif concrete_action.side is not Side.HUMAN:
            error = "The agent can only act for the human seat"
        else:
            try:
                result = self._engine.apply(self._state, concrete_action)
            except ValueError as e:
                error = str(e)
            else:
                if not result.accepted:
                    error = result.message

        if error is not None:
            # 非法动作：给予惩罚并保持状态
            obs = self._build_observation()
            info = self._build_info()
            info["error"] = error
            return obs, self._reward_config.invalid_action_penalty, False, False, info

        self._state = self._run_opponent(result.state)

        obs = self._build_observation()
        reward = self._reward_calculator.compute(self._state, self._prev_state, Side.HUMAN)
        terminated = self._state.is_finished
        truncated = not terminated and self._state.turn_count >= self.max_turns
        info = self._build_info()

        if self.render_mode == "human":
            self.render()

        return obs, reward, terminated, truncated, info

    def _run_opponent(self, state: GameState) -> GameState:
        """电脑连续行动直到轮到智能体或回合结束"""
        steps = 0
        while state.phase == Phase.PLAYING and state.current is Side.COMPUTER:
            if steps >= self.max_turns:
                state = self._engine.force_end_turn(state).state
                break
            result = self._engine.apply(state, self._opponent.decide(state))
            if not result.accepted:
                result = self._engine.force_end_turn(state)
            state = result.state
            steps += 1
        return state

    def _decode_action(self, action: Union[int, Action]) -> Optional[Action]:
        """解码动作"""
        if isinstance(action, Action):
            return action
        if isinstance(action, (int, np.integer)):
            legal_actions = self.get_legal_actions()
            if 0 <= int(action) < len(legal_actions):
                return legal_actions[int(action)]
            return None
        raise ValueError(f"Invalid action type: {type(action)}")

    def _build_observation(self) -> Dict[str, np.ndarray]:
        """构建观测"""
        return self._obs_builder.build(self._state, Side.HUMAN).to_dict()

    def _build_info(self) -> Dict[str, Any]:
        """构建 info 字典"""
        legal_actions = self.get_legal_actions()
        mask = np.zeros(MAX_ACTIONS, dtype=np.int8)
        mask[:min(len(legal_actions), MAX_ACTIONS)] = 1

        info = {
            "current_player": self._state.current.value,
            "phase": self._state.phase.value,
            "legal_actions": legal_actions,
            "legal_action_mask": mask,
            "message": self._state.message,
            "turns": self._state.turn_count,
            "round": self._state.round.round_number,
            "winner": self._state.winner.value if self._state.winner else None,
        }

        if self._state.is_finished:
            info["outcome"] = self._state.outcome.value

        return info

    def render(self) -> Optional[str]:
        """渲染环境"""
        if self.render_mode == "ansi" or self.render_mode == "human":
            return self._render_text()
        return None

    def _render_text(self) -> str:
        """文本渲染 (电脑手牌和暗牌不显示)"""
        state = self._state
        lines = []
        lines.append("=" * 50)
        lines.append(
            f"Round {state.round.round_number}/{state.round.total_rounds} "
            f"vs {state.round.opponent.name} | Phase: {state.phase.value}"
        )
        lines.append(f"Deck: {len(state.deck)} | Burned: {state.burned_count}")
        lines.append(f"Pile: {cards_to_str(state.pile) or '-'}")

        for side in PLAY_ORDER:
            zones = state.zones(side)
            if side is Side.HUMAN:
                lines.append(f"human hand: {cards_to_str(zones.hand)} ({len(zones.hand)})")
            else:
                lines.append(f"computer hand: {len(zones.hand)} cards")
            lines.append(
                f"{side.value} palace: {cards_to_str(zones.face_up)} "
                f"+ {len(zones.face_down)} face-down"
            )

        lines.append(f"Message: {state.message}")
        lines.append("=" * 50)

        output = "\n".join(lines)
        if self.render_mode == "human":
            print(output)
        return output

    def close(self):
        """关闭环境"""
        pass

    @property
    def state(self) -> Optional[GameState]:
        """获取当前状态 (用于调试)"""
        return self._state

    def get_legal_actions(self) -> List[Action]:
        """获取智能体当前合法动作"""
        if self._state is None:
            return []
        return self._engine.legal_actions(self._state, Side.HUMAN)

    def sample_action(self) -> Union[int, Action]:
        """随机采样一个合法动作"""
        legal_actions = self.get_legal_actions()
        if not legal_actions:
            return 0
        idx = self.np_random.integers(len(legal_actions))
        return legal_actions[idx]


def make_env(
    round_number: int = 1,
    reward_type: str = "sparse",
    seed: Optional[int] = None,
    **kwargs,
) -> PalaceEnv:
    """
    创建环境

    Args:
        round_number: 默认回合
        reward_type: 奖励类型
        seed: 随机种子

    Returns:
        PalaceEnv
    """
    return PalaceEnv(round_number=round_number, reward_type=reward_type, seed=seed, **kwargs)
