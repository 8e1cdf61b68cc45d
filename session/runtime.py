"""
游戏会话

在 TurnEngine 外层提供单线程运行时:
- 持有当前状态快照，所有变化都经过 engine.apply
- 电脑回合作为延迟步骤排队，由宿主循环调用 tick() 推进
- 回合进行中标志防止两个电脑步骤重叠
- 标志卡住超过安全时限时记录警告并强制结束电脑回合
- 每次动作后通知订阅者
"""
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple
import logging
import time
import numpy as np

from palace.actions import Action, ActionType
from palace.config import RulesConfig
from palace.engine import StepResult, TurnEngine
from palace.events import Event, EventType
from palace.policy import ComputerPolicy
from palace.state import CardSource, GameState, Phase, Side

from .config import SessionConfig
from .scheduler import PendingStep, StepKind, TurnScheduler

logger = logging.getLogger(__name__)

WAIT_MESSAGE = "Wait for the computer to finish its turn"

# 会开始新回合的动作
DEAL_ACTIONS = frozenset({ActionType.BEGIN_ROUND, ActionType.NEXT_ROUND, ActionType.RESTART})


@dataclass(frozen=True)
class Notification:
    """
    发给订阅者的通知

    Attributes:
        state: 新状态
        events: 本步产生的事件
        message: 状态文字
        accepted: 动作是否被接受
    """
    state: GameState
    events: Tuple[Event, ...]
    message: str
    accepted: bool = True


Observer = Callable[[Notification], None]


class GameSession:
    """
    单局会话

    Args:
        config: 会话配置
        rules: 规则配置
        clock: 返回秒数的时钟 (默认 time.monotonic，测试可传入假时钟)
        policy: 电脑策略 (默认 ComputerPolicy)
    """

    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        rules: Optional[RulesConfig] = None,
        clock: Optional[Callable[[], float]] = None,
        policy: Optional[ComputerPolicy] = None,
    ):
        self.config = config or SessionConfig()
        self.rules = rules or RulesConfig()
        self.clock = clock or time.monotonic

        rng = np.random.default_rng(self.config.seed)
        self.engine = TurnEngine(self.rules, rng=rng)
        self.policy = policy or ComputerPolicy(rng=rng, side=Side.COMPUTER, rules=self.rules)
        self.scheduler = TurnScheduler()

        self._state = self.engine.new_game()
        self._observers: List[Observer] = []

    # ------------------------------------------------------------------
    # 状态与订阅
    # ------------------------------------------------------------------
    @property
    def state(self) -> GameState:
        return self._state

    @property
    def computer_pending(self) -> bool:
        """电脑回合是否在排队或执行中"""
        return self.scheduler.busy or self.scheduler.has_pending(StepKind.COMPUTER_TURN)

    @property
    def awaiting_human(self) -> bool:
        """是否在等待人类出牌"""
        return (
            self._state.phase == Phase.PLAYING
            and self._state.current is Side.HUMAN
            and not self.computer_pending
        )

    def subscribe(self, callback: Observer) -> Callable[[], None]:
        """
        注册订阅者

        Returns:
            取消订阅的函数
        """
        self._observers.append(callback)

        def unsubscribe() -> None:
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    # ------------------------------------------------------------------
    # 输入动作
    # ------------------------------------------------------------------
    def submit(self, action: Action) -> StepResult:
        """
        提交一个人类/界面动作

        电脑持有回合或电脑步骤未完成时，人类的回合动作被拒绝

        Raises:
            ValueError: 动作结构错误 (来自 TurnEngine)
        """
        if action.is_turn_action and action.side is Side.HUMAN and (
            self._state.current is not Side.HUMAN or self.computer_pending
        ):
            event = Event(EventType.PLAY_REJECTED, Side.HUMAN, (), WAIT_MESSAGE)
            result = StepResult(self._state.with_message(WAIT_MESSAGE), (event,), accepted=False)
            self._commit(result)
            return result

        result = self.engine.apply(self._state, action)
        # 发牌失败时保留排队中的电脑步骤
        if result.accepted and action.action_type in DEAL_ACTIONS:
            self.scheduler.clear()
        self._commit(result)

        if (
            result.accepted
            and action.action_type in DEAL_ACTIONS
            and self.config.auto_finish_swapping
            and self._state.phase == Phase.SWAPPING
        ):
            result = self.engine.apply(self._state, Action.finish_swapping())
            self._commit(result)

        self._schedule_computer()
        return result

    def begin_round(self) -> StepResult:
        return self.submit(Action.begin_round())

    def swap(self, hand_card_id: str, face_up_card_id: str) -> StepResult:
        return self.submit(Action.swap(hand_card_id, face_up_card_id))

    def finish_swapping(self) -> StepResult:
        return self.submit(Action.finish_swapping())

    def play(self, card_ids: Iterable[str], source: CardSource = CardSource.HAND) -> StepResult:
        return self.submit(Action.play(Side.HUMAN, card_ids, source))

    def reveal(self, card_id: str) -> StepResult:
        return self.submit(Action.reveal(Side.HUMAN, card_id))

    def pick_up_pile(self) -> StepResult:
        return self.submit(Action.pick_up(Side.HUMAN))

    def draw(self) -> StepResult:
        return self.submit(Action.draw(Side.HUMAN))

    def next_round(self) -> StepResult:
        return self.submit(Action.next_round())

    def restart(self) -> StepResult:
        return self.submit(Action.restart())

    # ------------------------------------------------------------------
    # 调度
    # ------------------------------------------------------------------
    def tick(self) -> int:
        """
        推进调度器 (由宿主循环定期调用)

        先检查卡住的标志，再依次执行已到期的步骤

        Returns:
            本次执行的步骤数
        """
        now = self.clock()
        if self.scheduler.stuck(now, self.config.safety_timeout):
            self._recover(now)

        processed = 0
        # 只处理进入时已在队列中的步骤，额外回合留给下一次 tick
        for _ in range(len(self.scheduler)):
            if self.scheduler.busy:
                break
            step = self.scheduler.pop_due(now)
            if step is None:
                break
            self._run_step(step, now)
            processed += 1
        return processed

    def flush(self, max_steps: int = 1000) -> int:
        """
        忽略延迟执行所有待处理步骤

        Returns:
            执行的步骤数
        """
        steps = 0
        while steps < max_steps and not self.scheduler.busy:
            step = self.scheduler.pop_next()
            if step is None:
                break
            self._run_step(step, self.clock())
            steps += 1
        return steps

    def run_until_human(self, max_steps: int = 1000) -> GameState:
        """
        无界面宿主使用: 执行电脑步骤直到轮到人类或本回合结束

        超过步数上限时记录警告并强制结束电脑回合
        """
        self.flush(max_steps)
        if self.computer_pending and not self.scheduler.busy:
            logger.warning(f"Computer still acting after {max_steps} steps, forcing its turn to end")
            self.scheduler.clear()
            self._commit(self.engine.force_end_turn(self._state))
        return self._state

    def _schedule_computer(self) -> None:
        state = self._state
        if state.phase == Phase.PLAYING and state.current is Side.COMPUTER:
            self.scheduler.schedule(StepKind.COMPUTER_TURN, self.clock() + self.config.computer_delay)

    def _run_step(self, step: PendingStep, now: float) -> None:
        if not self.scheduler.acquire(step, now):
            return

        state = self._state
        if state.phase != Phase.PLAYING or state.current is not Side.COMPUTER:
            self.scheduler.release()
            return

        # 策略或引擎抛出的异常向上传播，标志保持占用，由安全时限恢复
        action = self.policy.decide(state)
        result = self.engine.apply(state, action)
        if not result.accepted:
            logger.warning(
                f"Computer {action.action_type.value} was rejected ({result.message}), ending its turn"
            )
            result = self.engine.force_end_turn(state)

        self._commit(result)
        self.scheduler.release()
        self._schedule_computer()

    def _recover(self, now: float) -> None:
        step = self.scheduler.current
        elapsed = self.scheduler.held_for(now)
        logger.warning(
            f"Turn guard stuck on {step.kind.value} step #{step.seq} for {elapsed:.1f}s, "
            f"forcing the computer's turn to end"
        )
        self.scheduler.force_release()
        if self._state.phase == Phase.PLAYING and self._state.current is Side.COMPUTER:
            self._commit(self.engine.force_end_turn(self._state))
        self._schedule_computer()

    def _commit(self, result: StepResult) -> None:
        self._state = result.state
        note = Notification(result.state, result.events, result.message, result.accepted)
        for callback in list(self._observers):
            callback(note)
