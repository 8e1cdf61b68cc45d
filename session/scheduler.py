"""
回合调度器

单线程的待处理步骤队列 + "回合进行中"标志:
- 同一时间只有一个电脑步骤在执行
- 重复调度被忽略
- 标志卡住超过安全时限时可被强制清除
"""
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, Optional


class StepKind(Enum):
    """待处理步骤类型"""
    COMPUTER_TURN = "computer_turn"


@dataclass(frozen=True)
class PendingStep:
    """
    待处理步骤

    Attributes:
        kind: 步骤类型
        due: 可以执行的时间
        seq: 调度序号
    """
    kind: StepKind
    due: float
    seq: int


class TurnScheduler:
    """待处理步骤队列与回合进行中标志"""

    def __init__(self):
        self._queue: Deque[PendingStep] = deque()
        self._seq = 0
        self._guard: Optional[PendingStep] = None
        self._guard_since: float = 0.0

    def schedule(self, kind: StepKind, due: float) -> Optional[PendingStep]:
        """
        加入一个步骤

        已有同类步骤排队或正在执行时不重复加入

        Returns:
            新步骤，被忽略时为 None
        """
        if self.has_pending(kind) or (self._guard is not None and self._guard.kind == kind):
            return None
        self._seq += 1
        step = PendingStep(kind, due, self._seq)
        self._queue.append(step)
        return step

    def has_pending(self, kind: Optional[StepKind] = None) -> bool:
        if kind is None:
            return bool(self._queue)
        return any(step.kind == kind for step in self._queue)

    @property
    def busy(self) -> bool:
        """回合进行中标志是否被占用"""
        return self._guard is not None

    @property
    def current(self) -> Optional[PendingStep]:
        return self._guard

    def pop_due(self, now: float) -> Optional[PendingStep]:
        """取出已到期的队首步骤"""
        if self._queue and self._queue[0].due <= now:
            return self._queue.popleft()
        return None

    def pop_next(self) -> Optional[PendingStep]:
        """忽略时间取出队首步骤"""
        if self._queue:
            return self._queue.popleft()
        return None

    def acquire(self, step: PendingStep, now: float) -> bool:
        """
        占用回合进行中标志

        Returns:
            是否成功 (已被占用时为 False)
        """
        if self._guard is not None:
            return False
        self._guard = step
        self._guard_since = now
        return True

    def release(self) -> None:
        self._guard = None

    def held_for(self, now: float) -> float:
        """标志已被占用的时间"""
        if self._guard is None:
            return 0.0
        return now - self._guard_since

    def stuck(self, now: float, timeout: float) -> bool:
        """标志占用时间是否超过安全时限"""
        return self._guard is not None and self.held_for(now) > timeout

    def force_release(self) -> Optional[PendingStep]:
        """强制清除标志，返回被清除的步骤"""
        step, self._guard = self._guard, None
        return step

    def clear(self) -> None:
        """清空队列和标志 (新回合或重新开始)"""
        self._queue.clear()
        self._guard = None

    def __len__(self) -> int:
        return len(self._queue)
