"""
Session Layer - 单线程运行时

Modules:
    config: 会话配置
    scheduler: 待处理步骤队列与回合进行中标志
    runtime: 游戏会话
"""
from .config import SessionConfig

from .scheduler import StepKind, PendingStep, TurnScheduler

from .runtime import Notification, GameSession, WAIT_MESSAGE

__all__ = [
    # config
    "SessionConfig",
    # scheduler
    "StepKind",
    "PendingStep",
    "TurnScheduler",
    # runtime
    "Notification",
    "GameSession",
    "WAIT_MESSAGE",
]
