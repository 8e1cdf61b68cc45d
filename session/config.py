"""
会话配置
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class SessionConfig:
    """
    会话运行配置

    Attributes:
        computer_delay: 电脑行动前的"思考"时间 (秒)
        safety_timeout: 回合进行中标志被强制清除前的最长时间 (秒)
        seed: 随机种子
        auto_finish_swapping: 发牌后是否自动结束交换阶段
    """
    # 节奏
    computer_delay: float = 1.0
    safety_timeout: float = 5.0

    # 随机
    seed: Optional[int] = None

    # 流程
    auto_finish_swapping: bool = False

    def __post_init__(self):
        if self.computer_delay < 0:
            raise ValueError(f"computer_delay must be >= 0, got {self.computer_delay}")
        if self.safety_timeout <= 0:
            raise ValueError(f"safety_timeout must be positive, got {self.safety_timeout}")

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> 'SessionConfig':
        """从字典创建配置 (忽略未知键)"""
        valid_keys = cls.__dataclass_fields__.keys()
        filtered = {k: v for k, v in d.items() if k in valid_keys}
        return cls(**filtered)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "computer_delay": self.computer_delay,
            "safety_timeout": self.safety_timeout,
            "seed": self.seed,
            "auto_finish_swapping": self.auto_finish_swapping,
        }
