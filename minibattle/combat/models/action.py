"""
行动结果数据模型
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ActionResult:
    """
    行动执行结果（用于日志和UI反馈）

    攻击类行动：roll/total 为攻击骰及总值
    豁免类行动：roll/total 为目标的豁免骰及总值，saved 表示是否豁免成功
    """

    hit: bool
    damage: int
    critical: bool = False
    roll: int = 0
    total: int = 0

    # 伤害类型（无伤害时为空）
    damage_type: Optional[str] = None

    # 豁免相关
    save_dc: Optional[int] = None
    saved: Optional[bool] = None

    def to_display_text(self) -> str:
        """转换为可读文本"""
        if self.roll == 0 and self.saved is None:
            # 辅助行动：没有攻击骰也没有豁免
            return "no effect"
        if self.saved is not None:
            outcome = "saved" if self.saved else "failed"
            text = f"save {self.roll} (total {self.total}) vs DC {self.save_dc}: {outcome}"
        elif self.hit:
            prefix = "CRITICAL HIT" if self.critical else "hit"
            text = f"{prefix} (roll {self.roll}, total {self.total})"
        else:
            text = f"miss (roll {self.roll}, total {self.total})"
        if self.damage:
            text += f", {self.damage} {self.damage_type or ''} damage".rstrip()
        return text

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "hit": self.hit,
            "damage": self.damage,
            "critical": self.critical,
            "roll": self.roll,
            "total": self.total,
        }
        if self.damage_type is not None:
            data["damage_type"] = self.damage_type
        if self.saved is not None:
            data["save_dc"] = self.save_dc
            data["saved"] = self.saved
        return data
