"""
配置管理模块
"""
import os
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

# 加载环境变量
load_dotenv()


class Settings(BaseModel):
    """战斗引擎配置"""

    # 回合计时（每回合开始时重置）
    turn_timer: int = Field(
        default=int(os.getenv("MINIBATTLE_TURN_TIMER", "30")), ge=1
    )

    # 日志
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = os.getenv(
        "MINIBATTLE_LOG_LEVEL", "INFO"
    ).upper()

    # 最近日志窗口（给UI显示）
    recent_log_count: int = Field(
        default=int(os.getenv("MINIBATTLE_RECENT_LOG_COUNT", "5")), ge=1
    )

    # 战斗历史保留条数
    history_limit: int = Field(
        default=int(os.getenv("MINIBATTLE_HISTORY_LIMIT", "50")), ge=1
    )

    model_config = ConfigDict(validate_default=True)


# 全局配置实例
settings = Settings()
