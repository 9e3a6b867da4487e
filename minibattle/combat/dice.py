"""
骰子系统

所有随机数都通过 DiceRoller 实例获取，便于测试时注入确定性的随机源
"""
import random
from typing import List, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")


class DiceRoller:
    """
    骰子投掷器

    rng 只需要提供 randint(a, b)，默认使用 random.Random(seed)
    """

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None):
        self._rng = rng if rng is not None else random.Random(seed)

    def roll_single(self, die_size: int) -> int:
        """
        投掷单个骰子

        Args:
            die_size: 骰子面数（如20表示d20）

        Returns:
            int: 结果（1到die_size）
        """
        if die_size <= 0:
            raise ValueError("die_size must be > 0")
        return self._rng.randint(1, die_size)

    def roll_dice(self, dice_count: int, die_size: int) -> Tuple[int, List[int]]:
        """
        投掷多个骰子

        Returns:
            Tuple[int, List[int]]: (总值, 各骰子结果列表)
        """
        if dice_count < 0:
            raise ValueError("dice_count must be >= 0")
        rolls = [self.roll_single(die_size) for _ in range(dice_count)]
        return sum(rolls), rolls

    def d20(self) -> int:
        """投掷 d20"""
        return self.roll_single(20)

    def d20_with_mode(self, mode: str = "normal") -> Tuple[int, Tuple[int, ...]]:
        """
        根据优势/劣势骰d20

        Returns:
            Tuple[int, Tuple[int, ...]]: (采用的结果, 实际骰出的结果)
        """
        if mode == "advantage":
            first, second = self.d20(), self.d20()
            return max(first, second), (first, second)
        if mode == "disadvantage":
            first, second = self.d20(), self.d20()
            return min(first, second), (first, second)
        roll = self.d20()
        return roll, (roll,)

    def choice(self, options: Sequence[T]) -> T:
        """随机选择一个元素（AI / 超时自动选择使用）"""
        if not options:
            raise ValueError("Cannot choose from an empty sequence")
        if len(options) == 1:
            return options[0]
        return options[self.roll_single(len(options)) - 1]
