"""列表配置

每个模型类在第一次使用时构建一个不可变的 ListConfig，
之后所有排序操作都读取这个配置，不再访问类属性。
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ylist.config import get_list_settings

from .exceptions import ListConfigError


class AddNewAt(str, Enum):
    """新记录加入列表的位置"""

    TOP = "top"
    BOTTOM = "bottom"


@dataclass(frozen=True)
class ListConfig:
    """列表配置（不可变）

    Attributes:
        column: 位置字段的属性名
        scope: 分组规格，None / 字段名 / 字段名列表 / 自定义条件
        top_of_list: 列表顶部的位置值
        add_new_at: 新记录加入位置
    """

    column: str = "slot"
    scope: Any = None
    top_of_list: int = 1
    add_new_at: AddNewAt = AddNewAt.BOTTOM

    @classmethod
    def from_model(cls, model: type) -> "ListConfig":
        """从模型类属性构建配置

        未声明的属性使用 ListSettings 中的全局默认值。

        Args:
            model: 声明了 __list_* 属性的模型类

        Raises:
            ListConfigError: 配置值无效
        """
        settings = get_list_settings()
        column = getattr(model, "__list_column__", None) or settings.column
        scope = getattr(model, "__list_scope__", None)
        top = getattr(model, "__list_top__", None)
        add_new_at = getattr(model, "__list_add_new_at__", None) or settings.add_new_at

        if top is None:
            top = settings.top_of_list
        if isinstance(top, bool) or not isinstance(top, int):
            raise ListConfigError(model.__name__, f"__list_top__ 必须是整数，实际为 {top!r}")

        return cls(
            column=column,
            scope=scope,
            top_of_list=top,
            add_new_at=_parse_add_new_at(model.__name__, add_new_at),
        )


def _parse_add_new_at(model_name: str, value: Any) -> AddNewAt:
    if isinstance(value, AddNewAt):
        return value
    try:
        return AddNewAt(str(value).lower())
    except ValueError:
        raise ListConfigError(model_name, f"__list_add_new_at__ 只能是 top 或 bottom，实际为 {value!r}")


def describe(config: ListConfig, model: Optional[type] = None) -> str:
    """配置的简短描述，用于日志"""
    name = model.__name__ if model is not None else "?"
    return (
        f"{name}(column={config.column}, scope={config.scope!r}, "
        f"top={config.top_of_list}, add_new_at={config.add_new_at.value})"
    )
