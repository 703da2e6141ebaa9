"""列表管理模块

让记录在分组内组成有序列表，位置字段从顶部开始连续编号。

导出:
    - SlotFieldMixin: 位置字段 Mixin（提供可为空的 slot 字段）
    - ListableMixin: 列表管理 Mixin（提供插入、移动、移出等操作）
    - ListConfig / AddNewAt: 不可变的列表配置
    - ReorderingEngine: 重排引擎（每个模型类一个）
    - ScopeResolver / PositionAccessor: 分组条件与位置字段访问

使用示例:
    from ylist.orm import CoreModel, SlotFieldMixin, ListableMixin

    class TodoItem(CoreModel, SlotFieldMixin, ListableMixin):
        __tablename__ = "todo_item"
        __list_scope__ = "todo_list_id"
        todo_list_id = mapped_column(Integer)

    item = TodoItem.get(1)
    item.move_higher()        # 上移
    item.move_lower()         # 下移
    item.move_to_top()        # 置顶
    item.move_to_bottom()     # 置底
    item.insert_at(3)         # 移动到第3位
    item.remove_from_list()   # 移出列表
"""

from .exceptions import ListableError, ListConfigError, DetachedRowError
from .config import AddNewAt, ListConfig
from .scope import ScopeResolver
from .position import PositionAccessor
from .engine import ReorderingEngine
from .slot_fields import SlotFieldMixin
from .listable_mixin import ListableMixin

__all__ = [
    "ListableError",
    "ListConfigError",
    "DetachedRowError",
    "AddNewAt",
    "ListConfig",
    "ScopeResolver",
    "PositionAccessor",
    "ReorderingEngine",
    "SlotFieldMixin",
    "ListableMixin",
]
