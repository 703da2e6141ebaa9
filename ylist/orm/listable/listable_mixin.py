"""列表管理 Mixin

让模型的记录按分组组成有序列表，位置字段保持从顶部开始连续编号
（没有空位，也没有重复）。

使用示例:
    from ylist.orm import CoreModel
    from ylist.orm.listable import SlotFieldMixin, ListableMixin

    # 整张表一个列表
    class Banner(CoreModel, SlotFieldMixin, ListableMixin):
        __tablename__ = "banner"
        title = mapped_column(String(100))

    banner = Banner(title="新品")
    banner.save(commit=True)   # 自动追加到底部
    banner.move_higher()       # 上移一位
    banner.move_to_top()       # 置顶
    banner.remove_from_list()  # 移出列表（slot 置空）
    banner.insert_at(2)        # 重新插入到第 2 位

    # 按外键分组，每个清单各自编号
    class TodoItem(CoreModel, SlotFieldMixin, ListableMixin):
        __tablename__ = "todo_item"
        __list_scope__ = "todo_list"        # 自动使用 todo_list_id
        __list_add_new_at__ = "top"         # 新记录加入顶部

        todo_list_id = mapped_column(Integer)
"""

from typing import Any, List, Optional, Union

from . import hooks
from .config import ListConfig
from .engine import ReorderingEngine


class ListableMixin:
    """列表管理 Mixin

    字段要求（使用者需定义或使用 SlotFieldMixin）:
        - 可为空的整数位置字段，默认名 slot

    可配置属性（子类可覆盖，未声明时使用 ListSettings 中的默认值）:
        - __list_column__: 位置字段名，默认 "slot"
        - __list_scope__: 分组规格，默认 None（整张表一个列表）
            - 字符串: 单字段分组，如 "todo_list_id"，关系名可省略 _id
            - 列表: 多字段分组，如 ["todo_list_id", "status"]
            - 可调用对象: lambda row: 条件表达式
            - SQLAlchemy 条件表达式: 固定的自定义分组
        - __list_top__: 顶部位置，默认 1
        - __list_add_new_at__: 新记录加入位置，"top" 或 "bottom"，默认 "bottom"

    变更操作返回 True 表示已调整，False 表示无需调整（如已在顶部时上移）。
    每个变更操作在一个事务中完成；已处于同一 session 的事务上下文中时加入该事务。
    """

    # ==================== 配置 ====================

    __list_column__: Optional[str] = None
    __list_scope__: Any = None
    __list_top__: Optional[int] = None
    __list_add_new_at__: Optional[str] = None

    @classmethod
    def list_config(cls) -> ListConfig:
        """当前类的列表配置（不可变）"""
        return cls.list_engine().config

    @classmethod
    def list_engine(cls) -> ReorderingEngine:
        """当前类的重排引擎，第一次调用时按类属性构建并缓存在类上"""
        engine = cls.__dict__.get("_list_engine")
        if engine is None:
            engine = ReorderingEngine(cls, ListConfig.from_model(cls))
            cls._list_engine = engine
        return engine

    # ==================== 变更操作 ====================

    def insert_at(self, position: Optional[int] = None) -> bool:
        """插入到指定位置

        Args:
            position: 目标位置，默认为顶部。超出范围时不报错，而是限制在列表范围内：
                已在列表中的记录限制在 [顶部, 底部]，
                不在列表中的记录限制在 [顶部, 底部 + 1]。
                因此最终位置可能与传入的 position 不同

        Returns:
            位置是否发生变化
        """
        return self.list_engine().insert_at(self, position)

    def move_lower(self) -> bool:
        """下移一位（与下一条记录交换）"""
        return self.list_engine().move_lower(self)

    def move_higher(self) -> bool:
        """上移一位（与上一条记录交换）"""
        return self.list_engine().move_higher(self)

    def move_to_top(self) -> bool:
        """置顶，不在列表中时不做任何事"""
        return self.list_engine().move_to_top(self)

    def move_to_bottom(self) -> bool:
        """置底，不在列表中时不做任何事"""
        return self.list_engine().move_to_bottom(self)

    def remove_from_list(self) -> bool:
        """移出列表，下面的记录上移补位"""
        return self.list_engine().remove_from_list(self)

    def increment_slot(self) -> bool:
        """位置 +1，不调整其他记录

        会暂时破坏连续性，需要调用方自行调整其他记录。
        """
        return self.list_engine().increment_slot(self)

    def decrement_slot(self) -> bool:
        """位置 -1，不调整其他记录"""
        return self.list_engine().decrement_slot(self)

    # ==================== 查询 ====================

    def is_first(self) -> bool:
        return self.list_engine().is_first(self)

    def is_last(self) -> bool:
        return self.list_engine().is_last(self)

    def higher_item(self) -> Optional[Any]:
        """上一条记录，不存在时返回 None"""
        return self.list_engine().higher_item(self)

    def lower_item(self) -> Optional[Any]:
        """下一条记录，不存在时返回 None"""
        return self.list_engine().lower_item(self)

    def is_listed(self) -> bool:
        return self.list_engine().positions.is_listed(self)

    def is_unlisted(self) -> bool:
        return self.list_engine().positions.is_unlisted(self)

    def bottom_item(self, excluding_self: bool = False) -> Optional[Any]:
        """底部的记录

        Args:
            excluding_self: 是否排除自身
        """
        return self.list_engine().bottom_item(self, excluding=self if excluding_self else None)

    def get_list(self) -> List[Any]:
        """同一列表中已入列的记录（含自身），按位置排序"""
        return self.list_engine().get_list(self)

    def is_default_slot(self) -> bool:
        """位置是否等于字段声明的默认值"""
        positions = self.list_engine().positions
        default = positions.default_value()
        return default is not None and positions.get(self) == default

    @classmethod
    def list_for(cls, session=None, **scope_values: Union[int, str, None]) -> List[Any]:
        """按分组字段值查询列表

        Args:
            session: 数据库会话，默认使用 query 绑定的 session
            **scope_values: 分组字段值，如 todo_list_id=1

        使用示例:
            items = TodoItem.list_for(todo_list_id=1)
        """
        if session is None:
            session = cls.query.session
        return cls.list_engine().list_for(session, scope_values)


hooks.bind(ListableMixin)


__all__ = [
    "ListableMixin",
]
