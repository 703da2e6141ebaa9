"""位置字段定义

提供标准的 slot 字段定义 Mixin，简化模型定义。

使用示例:
    from ylist.orm import CoreModel
    from ylist.orm.listable import SlotFieldMixin, ListableMixin

    class TodoItem(CoreModel, SlotFieldMixin, ListableMixin):
        __tablename__ = "todo_item"
        __list_scope__ = "todo_list_id"

        todo_list_id = mapped_column(Integer)
        # slot 字段由 SlotFieldMixin 自动提供
"""

from typing import Optional

from sqlalchemy import Integer
from sqlalchemy.orm import Mapped, mapped_column


class SlotFieldMixin:
    """位置字段 Mixin

    提供标准的 slot 字段定义。

    字段说明:
        - slot: 列表中的位置，从 1 开始连续编号；NULL 表示不在列表中

    slot 没有默认值，新记录的位置由 ListableMixin 在插入前分配。
    """

    # 列表位置，NULL 表示不在列表中
    slot: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        index=True,
        comment="列表位置"
    )


__all__ = [
    "SlotFieldMixin",
]
