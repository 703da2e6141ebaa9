"""位置字段访问

封装位置字段的读写、列表顶部常量以及底部位置的查找。
"""

from typing import Any, Optional

from sqlalchemy import and_, func, inspect, not_, select
from sqlalchemy.sql.elements import ClauseElement

from .config import ListConfig
from .exceptions import ListConfigError
from .scope import ScopeResolver


class PositionAccessor:
    """位置字段访问器

    Attributes:
        attribute: 位置字段的属性名
        column: 位置字段对应的 Column
        top: 列表顶部的位置值
    """

    def __init__(self, model: type, config: ListConfig, scopes: ScopeResolver):
        mapper = inspect(model)
        if config.column not in mapper.columns:
            raise ListConfigError(model.__name__, f"位置字段 {config.column!r} 不存在")

        self.model = model
        self.mapper = mapper
        self.attribute = config.column
        self.column = mapper.columns[config.column]
        self.top = config.top_of_list
        self.scopes = scopes

    # ==================== 读写 ====================

    def get(self, row) -> Optional[int]:
        return getattr(row, self.attribute)

    def set(self, row, value: Optional[int]) -> None:
        setattr(row, self.attribute, value)

    def is_listed(self, row) -> bool:
        return self.get(row) is not None

    def is_unlisted(self, row) -> bool:
        return self.get(row) is None

    def default_value(self) -> Optional[int]:
        """位置字段声明的标量默认值，没有时返回 None"""
        default = self.column.default
        if default is not None and default.is_scalar:
            return default.arg
        return None

    # ==================== 条件 ====================

    def identity(self, row) -> Optional[ClauseElement]:
        """按主键匹配记录本身的条件，记录尚无主键时返回 None"""
        # 已持久化的记录直接使用 identity，避免在 flush 中加载过期属性
        values = inspect(row).identity or self.mapper.primary_key_from_instance(row)
        if any(value is None for value in values):
            return None
        return and_(*[
            column == value for column, value in zip(self.mapper.primary_key, values)
        ])

    def excluding(self, row) -> Optional[ClauseElement]:
        """排除记录本身的条件"""
        identity = self.identity(row)
        return not_(identity) if identity is not None else None

    def peers(self, row, *criteria, excluding=None, scope=None) -> list:
        """同组记录的完整条件列表

        Args:
            row: 用于确定分组的记录
            *criteria: 附加条件（通常是位置范围）
            excluding: 需要排除的记录
            scope: 预先生成的分组条件，不传时按记录当前值生成
        """
        if scope is None:
            scope = self.scopes.condition(row)
        clauses = [scope, *criteria]
        if excluding is not None:
            clause = self.excluding(excluding)
            if clause is not None:
                clauses.append(clause)
        return clauses

    # ==================== 查询 ====================

    def bottom_position(self, executor, row, excluding=None) -> int:
        """同组记录中的最大位置

        Args:
            executor: Session 或 Connection
            row: 用于确定分组的记录
            excluding: 需要排除的记录

        Returns:
            最大位置；没有已入列的同组记录时返回 top - 1
        """
        stmt = (
            select(self.column)
            .where(*self.peers(row, self.column.is_not(None), excluding=excluding))
            .order_by(self.column.desc())
            .limit(1)
        )
        value = executor.execute(stmt).scalar()
        return self.top - 1 if value is None else value

    def bottom_item(self, session, row, excluding=None) -> Optional[Any]:
        """位置最大的同组记录"""
        stmt = (
            select(self.model)
            .where(*self.peers(row, self.column.is_not(None), excluding=excluding))
            .order_by(self.column.desc())
            .limit(1)
        )
        return session.scalars(stmt).first()

    def item_at(self, session, row, position: int) -> Optional[Any]:
        """同组中处于指定位置的记录"""
        stmt = (
            select(self.model)
            .where(*self.peers(row, self.column == position))
            .limit(1)
        )
        return session.scalars(stmt).first()

    def count_at(self, executor, row, position: int) -> int:
        """同组中处于指定位置的记录数（包含记录本身）"""
        stmt = (
            select(func.count())
            .select_from(self.column.table)
            .where(*self.peers(row, self.column == position))
        )
        return executor.execute(stmt).scalar() or 0

    def read_stored(self, executor, row) -> Optional[int]:
        """从数据库重新读取记录的位置，不使用内存中的值"""
        identity = self.identity(row)
        if identity is None:
            return None
        stmt = select(self.column).where(identity)
        return executor.execute(stmt).scalar()
