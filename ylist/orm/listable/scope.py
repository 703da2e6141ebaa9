"""分组条件构建

把模型上声明的 __list_scope__ 转换为 SQLAlchemy 条件，
用来选出与某条记录处于同一个列表中的记录（同组记录）。

支持的分组规格:
    None                      整张表是一个列表
    "todo_list_id"            单字段分组
    "todo_list"               关系名简写，自动使用 todo_list_id
    ["list_id", "status"]     多字段分组，条件用 AND 连接
    lambda row: ...           自定义条件，每次根据记录当前值生成
    Item.archived.is_(False)  固定的自定义条件（与记录无关）

条件中的值全部以绑定参数传递，不做字符串拼接。
"""

from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy import and_, inspect, true
from sqlalchemy.sql.elements import ClauseElement

from .exceptions import ListConfigError


class ScopeResolver:
    """分组条件构建器

    每次调用 condition() 都按记录的当前属性值重新生成条件，不做缓存，
    因此在一次操作的中途修改了分组字段也能拿到最新的同组范围。
    """

    KEYS = "keys"
    EXPRESSION = "expression"
    FACTORY = "factory"

    def __init__(self, model: type, definition: Any):
        self.model = model
        self.definition = definition
        self.keys: List[str] = []
        self._columns: Dict[str, Any] = {}
        self._expression: Optional[ClauseElement] = None
        self._factory: Optional[Callable[[Any], ClauseElement]] = None

        if definition is None:
            self.kind = self.KEYS
        elif isinstance(definition, str):
            self.kind = self.KEYS
            self.keys = [self._resolve_key(definition)]
        elif isinstance(definition, (list, tuple)):
            if not definition or not all(isinstance(key, str) for key in definition):
                raise ListConfigError(model.__name__, f"多字段分组必须是非空的字段名列表，实际为 {definition!r}")
            self.kind = self.KEYS
            self.keys = [self._resolve_key(key) for key in definition]
        elif isinstance(definition, ClauseElement):
            self.kind = self.EXPRESSION
            self._expression = definition
        elif callable(definition):
            self.kind = self.FACTORY
            self._factory = definition
        else:
            raise ListConfigError(model.__name__, f"不支持的分组规格: {definition!r}")

        mapper = inspect(model)
        self._columns = {key: mapper.columns[key] for key in self.keys}

    def _resolve_key(self, name: str) -> str:
        """解析分组字段名，关系名自动补 _id 后缀"""
        columns = inspect(self.model).columns
        if name in columns:
            return name
        if not name.endswith("_id") and f"{name}_id" in columns:
            return f"{name}_id"
        raise ListConfigError(self.model.__name__, f"分组字段 {name!r} 不存在")

    def peer_values(self, row) -> Dict[str, Any]:
        """记录当前的分组字段值（自定义条件时为空字典）"""
        return {key: getattr(row, key) for key in self.keys}

    def condition(self, row) -> ClauseElement:
        """生成选出同组记录的条件

        Args:
            row: 模型实例

        Returns:
            SQLAlchemy 布尔条件
        """
        if self.kind == self.EXPRESSION:
            return self._expression
        if self.kind == self.FACTORY:
            return self._factory(row)
        return self.condition_for(self.peer_values(row))

    def key(self, row) -> Tuple:
        """记录所在分组的可哈希标识

        同一次 flush 中登记待插入、已删除的记录时用来区分分组。
        自定义条件按编译后的 SQL 与绑定参数区分。
        """
        if self.kind == self.KEYS:
            return tuple(self.peer_values(row).values())
        compiled = self.condition(row).compile()
        return (str(compiled), repr(sorted(compiled.params.items())))

    def condition_for(self, values: Dict[str, Any]) -> ClauseElement:
        """按给定的分组字段值生成条件（不需要模型实例）

        Args:
            values: 分组字段名到值的映射，关系名简写同样适用

        Raises:
            ListConfigError: 自定义条件无法由字段值生成，或缺少分组字段
        """
        if self.kind == self.EXPRESSION:
            return self._expression
        if self.kind == self.FACTORY:
            raise ListConfigError(self.model.__name__, "自定义分组条件需要模型实例")
        if not self.keys:
            return true()

        normalized = {}
        for name, value in values.items():
            normalized[self._resolve_key(name)] = value
        missing = [key for key in self.keys if key not in normalized]
        if missing:
            raise ListConfigError(self.model.__name__, f"缺少分组字段: {missing}")

        clauses = []
        for key in self.keys:
            value = normalized[key]
            column = self._columns[key]
            if value is None:
                clauses.append(column.is_(None))
            else:
                clauses.append(column == value)
        return and_(*clauses)

    def __repr__(self) -> str:
        return f"ScopeResolver({self.model.__name__}, {self.kind}, keys={self.keys})"
