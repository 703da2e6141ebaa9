"""ORM模块

提供有序列表所需的 ORM 支持：
- Base / CoreModel: 声明基类与带 CRUD 方法的核心模型
- 事务管理: 事务上下文、传播行为、提交/回滚回调
- 列表管理: SlotFieldMixin + ListableMixin

使用示例:
    from sqlalchemy.orm import scoped_session, sessionmaker
    from ylist.orm import Base, CoreModel, SlotFieldMixin, ListableMixin

    class TodoItem(CoreModel, SlotFieldMixin, ListableMixin):
        __tablename__ = "todo_item"
        __list_scope__ = "todo_list_id"
        todo_list_id = mapped_column(Integer)

    Base.metadata.create_all(engine)
    session_scope = scoped_session(sessionmaker(bind=engine))
    CoreModel.query = session_scope.query_property()

    item = TodoItem(todo_list_id=1).save(commit=True)
    item.move_to_top()
"""

from .base_model import Base, CoreModel

# 事务管理
from .transaction import (
    TransactionState,
    TransactionError,
    TransactionNotActiveError,
    TransactionAlreadyCommittedError,
    TransactionAlreadyRolledBackError,
    PropagationError,
    TransactionPropagation,
    TransactionContext,
    TransactionManager,
    transaction_manager,
    get_current_transaction,
)

# 列表管理
from .listable import (
    ListableError,
    ListConfigError,
    DetachedRowError,
    AddNewAt,
    ListConfig,
    ScopeResolver,
    PositionAccessor,
    ReorderingEngine,
    SlotFieldMixin,
    ListableMixin,
)

__all__ = [
    # 模型
    "Base",
    "CoreModel",

    # 事务
    "TransactionState",
    "TransactionError",
    "TransactionNotActiveError",
    "TransactionAlreadyCommittedError",
    "TransactionAlreadyRolledBackError",
    "PropagationError",
    "TransactionPropagation",
    "TransactionContext",
    "TransactionManager",
    "transaction_manager",
    "get_current_transaction",

    # 列表
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
