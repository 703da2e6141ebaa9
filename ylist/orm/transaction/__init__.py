"""事务管理模块

提供排序操作使用的事务边界：
- 事务上下文（提交/回滚/保存点）
- 事务传播行为（REQUIRED, MANDATORY, NESTED, NEVER）
- 提交/回滚后回调

使用示例:
    from ylist.orm import transaction_manager as tm

    with tm.transaction(session) as tx:
        item.move_to_top()       # 加入外层事务，不单独提交
        other.move_lower()

        @tx.after_commit
        def on_committed(ctx):
            refresh_cache()
"""

from .state import TransactionState
from .exceptions import (
    TransactionError,
    TransactionNotActiveError,
    TransactionAlreadyCommittedError,
    TransactionAlreadyRolledBackError,
    PropagationError,
)
from .propagation import TransactionPropagation
from .context import TransactionContext
from .manager import (
    TransactionManager,
    transaction_manager,
    get_current_transaction,
)

__all__ = [
    # 状态
    "TransactionState",

    # 异常
    "TransactionError",
    "TransactionNotActiveError",
    "TransactionAlreadyCommittedError",
    "TransactionAlreadyRolledBackError",
    "PropagationError",

    # 传播行为
    "TransactionPropagation",

    # 上下文与管理器
    "TransactionContext",
    "TransactionManager",
    "transaction_manager",
    "get_current_transaction",
]
