"""事务传播行为

定义当排序操作在已有事务上下文中被调用时的行为
"""

from enum import Enum


class TransactionPropagation(str, Enum):
    """事务传播行为

    使用示例:
        # 默认：加入外层事务，没有则新建
        with tm.transaction(session, TransactionPropagation.REQUIRED):
            item.move_to_top()

        # 必须已经在事务中（批量调整多个列表时由调用方统一提交）
        with tm.transaction(session, TransactionPropagation.MANDATORY):
            item.move_lower()
    """

    REQUIRED = "required"
    """如果当前有事务则加入，没有则新建（默认）"""

    MANDATORY = "mandatory"
    """必须在事务中执行，否则抛出 PropagationError"""

    NESTED = "nested"
    """在当前事务中创建保存点，失败只回滚到保存点"""

    NEVER = "never"
    """必须不在事务中执行，否则抛出 PropagationError"""
