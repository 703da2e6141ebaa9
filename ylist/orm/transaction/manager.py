"""事务管理器

提供事务管理的统一入口
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from functools import wraps
from typing import Callable, Generator, Optional, TypeVar

from sqlalchemy.orm import Session

from ylist.log import get_logger

from .propagation import TransactionPropagation
from .context import TransactionContext
from .exceptions import PropagationError

logger = get_logger("ylist.orm.transaction")

T = TypeVar('T')

# 当前事务上下文（线程/协程安全）
_current_transaction: ContextVar[Optional[TransactionContext]] = ContextVar(
    '_current_transaction', default=None
)


def get_current_transaction() -> Optional[TransactionContext]:
    """获取当前事务上下文

    Returns:
        当前的事务上下文，如果不在事务中则返回 None
    """
    return _current_transaction.get()


class TransactionManager:
    """事务管理器

    使用示例:
        from ylist.orm import transaction_manager as tm

        # 多个排序操作合并为一个事务
        with tm.transaction(session) as tx:
            a.move_to_top()
            b.remove_from_list()

        # 装饰器方式，session_getter 从参数中取得 session
        @tm.transactional(lambda item, *_: object_session(item))
        def promote(item):
            item.move_to_top()
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return
        self._initialized = True

    @property
    def current_transaction(self) -> Optional[TransactionContext]:
        """获取当前事务上下文"""
        return _current_transaction.get()

    def _active_for(self, session: Session) -> Optional[TransactionContext]:
        """返回绑定在同一个 session 上的活跃事务"""
        current = self.current_transaction
        if current is not None and current.is_active and current.session is session:
            return current
        return None

    @contextmanager
    def transaction(
        self,
        session: Session,
        propagation: TransactionPropagation = TransactionPropagation.REQUIRED,
        auto_commit: bool = True,
    ) -> Generator[TransactionContext, None, None]:
        """创建事务上下文

        Args:
            session: 数据库会话
            propagation: 事务传播行为
            auto_commit: 新建事务时是否在结束时自动提交

        Yields:
            TransactionContext 对象
        """
        current = self._active_for(session)

        if propagation == TransactionPropagation.REQUIRED:
            if current is not None:
                with current:
                    yield current
                return

        elif propagation == TransactionPropagation.MANDATORY:
            if current is None:
                raise PropagationError("MANDATORY", "必须在事务中执行")
            with current:
                yield current
            return

        elif propagation == TransactionPropagation.NESTED:
            if current is None:
                raise PropagationError("NESTED", "NESTED 需要一个活跃的外层事务")
            with current.savepoint():
                yield current
            return

        elif propagation == TransactionPropagation.NEVER:
            if current is not None:
                raise PropagationError("NEVER", "不能在事务中执行")

        ctx = TransactionContext(
            session=session,
            auto_commit=auto_commit,
            propagation=propagation,
        )

        token = _current_transaction.set(ctx)
        try:
            with ctx:
                yield ctx
        finally:
            _current_transaction.reset(token)

    def transactional(
        self,
        session_getter: Callable[..., Session],
        propagation: TransactionPropagation = TransactionPropagation.REQUIRED,
    ):
        """事务装饰器

        Args:
            session_getter: 接收被装饰函数的参数，返回要使用的 session
            propagation: 事务传播行为
        """
        def decorator(func: Callable[..., T]) -> Callable[..., T]:
            @wraps(func)
            def wrapper(*args, **kwargs) -> T:
                session = session_getter(*args, **kwargs)
                with self.transaction(session, propagation=propagation):
                    return func(*args, **kwargs)
            return wrapper

        return decorator

    def is_in_transaction(self, session: Session = None) -> bool:
        """检查当前是否在事务中

        Args:
            session: 指定时只认可绑定在该 session 上的事务
        """
        if session is not None:
            return self._active_for(session) is not None
        tx = self.current_transaction
        return tx is not None and tx.is_active


# 全局单例
transaction_manager = TransactionManager()
