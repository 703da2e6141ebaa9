"""事务上下文

提供事务和保存点的上下文管理
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from ylist.log import get_logger

from .state import TransactionState
from .propagation import TransactionPropagation
from .exceptions import (
    TransactionNotActiveError,
    TransactionAlreadyCommittedError,
    TransactionAlreadyRolledBackError,
)

logger = get_logger("ylist.orm.transaction")


class TransactionContext:
    """事务上下文

    管理单个事务的生命周期：
    - 状态跟踪与嵌套层级
    - 保存点
    - 提交/回滚后回调

    一次排序操作中的“同组记录批量调整 + 自身位置更新”都在同一个
    TransactionContext 中执行，要么全部提交，要么全部回滚。

    使用示例:
        with TransactionContext(session) as tx:
            item.move_to_top()
            other.remove_from_list()

            @tx.after_commit
            def on_committed(ctx):
                notify_list_changed()
    """

    def __init__(
        self,
        session: Session,
        auto_commit: bool = True,
        propagation: TransactionPropagation = None,
    ):
        """初始化事务上下文

        Args:
            session: SQLAlchemy Session 对象
            auto_commit: 是否在上下文结束时自动提交
            propagation: 事务传播行为
        """
        self._session = session
        self._auto_commit = auto_commit
        self._propagation = propagation or TransactionPropagation.REQUIRED
        self._state = TransactionState.INACTIVE
        self._nesting_level = 0
        self._savepoint_counter = 0

        self._after_commit: List[Callable] = []
        self._after_rollback: List[Callable] = []

        # 上下文数据（用于在回调之间传递数据）
        self.data: Dict[str, Any] = {}

    # ==================== 属性 ====================

    @property
    def session(self) -> Session:
        """获取数据库 session"""
        return self._session

    @property
    def state(self) -> TransactionState:
        """获取事务状态"""
        return self._state

    @property
    def is_active(self) -> bool:
        """事务是否活跃"""
        return self._state == TransactionState.ACTIVE

    @property
    def nesting_level(self) -> int:
        """获取嵌套层级"""
        return self._nesting_level

    @property
    def propagation(self) -> TransactionPropagation:
        """获取事务传播行为"""
        return self._propagation

    # ==================== 生命周期 ====================

    def begin(self) -> 'TransactionContext':
        """开始事务"""
        if self._state == TransactionState.ACTIVE:
            self._nesting_level += 1
            logger.debug(f"加入现有事务 (level={self._nesting_level})")
            return self

        # SQLAlchemy 2.x 的 Session 会自动开启底层事务
        self._state = TransactionState.ACTIVE
        self._nesting_level = 1
        logger.debug("事务开始")
        return self

    def commit(self) -> None:
        """提交事务"""
        if self._state == TransactionState.COMMITTED:
            raise TransactionAlreadyCommittedError()
        if self._state == TransactionState.ROLLED_BACK:
            raise TransactionAlreadyRolledBackError()
        if self._state != TransactionState.ACTIVE:
            raise TransactionNotActiveError(f"无法提交：事务状态为 {self._state.value}")

        if self._nesting_level > 1:
            self._nesting_level -= 1
            logger.debug(f"嵌套事务退出 (level={self._nesting_level})")
            return

        try:
            self._session.commit()
        except Exception:
            self._state = TransactionState.FAILED
            raise

        self._state = TransactionState.COMMITTED
        self._nesting_level = 0
        logger.debug("事务提交成功")
        self._run_callbacks(self._after_commit, "after_commit")

    def rollback(self) -> None:
        """回滚事务（幂等）"""
        if self._state == TransactionState.COMMITTED:
            raise TransactionAlreadyCommittedError("无法回滚：事务已提交")
        if self._state not in (TransactionState.ACTIVE, TransactionState.FAILED):
            return

        try:
            self._session.rollback()
        except Exception as e:
            self._state = TransactionState.FAILED
            logger.error(f"事务回滚失败: {e}")
            raise

        self._state = TransactionState.ROLLED_BACK
        self._nesting_level = 0
        logger.debug("事务回滚成功")
        self._run_callbacks(self._after_rollback, "after_rollback")

    def flush(self) -> None:
        """刷新 session（将变更写入数据库但不提交）"""
        if not self.is_active:
            raise TransactionNotActiveError("无法刷新：事务未激活")
        self._session.flush()

    @contextmanager
    def savepoint(self, name: str = None):
        """创建保存点

        保存点内抛出异常时只回滚到保存点，异常继续向外抛出。

        Args:
            name: 保存点名称（仅用于日志），不传则自动生成
        """
        if not self.is_active:
            raise TransactionNotActiveError("无法创建保存点：事务未激活")

        if name is None:
            self._savepoint_counter += 1
            name = f"sp_{self._savepoint_counter}"

        nested = self._session.begin_nested()
        logger.debug(f"创建保存点: {name}")
        try:
            yield self
        except Exception:
            if nested.is_active:
                nested.rollback()
                logger.debug(f"保存点 {name} 已回滚")
            raise
        else:
            if nested.is_active:
                nested.commit()
                logger.debug(f"保存点 {name} 已释放")

    # ==================== 回调 ====================

    def after_commit(self, func: Callable) -> Callable:
        """注册提交后回调（装饰器方式），回调接收事务上下文"""
        self._after_commit.append(func)
        return func

    def after_rollback(self, func: Callable) -> Callable:
        """注册回滚后回调（装饰器方式）"""
        self._after_rollback.append(func)
        return func

    def _run_callbacks(self, callbacks: List[Callable], kind: str) -> None:
        """执行回调，回调失败只记录日志，不影响已完成的提交/回滚"""
        for func in callbacks:
            try:
                func(self)
            except Exception as e:
                logger.warning(f"{kind} 回调 {getattr(func, '__name__', func)} 执行失败: {e}")

    # ==================== 上下文管理器 ====================

    def __enter__(self) -> 'TransactionContext':
        return self.begin()

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is not None:
            self.rollback()
            return False

        if self._auto_commit and self._nesting_level == 1:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        elif self._nesting_level > 1:
            self._nesting_level -= 1

        return False

    def __repr__(self) -> str:
        return (
            f"TransactionContext("
            f"state={self._state.value}, "
            f"nesting_level={self._nesting_level})"
        )
