"""列表重排引擎

负责每一次变更时决定哪些同组记录需要移动、移动多少，
并把“同组批量调整 + 自身位置更新”放进同一个事务。

同组调整全部是一条带条件的 UPDATE（每个方向一条），
不会逐条加载记录，数据库往返次数与列表长度无关。

两种执行方式:
    - 公开操作（move_to_top 等）在 Session 上执行 ORM 批量更新，
      已加载到 session 中的同组记录会同步更新（synchronize_session="fetch"）。
    - 生命周期钩子（插入前、更新后、删除前后）在 flush 的 Connection 上执行，
      flush 结束后由 hooks 模块让同组记录的位置字段过期，下次访问时重新加载。
"""

from contextlib import contextmanager
from typing import Any, List, Optional

from sqlalchemy import inspect, select, update
from sqlalchemy.orm import Session, object_session

from ylist.log import get_logger
from ylist.orm.transaction import transaction_manager

from .config import AddNewAt, ListConfig, describe
from .exceptions import DetachedRowError
from .position import PositionAccessor
from .scope import ScopeResolver

logger = get_logger("ylist.orm.listable")

# InstanceState.info 中使用的键
SKIP_RECONCILE_KEY = "ylist.skip_reconcile"
CAPTURED_POSITION_KEY = "ylist.captured_position"
CAPTURED_SCOPE_KEY = "ylist.captured_scope"
CAPTURED_GROUP_KEY = "ylist.captured_group"

# Session.info 中使用的键，每次 flush 结束后清空
STALE_MODELS_KEY = "ylist.stale_models"
PENDING_ROWS_KEY = "ylist.pending_rows"
CLOSED_POSITIONS_KEY = "ylist.closed_positions"
FLUSH_RECORD_KEYS = (PENDING_ROWS_KEY, CLOSED_POSITIONS_KEY)


class ReorderingEngine:
    """列表重排引擎

    每个模型类一个实例，持有该类的不可变配置。

    公开操作返回 True 表示发生了变更，False 表示无需变更（不是错误）。
    存储层的异常原样抛出，事务回滚后同组调整与自身更新都不会生效。
    """

    def __init__(self, model: type, config: ListConfig):
        self.model = model
        self.config = config
        self.scopes = ScopeResolver(model, config.scope)
        self.positions = PositionAccessor(model, config, self.scopes)
        self.table = self.positions.column.table
        logger.debug(f"列表配置: {describe(config, model)}")

    @property
    def top(self) -> int:
        return self.positions.top

    # ==================== 基础设施 ====================

    def session_for(self, row) -> Session:
        """获取记录所属的 session

        记录不在任何 session 中时，尝试使用模型的 query 绑定的 session 并加入。

        Raises:
            DetachedRowError: 无法确定 session
        """
        session = object_session(row)
        if session is not None:
            return session
        query = getattr(self.model, "query", None)
        if query is None:
            raise DetachedRowError(row)
        session = query.session
        session.add(row)
        return session

    @contextmanager
    def _atomic(self, row):
        """一次公开操作的事务边界

        已有同一 session 上的事务时加入，否则新建并在结束时提交。
        进入后先 flush，保证记录本身已写入且主键可用。
        """
        session = self.session_for(row)
        with transaction_manager.transaction(session):
            session.flush()
            yield session

    def _label(self, row) -> str:
        identity = inspect(row).identity
        key = identity[0] if identity and len(identity) == 1 else identity
        return f"{self.model.__name__}#{key}"

    def _shift(self, executor, row, delta: int, *criteria, excluding=None, scope=None) -> int:
        """同组记录的位置批量加减

        Args:
            executor: Session（公开操作）或 Connection（生命周期钩子）
            row: 用于确定分组的记录
            delta: +1 或 -1
            *criteria: 位置范围条件
            excluding: 需要排除的记录
            scope: 预先生成的分组条件（删除后记录已不可加载时使用）

        Returns:
            受影响的行数
        """
        column = self.positions.column
        where = self.positions.peers(row, *criteria, excluding=excluding, scope=scope)

        if isinstance(executor, Session):
            stmt = (
                update(self.model)
                .where(*where)
                .values({column: column + delta})
                .execution_options(synchronize_session="fetch")
            )
        else:
            stmt = update(self.table).where(*where).values({column: column + delta})
            self._mark_stale(row)

        result = executor.execute(stmt)
        logger.debug(
            f"{self._label(row)} 同组调整 {delta:+d}，"
            f"分组 {self.scopes.peer_values(row) if scope is None else scope}，"
            f"影响 {result.rowcount} 行"
        )
        return result.rowcount

    def _mark_stale(self, row) -> None:
        """记录本次 flush 中被 Connection 直接修改过的模型，flush 结束后让其位置字段过期"""
        session = object_session(row)
        if session is not None:
            session.info.setdefault(STALE_MODELS_KEY, set()).add(self.model)

    def _flush_record(self, row, name: str, group) -> list:
        """本次 flush 中同组已处理过的记录（或位置）

        同一个 mapper 的 before_insert / after_delete 会对所有记录依次触发，
        之后（或之前）才统一执行 INSERT / DELETE，数据库中看不到同批次的其他记录。
        """
        session = object_session(row)
        if session is None:
            return []
        records = session.info.setdefault(name, {})
        return records.setdefault((self.model, group), [])

    def _bump_pending(self, pending: list, start: int) -> None:
        """同批次中尚未写入的记录，位置 >= start 的各下移一位"""
        for other in pending:
            value = self.positions.get(other)
            if value is not None and value >= start:
                self.positions.set(other, value + 1)

    def _persist(self, session: Session, *rows) -> None:
        """写入记录自身的位置变更

        这些变更由引擎计算得出，不需要触发更新后的冲突修正。
        """
        states = [inspect(row) for row in rows]
        for state in states:
            state.info[SKIP_RECONCILE_KEY] = True
        try:
            session.flush()
        finally:
            for state in states:
                state.info.pop(SKIP_RECONCILE_KEY, None)

    def _assign(self, session: Session, row, value: Optional[int], action: str) -> None:
        old = self.positions.get(row)
        self.positions.set(row, value)
        self._persist(session, row)
        logger.debug(f"{self._label(row)} {action}: {old} -> {value}")

    def _shuffle(self, executor, row, old: int, new: int, excluding=None) -> int:
        """调整新旧位置之间的同组记录

        例如把记录从 2 移到 5：[3, 4, 5] 变成 [2, 3, 4]；
        从 5 移到 2：[2, 3, 4] 变成 [3, 4, 5]。
        """
        column = self.positions.column
        if old == new:
            return 0
        if old < new:
            return self._shift(executor, row, -1, column > old, column <= new, excluding=excluding)
        return self._shift(executor, row, +1, column >= new, column < old, excluding=excluding)

    def _clamp(self, executor, row, position: int) -> int:
        """把目标位置限制在列表范围内，避免产生空位

        已入列的记录最多移到当前底部，未入列的记录最多插到底部 + 1。
        """
        bottom = self.positions.bottom_position(executor, row)
        if self.positions.is_unlisted(row):
            bottom += 1
        return max(self.top, min(position, bottom))

    # ==================== 公开操作 ====================

    def insert_at(self, row, position: Optional[int] = None) -> bool:
        """把记录插入到指定位置（默认顶部）"""
        target = self.top if position is None else position
        with self._atomic(row) as session:
            current = self.positions.get(row)
            if current is not None and current == target:
                return False

            target = self._clamp(session, row, target)
            if current is not None:
                if current == target:
                    return False
                self._shuffle(session, row, current, target, excluding=row)
            else:
                self._shift(session, row, +1, self.positions.column >= target)

            self._assign(session, row, target, "insert_at")
        return True

    def move_to_top(self, row) -> bool:
        """移到顶部，原先在它上面的记录各下移一位"""
        with self._atomic(row) as session:
            current = self.positions.get(row)
            if current is None:
                return False
            self._shift(session, row, +1, self.positions.column < current)
            self._assign(session, row, self.top, "move_to_top")
        return True

    def move_to_bottom(self, row) -> bool:
        """移到底部，原先在它下面的记录各上移一位"""
        with self._atomic(row) as session:
            current = self.positions.get(row)
            if current is None:
                return False
            self._shift(session, row, -1, self.positions.column > current)
            bottom = self.positions.bottom_position(session, row, excluding=row)
            self._assign(session, row, bottom + 1, "move_to_bottom")
        return True

    def move_higher(self, row) -> bool:
        """与上一条记录交换位置"""
        with self._atomic(row) as session:
            higher = self.higher_item(row)
            if higher is None:
                return False
            self._swap(session, row, higher, -1)
        return True

    def move_lower(self, row) -> bool:
        """与下一条记录交换位置"""
        with self._atomic(row) as session:
            lower = self.lower_item(row)
            if lower is None:
                return False
            self._swap(session, row, lower, +1)
        return True

    def _swap(self, session: Session, row, neighbour, delta: int) -> None:
        # 使用内存中的位置，不重新读取（删除前才会重新读取）
        current = self.positions.get(row)
        self.positions.set(neighbour, current)
        self.positions.set(row, current + delta)
        self._persist(session, neighbour, row)
        logger.debug(
            f"{self._label(row)} 与 {self._label(neighbour)} 交换: "
            f"{current} <-> {current + delta}"
        )

    def remove_from_list(self, row) -> bool:
        """移出列表，下面的记录各上移一位，自身位置置空"""
        with self._atomic(row) as session:
            current = self.positions.get(row)
            if current is None:
                return False
            self._shift(session, row, -1, self.positions.column > current)
            self._assign(session, row, None, "remove_from_list")
        return True

    def increment_slot(self, row) -> bool:
        """自身位置 +1，不调整其他记录"""
        return self._step(row, +1)

    def decrement_slot(self, row) -> bool:
        """自身位置 -1，不调整其他记录"""
        return self._step(row, -1)

    def _step(self, row, delta: int) -> bool:
        with self._atomic(row) as session:
            current = self.positions.get(row)
            if current is None:
                return False
            self._assign(session, row, current + delta, "increment_slot" if delta > 0 else "decrement_slot")
        return True

    # ==================== 查询 ====================

    def is_first(self, row) -> bool:
        current = self.positions.get(row)
        return current is not None and current == self.top

    def is_last(self, row) -> bool:
        current = self.positions.get(row)
        if current is None:
            return False
        return current == self.positions.bottom_position(self.session_for(row), row)

    def higher_item(self, row) -> Optional[Any]:
        current = self.positions.get(row)
        if current is None:
            return None
        return self.positions.item_at(self.session_for(row), row, current - 1)

    def lower_item(self, row) -> Optional[Any]:
        current = self.positions.get(row)
        if current is None:
            return None
        return self.positions.item_at(self.session_for(row), row, current + 1)

    def bottom_item(self, row, excluding=None) -> Optional[Any]:
        return self.positions.bottom_item(self.session_for(row), row, excluding=excluding)

    def get_list(self, row) -> List[Any]:
        """同组中已入列的记录，按位置排序"""
        column = self.positions.column
        stmt = (
            select(self.model)
            .where(*self.positions.peers(row, column.is_not(None)))
            .order_by(column)
        )
        return list(self.session_for(row).scalars(stmt))

    def list_for(self, session: Session, values: dict) -> List[Any]:
        """按分组字段值查询已入列的记录，按位置排序"""
        column = self.positions.column
        stmt = (
            select(self.model)
            .where(self.scopes.condition_for(values), column.is_not(None))
            .order_by(column)
        )
        return list(session.scalars(stmt))

    # ==================== 生命周期钩子接口 ====================

    def on_before_create(self, connection, row) -> None:
        """插入前：按 add_new_at 策略为新记录分配位置

        同一次 flush 中先分配过位置的同组新记录也计入列表。
        """
        column = self.positions.column
        pending = self._flush_record(row, PENDING_ROWS_KEY, self.scopes.key(row))

        if self.config.add_new_at is AddNewAt.TOP:
            self._shift(connection, row, +1, column.is_not(None))
            self._bump_pending(pending, self.top)
            self.positions.set(row, self.top)
            pending.append(row)
            logger.debug(f"{self.model.__name__} 新记录加入顶部: {self.top}")
            return

        preset = self.positions.get(row)
        bottom = max(
            [self.positions.bottom_position(connection, row)]
            + [self.positions.get(other) for other in pending]
        )
        pending.append(row)
        if (
            preset is None
            or preset == self.positions.default_value()
            or bottom < self.top
            or preset > bottom
        ):
            # 未指定位置、空列表、或指定位置超出底部时追加到底部
            self.positions.set(row, bottom + 1)
            logger.debug(f"{self.model.__name__} 新记录加入底部: {bottom + 1}")
            return

        preset = max(preset, self.top)
        self._shift(connection, row, +1, column >= preset)
        self._bump_pending(pending[:-1], preset)
        self.positions.set(row, preset)
        logger.debug(f"{self.model.__name__} 新记录插入指定位置: {preset}")

    def on_after_update(self, connection, row, old: Optional[int]) -> None:
        """更新后：位置字段被直接修改时修正冲突

        只处理不是由引擎操作产生的修改。
        """
        new = self.positions.get(row)
        if new == old:
            return

        if new is None:
            # 直接置空等同于移出列表
            self._shift(connection, row, -1, self.positions.column > old)
            return

        if self.positions.count_at(connection, row, new) <= 1:
            return

        logger.debug(f"{self._label(row)} 位置被直接修改 {old} -> {new}，修正同组冲突")
        if old is None:
            self._shift(connection, row, +1, self.positions.column >= new, excluding=row)
        else:
            self._shuffle(connection, row, old, new, excluding=row)

    def on_before_destroy(self, connection, row) -> Optional[int]:
        """删除前：从数据库重新读取位置，防止内存中的值已过期

        同时记下分组条件，删除后记录的属性已无法再从数据库加载。
        """
        captured = self.positions.read_stored(connection, row)
        state = inspect(row)
        state.info[CAPTURED_POSITION_KEY] = captured
        state.info[CAPTURED_SCOPE_KEY] = self.scopes.condition(row)
        state.info[CAPTURED_GROUP_KEY] = self.scopes.key(row)
        return captured

    def on_after_destroy(self, connection, row, captured: Optional[int]) -> None:
        """删除后：下面的记录各上移一位

        同一次 flush 删除多条同组记录时，位置都是在任何补位之前读取的，
        需要减去本次已补位过、且位置更靠前的记录数。
        """
        state = inspect(row)
        scope = state.info.pop(CAPTURED_SCOPE_KEY, None)
        group = state.info.pop(CAPTURED_GROUP_KEY, None)
        if captured is None:
            return

        closed = self._flush_record(row, CLOSED_POSITIONS_KEY, group)
        effective = captured - sum(1 for other in closed if other < captured)
        closed.append(captured)
        self._shift(connection, row, -1, self.positions.column > effective, scope=scope)
