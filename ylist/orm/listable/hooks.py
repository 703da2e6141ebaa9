"""生命周期钩子

把 ReorderingEngine 的钩子接口挂到 SQLAlchemy 的 mapper 事件上：

    before_insert   -> on_before_create         新记录分配位置
    before_update   -> 记录修改前的位置          （不在引擎接口中）
    after_update    -> on_after_update(old)     直接修改位置字段后修正冲突
    before_delete   -> on_before_destroy        从数据库重新读取位置
    after_delete    -> on_after_destroy(pos)    下面的记录上移

事件注册在 ListableMixin 上并设置 propagate=True，所有映射子类自动生效。
钩子在 flush 的 Connection 上执行批量更新，flush 结束后由
after_flush_postexec 让 session 中同组记录的位置字段过期。

同一次 flush 中同组的多条新增或删除记录登记在 Session.info 中，
before_flush 与 after_flush_postexec 时清空。
"""

from sqlalchemy import event, inspect
from sqlalchemy.orm import Session

from ylist.log import get_logger

from .engine import (
    CAPTURED_POSITION_KEY,
    FLUSH_RECORD_KEYS,
    SKIP_RECONCILE_KEY,
    STALE_MODELS_KEY,
)

logger = get_logger("ylist.orm.listable")

PREVIOUS_POSITION_KEY = "ylist.previous_position"

_bound = set()


def event_mapper_configured(mapper, class_):
    """映射完成后立即构建引擎，配置错误在启动时暴露"""
    class_.list_engine()


def event_before_insert(mapper, connection, target):
    target.list_engine().on_before_create(connection, target)


def event_before_update(mapper, connection, target):
    """记录位置字段修改前的值

    引擎操作自身产生的修改带有跳过标记，不需要记录。
    """
    state = inspect(target)
    if state.info.get(SKIP_RECONCILE_KEY):
        return

    engine = target.list_engine()
    attribute = engine.positions.attribute
    history = state.attrs[attribute].history
    if not history.has_changes():
        return

    if history.deleted:
        old = history.deleted[0]
    else:
        # 旧值未加载过（或原来就是 NULL），以数据库为准
        old = engine.positions.read_stored(connection, target)
    state.info[PREVIOUS_POSITION_KEY] = old


def event_after_update(mapper, connection, target):
    state = inspect(target)
    if PREVIOUS_POSITION_KEY not in state.info:
        return
    old = state.info.pop(PREVIOUS_POSITION_KEY)
    target.list_engine().on_after_update(connection, target, old)


def event_before_delete(mapper, connection, target):
    target.list_engine().on_before_destroy(connection, target)


def event_after_delete(mapper, connection, target):
    captured = inspect(target).info.pop(CAPTURED_POSITION_KEY, None)
    target.list_engine().on_after_destroy(connection, target, captured)


def _clear_flush_records(session):
    for key in FLUSH_RECORD_KEYS:
        session.info.pop(key, None)


def event_before_flush(session, flush_context, instances):
    """清除上一次（可能失败的）flush 留下的批次记录"""
    _clear_flush_records(session)


def event_after_flush_postexec(session, flush_context):
    """让钩子批量调整过的模型在 session 中的位置字段过期

    Connection 上的 UPDATE 不会同步内存中的对象，过期后下次访问时重新加载。
    """
    _clear_flush_records(session)
    models = session.info.pop(STALE_MODELS_KEY, None)
    if not models:
        return

    models = tuple(models)
    expired = 0
    for obj in list(session.identity_map.values()):
        if isinstance(obj, models) and obj not in session.deleted:
            session.expire(obj, [obj.list_engine().positions.attribute])
            expired += 1
    logger.debug(f"flush 后过期同组记录位置字段: {expired} 个对象")


def bind(mixin: type) -> None:
    """在 mixin 上注册生命周期事件（重复调用无副作用）"""
    if mixin in _bound:
        return
    _bound.add(mixin)

    event.listen(mixin, "mapper_configured", event_mapper_configured, propagate=True)
    event.listen(mixin, "before_insert", event_before_insert, propagate=True)
    event.listen(mixin, "before_update", event_before_update, propagate=True)
    event.listen(mixin, "after_update", event_after_update, propagate=True)
    event.listen(mixin, "before_delete", event_before_delete, propagate=True)
    event.listen(mixin, "after_delete", event_after_delete, propagate=True)

    if not event.contains(Session, "before_flush", event_before_flush):
        event.listen(Session, "before_flush", event_before_flush)
    if not event.contains(Session, "after_flush_postexec", event_after_flush_postexec):
        event.listen(Session, "after_flush_postexec", event_after_flush_postexec)
