"""列表管理 Mixin 使用示例

演示 ListableMixin 的各种使用场景：
1. 待办清单：按清单分组，追加、上移、置顶、移出
2. 新闻频道：新记录加入顶部
3. 直接修改位置字段与删除后的自动补位
4. 多个操作合并为一个事务
"""

import sys
from pathlib import Path

# 添加项目根目录到 path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from sqlalchemy import Integer, String, create_engine
from sqlalchemy.orm import Mapped, mapped_column, scoped_session, sessionmaker

from ylist.log import setup_root_logger
from ylist.orm import (
    Base,
    CoreModel,
    SlotFieldMixin,
    ListableMixin,
    transaction_manager,
)


# ==================== 模型定义 ====================

class TodoItem(CoreModel, SlotFieldMixin, ListableMixin):
    """待办事项 - 每个清单各自编号"""
    __tablename__ = "demo_todo_item"
    __list_scope__ = "todo_list"    # 关系名简写，使用 todo_list_id

    todo_list_id: Mapped[int] = mapped_column(Integer, comment="清单ID")
    title: Mapped[str] = mapped_column(String(100), comment="标题")


class NewsItem(CoreModel, SlotFieldMixin, ListableMixin):
    """新闻 - 最新的排在最前"""
    __tablename__ = "demo_news_item"
    __list_scope__ = "channel_id"
    __list_add_new_at__ = "top"

    channel_id: Mapped[int] = mapped_column(Integer, comment="频道ID")
    title: Mapped[str] = mapped_column(String(100), comment="标题")


def show(label, model, **scope):
    rows = model.list_for(**scope)
    print(f"  {label}: " + ", ".join(f"{row.slot}.{row.title}" for row in rows))


# ==================== 示例 1: 待办清单 ====================

def demo_todo_list():
    print("\n=== 示例 1: 待办清单 ===")
    a, b, c = [TodoItem(todo_list_id=1, title=t).save(commit=True) for t in ("买菜", "做饭", "洗碗")]
    TodoItem(todo_list_id=2, title="写周报").save(commit=True)
    show("初始", TodoItem, todo_list_id=1)

    c.move_higher()
    show("洗碗上移", TodoItem, todo_list_id=1)

    b.move_to_top()
    show("做饭置顶", TodoItem, todo_list_id=1)

    a.remove_from_list()
    show("买菜移出", TodoItem, todo_list_id=1)
    print(f"  买菜 slot={a.slot}, 仍在列表中: {a.is_listed()}")

    a.insert_at(2)
    show("买菜插回第 2 位", TodoItem, todo_list_id=1)
    show("清单 2 不受影响", TodoItem, todo_list_id=2)


# ==================== 示例 2: 新记录加入顶部 ====================

def demo_news():
    print("\n=== 示例 2: 新闻频道 ===")
    for title in ("旧闻", "新闻", "快讯"):
        NewsItem(channel_id=1, title=title).save(commit=True)
    show("发布顺序 旧闻 -> 新闻 -> 快讯", NewsItem, channel_id=1)


# ==================== 示例 3: 直接修改与删除 ====================

def demo_direct_update(session):
    print("\n=== 示例 3: 直接修改位置字段 / 删除 ===")
    last = TodoItem.list_for(todo_list_id=1)[-1]
    last.slot = 1
    session.commit()
    show(f"{last.title}.slot = 1", TodoItem, todo_list_id=1)

    first = TodoItem.list_for(todo_list_id=1)[0]
    first.delete(commit=True)
    show(f"删除 {first.title}", TodoItem, todo_list_id=1)


# ==================== 示例 4: 合并事务 ====================

def demo_transaction(session):
    print("\n=== 示例 4: 合并事务 ===")
    items = TodoItem.list_for(todo_list_id=1)
    try:
        with transaction_manager.transaction(session):
            items[-1].move_to_top()
            items[0].remove_from_list()
            raise RuntimeError("中途取消")
    except RuntimeError as e:
        print(f"  事务回滚: {e}")
    show("回滚后", TodoItem, todo_list_id=1)


def main():
    setup_root_logger(level="INFO")

    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(bind=engine)
    session_scope = scoped_session(sessionmaker(bind=engine, autoflush=False))
    CoreModel.query = session_scope.query_property()

    demo_todo_list()
    demo_news()
    demo_direct_update(session_scope())
    demo_transaction(session_scope())

    session_scope.remove()


if __name__ == "__main__":
    main()
