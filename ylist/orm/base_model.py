"""
ORM基础模型

提供声明基类和带常用 CRUD 方法的 CoreModel
"""

from __future__ import annotations

from typing import ClassVar, List, Optional, TYPE_CHECKING

from sqlalchemy import Integer
from sqlalchemy.orm import Mapped, Query, Session, declarative_base, mapped_column

if TYPE_CHECKING:
    from typing_extensions import Self

from ylist.log import get_logger

logger = get_logger("orm")

# 声明基类
Base = declarative_base()


class CoreModel(Base):
    """ORM基础模型类

    提供功能：
    - 自增整数主键 id
    - query 属性（由 scoped_session.query_property() 设置）
    - save / delete / get 等常用方法

    使用示例:
        SessionLocal = sessionmaker(bind=engine)
        session_scope = scoped_session(SessionLocal)
        CoreModel.query = session_scope.query_property()

        class TodoItem(CoreModel, SlotFieldMixin, ListableMixin):
            __tablename__ = "todo_item"
            __list_scope__ = "todo_list_id"

            todo_list_id: Mapped[int] = mapped_column(Integer)

        item = TodoItem(todo_list_id=1)
        item.save(commit=True)
    """
    __abstract__ = True

    # 注意：query 属性需要通过 scoped_session.query_property() 设置
    if TYPE_CHECKING:
        query: ClassVar[Query[Self]]
    else:
        query = None

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    @property
    def session(self) -> Session:
        """获取当前 session

        已在 session 中的对象返回其所属 session，否则使用 query 绑定的 session。
        """
        from sqlalchemy.orm import object_session

        session = object_session(self)
        if session is not None:
            return session
        if self.__class__.query is None:
            raise RuntimeError(f"{self.__class__.__name__}.query 未设置，请先绑定 scoped_session")
        return self.__class__.query.session

    def save(self, commit: bool = False) -> Self:
        """保存对象（新增或更新）

        Args:
            commit: 是否立即提交。处于同一 session 的事务上下文中时，
                    提交被抑制，只执行 flush。
        """
        session = self.session
        session.add(self)
        self._commit_or_flush(session, commit)
        return self

    def delete(self, commit: bool = False) -> None:
        """删除对象"""
        session = self.session
        session.delete(self)
        self._commit_or_flush(session, commit)

    @staticmethod
    def _commit_or_flush(session: Session, commit: bool) -> None:
        if not commit:
            return
        from .transaction import transaction_manager

        if transaction_manager.is_in_transaction(session):
            logger.debug("commit=True 被事务上下文抑制")
            session.flush()
            return
        session.commit()

    @classmethod
    def get(cls, id: int) -> Optional[Self]:
        """根据ID获取对象，不存在返回None"""
        return cls.query.session.get(cls, id)

    @classmethod
    def get_all(cls) -> List[Self]:
        """获取所有记录"""
        return cls.query.all()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} id={self.id}>"
