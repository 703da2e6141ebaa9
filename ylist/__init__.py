"""
ylist - 基于 SQLAlchemy 的有序列表

在分组内维护连续的整数位置，提供插入、移动、移出等操作，
所有同组调整都使用带条件的批量 UPDATE 并在一个事务中完成。
"""

__version__ = "0.1.0"

from .orm import (
    Base,
    CoreModel,
    SlotFieldMixin,
    ListableMixin,
    ListConfig,
    AddNewAt,
    ListableError,
    ListConfigError,
    DetachedRowError,
    transaction_manager,
)
from .log import get_logger, setup_logger, setup_root_logger

__all__ = [
    "__version__",
    "Base",
    "CoreModel",
    "SlotFieldMixin",
    "ListableMixin",
    "ListConfig",
    "AddNewAt",
    "ListableError",
    "ListConfigError",
    "DetachedRowError",
    "transaction_manager",
    "get_logger",
    "setup_logger",
    "setup_root_logger",
]
