"""日志模块

提供日志配置与获取：
- setup_logger / setup_root_logger: 配置日志记录器
- get_logger: 按模块名获取日志记录器（自动添加 ylist 前缀）

使用示例:
    from ylist.log import setup_root_logger, get_logger

    # 应用启动时配置一次
    setup_root_logger(level="DEBUG")

    # 各模块中获取
    logger = get_logger()
    logger.debug("slot 调整完成")
"""

from .logger import (
    setup_logger,
    setup_root_logger,
    create_formatter,
    MicrosecondFormatter,
    DEFAULT_LOG_FORMAT,
    orm_logger,
    list_logger,
    transaction_logger,
    logger,
    get_logger,
)

__all__ = [
    "setup_logger",
    "setup_root_logger",
    "create_formatter",
    "MicrosecondFormatter",
    "DEFAULT_LOG_FORMAT",
    "orm_logger",
    "list_logger",
    "transaction_logger",
    "logger",
    "get_logger",
]
