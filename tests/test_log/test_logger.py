"""日志模块测试

测试 get_logger 名称推断、setup_logger 处理器配置与 setup_root_logger 配置来源
"""

import pytest
import logging
import os

from ylist.config import LoggingSettings
from ylist.log import (
    MicrosecondFormatter,
    create_formatter,
    get_logger,
    setup_logger,
    setup_root_logger,
)


@pytest.fixture
def restore_root_logger():
    """测试后恢复根日志器"""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    propagate = root.propagate
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    root.propagate = propagate


class TestGetLogger:
    """get_logger 测试"""

    def test_auto_infer_module_name(self):
        """无参数调用时使用调用模块的名称"""
        assert get_logger().name == __name__

    def test_simple_name_adds_prefix(self):
        assert get_logger("orm").name == "ylist.orm"

    def test_prefix_not_duplicated(self):
        assert get_logger("ylist.orm.listable").name == "ylist.orm.listable"
        assert get_logger("ylist").name == "ylist"

    def test_external_module_no_prefix(self):
        """含点号的外部模块名不添加前缀"""
        assert get_logger("sqlalchemy.engine").name == "sqlalchemy.engine"

    def test_same_name_same_instance(self):
        assert get_logger("orm") is get_logger("ylist.orm")


class TestSetupLogger:
    """setup_logger 测试"""

    def test_console_handler(self):
        logger = setup_logger("ylist.test.console", level="DEBUG")

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], logging.StreamHandler)

    def test_repeated_setup_does_not_stack_handlers(self):
        setup_logger("ylist.test.repeat")
        logger = setup_logger("ylist.test.repeat")

        assert len(logger.handlers) == 1

    def test_unknown_level_falls_back_to_info(self):
        logger = setup_logger("ylist.test.level", level="verbose")

        assert logger.level == logging.INFO

    def test_file_handler_writes(self, log_dir):
        """写入日志文件，目录不存在时自动创建"""
        log_file = os.path.join(log_dir, "nested", "list.log")
        logger = setup_logger("ylist.test.file", level="DEBUG", log_file=log_file, console=False)

        logger.debug("slot 调整完成")
        for handler in logger.handlers:
            handler.flush()
            handler.close()
        logger.handlers.clear()

        with open(log_file, encoding="utf-8") as f:
            content = f.read()
        assert "slot 调整完成" in content
        assert "ylist.test.file" in content


class TestFormatter:
    """格式化器测试"""

    def test_microsecond_formatter_by_default(self):
        assert isinstance(create_formatter(), MicrosecondFormatter)

    def test_plain_formatter(self):
        formatter = create_formatter(use_microseconds=False)

        assert not isinstance(formatter, MicrosecondFormatter)

    def test_microsecond_precision(self):
        formatter = MicrosecondFormatter(fmt="%(asctime)s")
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
        record.created = 1700000000.123456

        timestamp = formatter.formatTime(record)

        # 秒后面跟 6 位微秒
        assert len(timestamp.rsplit(".", 1)[1]) == 6


class TestSetupRootLogger:
    """setup_root_logger 测试"""

    def test_from_settings(self, restore_root_logger):
        root = setup_root_logger(config=LoggingSettings(level="WARNING"))

        assert root is logging.getLogger()
        assert root.level == logging.WARNING

    def test_from_yaml(self, restore_root_logger, temp_file):
        path = temp_file("logging.yaml", "logging:\n  level: ERROR\n  enable_console: false\n")

        root = setup_root_logger(config_path=path)

        assert root.level == logging.ERROR
        assert root.handlers == []
