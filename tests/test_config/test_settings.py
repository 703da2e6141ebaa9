"""配置类测试

测试 ListSettings / LoggingSettings / AppSettings 以及全局排序配置
"""

from ylist.config import (
    AppSettings,
    ListSettings,
    LoggingSettings,
    configure_list_settings,
    get_list_settings,
    reset_list_settings,
)


class TestListSettings:
    """ListSettings 测试"""

    def test_defaults(self):
        """测试默认值"""
        settings = ListSettings()

        assert settings.column == "slot"
        assert settings.top_of_list == 1
        assert settings.add_new_at == "bottom"

    def test_env_override(self, monkeypatch):
        """测试环境变量覆盖"""
        monkeypatch.setenv("YLIST_LIST_COLUMN", "position")
        monkeypatch.setenv("YLIST_LIST_TOP_OF_LIST", "0")
        monkeypatch.setenv("YLIST_LIST_ADD_NEW_AT", "top")

        settings = ListSettings()

        assert settings.column == "position"
        assert settings.top_of_list == 0
        assert settings.add_new_at == "top"


class TestLoggingSettings:
    """LoggingSettings 测试"""

    def test_defaults(self):
        settings = LoggingSettings()

        assert settings.level == "INFO"
        assert settings.file_path == ""
        assert settings.enable_console is True

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("YLIST_LOG_LEVEL", "DEBUG")

        assert LoggingSettings().level == "DEBUG"


class TestAppSettings:
    """AppSettings 测试"""

    def test_nested_defaults(self):
        settings = AppSettings()

        assert settings.list.column == "slot"
        assert settings.logging.level == "INFO"

    def test_nested_from_dict(self):
        settings = AppSettings(list={"top_of_list": 0}, logging={"level": "WARNING"})

        assert settings.list.top_of_list == 0
        assert settings.logging.level == "WARNING"


class TestGlobalListSettings:
    """全局排序配置测试"""

    def test_get_returns_same_instance(self):
        assert get_list_settings() is get_list_settings()

    def test_configure_with_overrides(self):
        """只覆盖指定字段"""
        configured = configure_list_settings(top_of_list=0)

        assert configured.top_of_list == 0
        assert configured.column == "slot"
        assert get_list_settings() is configured

    def test_configure_with_instance(self):
        settings = ListSettings(column="position")
        configure_list_settings(settings)

        assert get_list_settings().column == "position"

    def test_reset(self, monkeypatch):
        """复位后重新读取环境变量"""
        configure_list_settings(top_of_list=5)
        monkeypatch.setenv("YLIST_LIST_TOP_OF_LIST", "3")

        reset_list_settings()

        assert get_list_settings().top_of_list == 3
