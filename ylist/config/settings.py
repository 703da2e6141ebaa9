"""
配置模块
提供列表排序的默认配置，业务项目可以继承并覆盖
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class ListSettings(BaseSettings):
    """列表排序配置

    模型类未声明 __list_column__ / __list_top__ / __list_add_new_at__ 时，
    使用这里的全局默认值。

    使用示例:
        from ylist.config import ListSettings, configure_list_settings

        # 全部列表从 0 开始编号，新记录放到最前
        configure_list_settings(ListSettings(top_of_list=0, add_new_at="top"))

    环境变量:
        YLIST_LIST_COLUMN=position
        YLIST_LIST_TOP_OF_LIST=0
        YLIST_LIST_ADD_NEW_AT=top
    """
    column: str = Field(default="slot", description="位置字段名")
    top_of_list: int = Field(default=1, description="列表顶部的位置值")
    add_new_at: str = Field(default="bottom", description="新记录加入位置：top 或 bottom")

    class Config:
        env_prefix = "YLIST_LIST_"


class LoggingSettings(BaseSettings):
    """日志配置

    使用示例:
        from ylist.config import LoggingSettings
        from ylist.log import setup_root_logger

        setup_root_logger(config=LoggingSettings(level="DEBUG", file_path="logs/ylist.log"))
    """
    level: str = Field(default="INFO", description="日志级别")
    file_path: str = Field(default="", description="日志文件路径，为空时不写文件")
    file_encoding: str = Field(default="utf-8", description="文件编码")
    enable_console: bool = Field(default=True, description="是否启用控制台输出")

    class Config:
        env_prefix = "YLIST_LOG_"


class AppSettings(BaseSettings):
    """应用配置

    组合排序与日志配置，通常配合 load_yaml_config 使用:

        settings = load_yaml_config("config/settings.yaml", AppSettings)
        configure_list_settings(settings.list)
        setup_root_logger(config=settings.logging)

    对应的 YAML:

        list:
          column: position
          top_of_list: 0
        logging:
          level: DEBUG
    """
    list: ListSettings = Field(default_factory=ListSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    class Config:
        env_prefix = "YLIST_"


# 当前生效的排序配置（延迟创建，便于测试中通过环境变量覆盖）
_list_settings: Optional[ListSettings] = None


def get_list_settings() -> ListSettings:
    """获取当前生效的排序配置"""
    global _list_settings
    if _list_settings is None:
        _list_settings = ListSettings()
    return _list_settings


def configure_list_settings(settings: Optional[ListSettings] = None, **overrides) -> ListSettings:
    """设置全局排序配置

    只影响之后首次构建配置的模型类，已经构建过的 ListConfig 不会改变。

    Args:
        settings: 新的配置对象，None 时以当前配置为基础
        **overrides: 需要覆盖的字段

    Returns:
        生效后的配置对象
    """
    global _list_settings
    base = settings or get_list_settings()
    if overrides:
        base = base.model_copy(update=overrides)
    _list_settings = base
    return _list_settings


def reset_list_settings() -> None:
    """清除全局排序配置，下次获取时重新读取环境变量"""
    global _list_settings
    _list_settings = None
