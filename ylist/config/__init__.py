"""配置模块

提供配置管理功能：
- ListSettings: 列表排序的全局默认值（字段名、顶部位置、新记录位置）
- LoggingSettings: 日志配置
- AppSettings: 组合配置
- ConfigLoader: YAML 配置加载器

快速开始:
    from ylist.config import AppSettings, load_yaml_config, configure_list_settings

    settings = load_yaml_config("config/settings.yaml", AppSettings)
    configure_list_settings(settings.list)

配置优先级: 模型类属性 > 环境变量 / YAML > 默认值
"""

from .settings import (
    AppSettings,
    ListSettings,
    LoggingSettings,
    get_list_settings,
    configure_list_settings,
    reset_list_settings,
)

from .loader import (
    ConfigLoader,
    load_yaml_config,
)

__all__ = [
    # Settings Classes
    "AppSettings",
    "ListSettings",
    "LoggingSettings",
    "get_list_settings",
    "configure_list_settings",
    "reset_list_settings",

    # Config Loader
    "ConfigLoader",
    "load_yaml_config",
]
