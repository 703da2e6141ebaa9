"""列表排序异常类

存储层的失败（约束冲突、连接错误等）直接以 SQLAlchemy 原始异常抛出，
这里只定义配置错误和使用错误。
"""


class ListableError(Exception):
    """列表排序错误基类"""
    pass


class ListConfigError(ListableError):
    """列表配置错误

    当模型的 __list_column__ / __list_scope__ / __list_top__ /
    __list_add_new_at__ 配置无效时抛出
    """

    def __init__(self, model_name: str, message: str):
        self.model_name = model_name
        super().__init__(f"{model_name} 列表配置无效: {message}")


class DetachedRowError(ListableError):
    """记录未关联 session

    排序操作需要执行批量更新，记录必须已加入 session
    """

    def __init__(self, row):
        self.row = row
        super().__init__(f"{row!r} 未关联任何 session，无法调整排序")
