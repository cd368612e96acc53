"""
schemas/__init__.py

统一导入和管理所有的 Pydantic 模型，外部模块通过 `from apps.schemas import ...` 使用。

### 文件结构
- [common.py]：通用模型（camelCase 基类、错误响应）。
- [tasks.py]：任务相关模型（任务创建、更新、输出、统计总结、实时推送事件）。

新增模型时，在对应的 schema 文件中定义，并在此文件中导入、加入 [__all__]。
"""


from .common import (
    CamelModel,
    ErrorResponse,
)

from .tasks import (
    TaskOut,
    TaskCreateRequest,
    TaskUpdateRequest,
    TaskSummaryOut,
    TaskEventName,
    TaskEvent,
)

__all__ = [
    # common.py
    "CamelModel",
    "ErrorResponse",

    # tasks.py
    "TaskOut",
    "TaskCreateRequest",
    "TaskUpdateRequest",
    "TaskSummaryOut",
    "TaskEventName",
    "TaskEvent",
]
