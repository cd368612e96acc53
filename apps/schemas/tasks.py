from typing import Literal, Union
from datetime import datetime

from pydantic import Field
from pydantic import field_validator

from database.models import TITLE_MAX_LENGTH, DESCRIPTION_MAX_LENGTH
from .common import CamelModel


class TaskOut(CamelModel):
    """任务输出模型"""
    id: int
    title: str
    description: str
    created_at: datetime
    is_completed: bool


class TaskCreateRequest(CamelModel):
    """创建新任务的请求体模型，createdAt 等客户端字段会被忽略"""
    title: str = Field(..., max_length=TITLE_MAX_LENGTH, description="任务标题")
    description: str = Field("", max_length=DESCRIPTION_MAX_LENGTH, description="任务描述")

    # 先去掉首尾空白，长度限制作用在去空白之后的标题上
    @field_validator('title', mode='before')
    def validate_title(cls, v):
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError('title must not be blank')
        return v

    @field_validator('description', mode='before')
    def validate_description(cls, v):
        return "" if v is None else v


class TaskUpdateRequest(TaskCreateRequest):
    """
    更新任务的请求体模型。

    更新是整体替换：没有传的 description / isCompleted 会被重置为默认值，
    不会保留数据库里原来的值。
    """
    is_completed: bool = Field(False, description="是否已完成")


class TaskSummaryOut(CamelModel):
    """任务统计 + AI 总结"""
    total_tasks: int
    completed_tasks: int
    pending_tasks: int
    ai_summary: str
    generated_at: datetime


# ------- 实时推送 (WebSocket) 相关模型 ----------
TaskEventName = Literal["TaskAdded", "TaskUpdated", "TaskDeleted"]

class TaskEvent(CamelModel):
    event: TaskEventName
    data: Union[TaskOut, int]  # TaskDeleted 只携带任务 id
