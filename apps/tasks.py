from typing import List
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from api.openai_api import SummarizationClient, get_summarizer
from apps.hub import TaskHub, get_hub
from apps.schemas import (
    TaskOut,
    TaskCreateRequest,
    TaskUpdateRequest,
    TaskSummaryOut,
)
from core.log import get_logger
from database.repository import TaskRepository, get_task_repository

logger = get_logger(__name__)

# 创建一个新的 APIRouter 实例
router = APIRouter(
    tags=["任务管理"]
)


def task_not_found(task_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Task with ID {task_id} not found."
    )


# --- API 端点实现 ---

@router.get("", response_model=List[TaskOut], summary="获取所有任务")
async def get_all_tasks(
    repository: TaskRepository = Depends(get_task_repository),
):
    """按创建时间倒序返回全部任务"""
    tasks = await repository.get_all()
    return [TaskOut.model_validate(task) for task in tasks]


@router.post("/summary", response_model=TaskSummaryOut, summary="生成任务统计和 AI 总结")
async def get_task_summary(
    repository: TaskRepository = Depends(get_task_repository),
    summarizer: SummarizationClient = Depends(get_summarizer),
):
    """
    统计数据和总结文本每次请求时重新计算，不做持久化。
    AI 总结失败时返回固定的提示文本，不会返回错误。
    """
    tasks = await repository.get_all()
    ai_summary = await summarizer.summarize_tasks(tasks)

    return TaskSummaryOut(
        total_tasks=await repository.count_total(),
        completed_tasks=await repository.count_completed(),
        pending_tasks=await repository.count_pending(),
        ai_summary=ai_summary,
        generated_at=datetime.now(timezone.utc),
    )


@router.get("/{task_id}", response_model=TaskOut, summary="获取单个任务")
async def get_task(
    task_id: int,
    repository: TaskRepository = Depends(get_task_repository),
):
    task = await repository.get_by_id(task_id)
    if task is None:
        raise task_not_found(task_id)
    return TaskOut.model_validate(task)


@router.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED, summary="创建新任务")
async def create_task(
    request: Request,
    task_data: TaskCreateRequest,
    response: Response,
    repository: TaskRepository = Depends(get_task_repository),
    hub: TaskHub = Depends(get_hub),
):
    """
    创建任务。创建时间由服务端写入，请求体中的 createdAt 会被忽略。
    写入数据库之后再通知所有在线客户端。
    """
    created_task = await repository.create(
        title=task_data.title,
        description=task_data.description,
    )
    task_out = TaskOut.model_validate(created_task)

    logger.info("Broadcasting TaskAdded: %s - %s", task_out.id, task_out.title)
    await hub.task_added(task_out)

    response.headers["Location"] = str(request.url_for("get_task", task_id=task_out.id))
    return task_out


@router.put("/{task_id}", response_model=TaskOut, summary="更新任务")
async def update_task(
    task_id: int,
    task_data: TaskUpdateRequest,
    repository: TaskRepository = Depends(get_task_repository),
    hub: TaskHub = Depends(get_hub),
):
    """整体替换 title / description / isCompleted"""
    updated_task = await repository.update(
        task_id,
        title=task_data.title,
        description=task_data.description,
        is_completed=task_data.is_completed,
    )
    if updated_task is None:
        raise task_not_found(task_id)
    task_out = TaskOut.model_validate(updated_task)

    logger.info("Broadcasting TaskUpdated: %s - %s", task_out.id, task_out.title)
    await hub.task_updated(task_out)

    return task_out


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT, summary="删除任务")
async def delete_task(
    task_id: int,
    repository: TaskRepository = Depends(get_task_repository),
    hub: TaskHub = Depends(get_hub),
):
    deleted = await repository.delete(task_id)
    if not deleted:
        raise task_not_found(task_id)

    logger.info("Broadcasting TaskDeleted: %s", task_id)
    await hub.task_deleted(task_id)

    return Response(status_code=status.HTTP_204_NO_CONTENT)
