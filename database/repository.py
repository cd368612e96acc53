from datetime import datetime, timezone
from typing import List, Optional

from tortoise.transactions import in_transaction

from database.models import Tasks


class TaskRepository:
    """
    任务表的读写封装。

    所有写操作在返回之前都已经提交，调用方可以在拿到结果之后再广播变更。
    """

    async def get_all(self) -> List[Tasks]:
        # 最新创建的任务排在最前面
        return await Tasks.all().order_by("-created_at", "-id")

    async def get_by_id(self, task_id: int) -> Optional[Tasks]:
        return await Tasks.get_or_none(id=task_id)

    async def create(self, title: str, description: str = "") -> Tasks:
        return await Tasks.create(
            title=title,
            description=description,
            created_at=datetime.now(timezone.utc),
            is_completed=False,
        )

    async def update(
        self,
        task_id: int,
        title: str,
        description: str,
        is_completed: bool,
    ) -> Optional[Tasks]:
        """整体替换 title / description / is_completed，任务不存在时返回 None"""
        async with in_transaction():
            task = await Tasks.get_or_none(id=task_id)
            if task is None:
                return None

            task.title = title
            task.description = description
            task.is_completed = is_completed
            await task.save(update_fields=["title", "description", "is_completed"])
        return task

    async def delete(self, task_id: int) -> bool:
        deleted_count = await Tasks.filter(id=task_id).delete()
        return deleted_count > 0

    async def count_total(self) -> int:
        return await Tasks.all().count()

    async def count_completed(self) -> int:
        return await Tasks.filter(is_completed=True).count()

    async def count_pending(self) -> int:
        return await Tasks.filter(is_completed=False).count()


def get_task_repository() -> TaskRepository:
    return TaskRepository()
