from tortoise import Tortoise, run_async

from database.models import Tasks
from database.sql import get_tortoise_config


async def clear_completed():
    """
    批量删除已完成的任务。

    直接操作数据库，不经过 API，因此不会向在线客户端广播；
    客户端需要重新拉取任务列表。
    """
    # 初始化数据库连接
    await Tortoise.init(config=get_tortoise_config())
    await Tortoise.generate_schemas()

    try:
        deleted_count = await Tasks.filter(is_completed=True).delete()
        print(f"成功删除了 {deleted_count} 条已完成的任务记录。")
    finally:
        # 关闭连接
        await Tortoise.close_connections()

if __name__ == "__main__":
    run_async(clear_completed())
