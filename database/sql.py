from tortoise.contrib.fastapi import RegisterTortoise   # 用于连接数据库
from contextlib import asynccontextmanager
from fastapi import FastAPI

from database.settings import TORTOISE_ORM_SQLITE, TORTOISE_ORM_MYSQL
from core.log import get_logger
from config import settings

logger = get_logger(__name__)


def get_tortoise_config() -> dict:
    if settings.SQLMODE == "SQLITE":
        return TORTOISE_ORM_SQLITE
    elif settings.SQLMODE == "MYSQL":
        return TORTOISE_ORM_MYSQL
    raise ValueError(f"Unsupported SQLMODE: {settings.SQLMODE}")


@asynccontextmanager
async def register_sql(app: FastAPI):
    """在应用生命周期内打开数据库连接，退出时关闭"""
    config = get_tortoise_config()
    async with RegisterTortoise(
        app,
        config=config,
        generate_schemas=True,  # 在应用启动时自动创建数据库表
        add_exception_handlers=False,  # 统一由 core.middleware 处理异常
    ):
        logger.info("%s 数据库连接成功", settings.SQLMODE)
        yield

    logger.info("%s 数据库已经关闭", settings.SQLMODE)
