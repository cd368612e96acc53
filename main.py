from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from apps.tasks import router as tasks_router
from apps.hub import TaskHub, hub_router
from api.openai_api import SummarizationClient
from core.log import get_logger, load_log_config
from core.middleware import (
    count_time_middleware,
    register_exception_handlers,
    GlobalExceptionHandlerMiddleware,
)
from database.sql import register_sql
from config import settings

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # 启动时执行的事件

    #实时推送的连接注册表
    app.state.hub = TaskHub()
    #AI 总结服务
    app.state.summarizer = SummarizationClient()

    #连接数据库
    async with register_sql(app):
        logger.info("Task Management API is running!")
        logger.info("API: %s/tasks, Hub: %s", settings.API_PREFIX, settings.HUB_PATH)
        yield

    # 终止时执行的事件
    await app.state.summarizer.close()


# Key: Pass lifespan to FastAPI
app = FastAPI(title="Real-Time Task Manager", lifespan=lifespan)

# 全局异常处理，放在 CORS 里面，错误响应也要带上 CORS 头
register_exception_handlers(app)
app.add_middleware(GlobalExceptionHandlerMiddleware)

count_time_middleware(app)  # 计时中间件

# CORS 中间件配置 (最外层)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(tasks_router, prefix=f"{settings.API_PREFIX}/tasks") # 任务管理路由
app.include_router(hub_router) # 实时推送


@app.get("/health", tags=["功能"])
async def health(request: Request):
    return {"status": "ok", "connections": request.app.state.hub.connection_count}


if __name__ == '__main__':
    # 显式加载日志配置文件
    log_config = load_log_config()
    uvicorn.run(
        "main:app",
        host=settings.APP_HOST,
        port=settings.APP_PORT,
        log_config=log_config,
        log_level="debug" if settings.DEBUG_MODE else "info",
        reload=settings.DEBUG_MODE,
    )
