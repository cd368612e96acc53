import asyncio
import json
import uuid
from typing import Dict, List, Tuple, Union

from fastapi import APIRouter, Request, WebSocket, WebSocketDisconnect

from apps.schemas import TaskEvent, TaskEventName, TaskOut
from core.log import get_logger
from config import settings

logger = get_logger(__name__)

# 实时推送路由，挂载路径由 settings.HUB_PATH 决定
hub_router = APIRouter(
    tags=["实时推送"]
)


class TaskHub:
    """
    WebSocket 连接注册表 + 广播。

    连接在 connect 时加入、disconnect 时移除；广播遍历当前注册表的快照。
    广播是 fire-and-forget：某个连接发送失败只会把它移出注册表，不影响其它连接，
    也不会让触发广播的 HTTP 请求失败。
    """

    def __init__(self):
        self.connections: Dict[str, WebSocket] = {}

    @property
    def connection_count(self) -> int:
        return len(self.connections)

    async def connect(self, websocket: WebSocket) -> str:
        await websocket.accept()
        connection_id = uuid.uuid4().hex
        self.connections[connection_id] = websocket
        logger.info(
            "Client connected: %s (User-Agent: %s)",
            connection_id,
            websocket.headers.get("user-agent", "unknown"),
        )
        return connection_id

    def disconnect(self, connection_id: str, error: Exception = None):
        if self.connections.pop(connection_id, None) is None:
            return
        if error is not None:
            logger.warning("Client disconnected: %s, error: %s", connection_id, error)
        else:
            logger.info("Client disconnected: %s", connection_id)

    async def broadcast(self, event: TaskEventName, data: Union[TaskOut, int]) -> int:
        """把事件推送给所有在线连接，返回成功送达的连接数"""
        message = TaskEvent(event=event, data=data).model_dump(mode="json", by_alias=True)
        snapshot: List[Tuple[str, WebSocket]] = list(self.connections.items())
        if not snapshot:
            return 0

        results = await asyncio.gather(
            *(websocket.send_json(message) for _, websocket in snapshot),
            return_exceptions=True,
        )

        delivered = 0
        for (connection_id, _), result in zip(snapshot, results):
            if isinstance(result, Exception):
                self.disconnect(connection_id, error=result)
            else:
                delivered += 1
        logger.info("Broadcast %s to %d/%d clients", event, delivered, len(snapshot))
        return delivered

    async def task_added(self, task: TaskOut) -> int:
        return await self.broadcast("TaskAdded", task)

    async def task_updated(self, task: TaskOut) -> int:
        return await self.broadcast("TaskUpdated", task)

    async def task_deleted(self, task_id: int) -> int:
        return await self.broadcast("TaskDeleted", task_id)


# 依赖注入 - 提供生命周期内创建的 hub 实例
def get_hub(request: Request) -> TaskHub:
    return request.app.state.hub


@hub_router.websocket(settings.HUB_PATH)
async def task_hub_endpoint(websocket: WebSocket):
    hub: TaskHub = websocket.app.state.hub
    connection_id = await hub.connect(websocket)
    error = None
    try:
        while True:
            # 客户端只会发送心跳，其余消息忽略
            text = await websocket.receive_text()
            try:
                message = json.loads(text)
            except json.JSONDecodeError:
                continue
            if isinstance(message, dict) and message.get("type") == "ping":
                await websocket.send_json({"type": "pong"})
    except WebSocketDisconnect:
        pass
    except Exception as e:
        error = e
    finally:
        hub.disconnect(connection_id, error=error)
