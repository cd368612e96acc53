"""
最小化的 Python 客户端：REST 调用 + WebSocket 实时推送 + 自身操作回声抑制。

本地状态在 REST 请求返回后立即更新；收到广播时再做一次幂等的合并，
是否弹出通知由 SelfActionTracker 决定。REST 请求失败不抛异常，只发出 error 通知。
"""

import asyncio
import json
from typing import Any, Callable, Dict, List, Literal, Optional

import httpx
import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from apps.schemas import TaskOut, TaskSummaryOut
from client.self_action import ADD, UPDATE, DELETE, SelfActionTracker
from core.log import get_logger

logger = get_logger(__name__)

Notifier = Callable[[str, str], None]

ConnectionStatus = Literal["Connected", "Disconnected", "Reconnecting", "Connection Failed"]
CONNECTED: ConnectionStatus = "Connected"
DISCONNECTED: ConnectionStatus = "Disconnected"
RECONNECTING: ConnectionStatus = "Reconnecting"
CONNECTION_FAILED: ConnectionStatus = "Connection Failed"


def log_notifier(message: str, level: str = "info"):
    logger.info("[%s] %s", level, message)


class TaskClient:
    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8080",
        api_prefix: str = "/api",
        hub_path: str = "/taskHub",
        notify: Notifier = log_notifier,
        tracker: Optional[SelfActionTracker] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        connect: Callable = websockets.connect,
        ping_interval: float = 10.0,
        reconnect_delay: float = 3.0,
        max_reconnect_attempts: Optional[int] = None,  # None 表示一直重连
    ):
        self.base_url = base_url.rstrip("/")
        self.api_prefix = api_prefix
        self.hub_path = hub_path
        self.notify = notify
        self.tracker = tracker or SelfActionTracker()
        self.client = httpx.AsyncClient(base_url=self.base_url, transport=transport)
        self._connect = connect
        self.ping_interval = ping_interval
        self.reconnect_delay = reconnect_delay
        self.max_reconnect_attempts = max_reconnect_attempts
        self.connection_status: ConnectionStatus = DISCONNECTED
        self.websocket = None
        self._stopped = False
        self.tasks: List[TaskOut] = []
        self.summary: Optional[TaskSummaryOut] = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    @property
    def tasks_url(self) -> str:
        return f"{self.api_prefix}/tasks"

    @property
    def hub_url(self) -> str:
        scheme, _, rest = self.base_url.partition("://")
        ws_protocol = "wss" if scheme == "https" else "ws"
        return f"{ws_protocol}://{rest}{self.hub_path}"

    def find_task(self, task_id: int) -> Optional[TaskOut]:
        return next((t for t in self.tasks if t.id == task_id), None)

    # --- REST ---

    async def fetch_tasks(self) -> List[TaskOut]:
        try:
            response = await self.client.get(self.tasks_url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Error fetching tasks: %s", e)
            self.notify("Failed to load tasks", "error")
            return self.tasks
        self.tasks = [TaskOut.model_validate(item) for item in response.json()]
        logger.info("Fetched tasks: %d", len(self.tasks))
        return self.tasks

    async def add_task(self, title: str, description: str = "") -> Optional[TaskOut]:
        if not title.strip():
            self.notify("Please enter a task title", "warning")
            return None

        try:
            response = await self.client.post(
                self.tasks_url,
                json={"title": title, "description": description, "isCompleted": False},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Error adding task: %s", e)
            self.notify("Failed to add task", "error")
            return None
        task = TaskOut.model_validate(response.json())

        # id 只有在响应之后才知道
        self.tracker.arm(ADD, task.id)

        self._upsert(task, insert_missing=True)
        self.notify(f'Task added: "{task.title}"', "success")
        return task

    async def toggle_task(self, task: TaskOut) -> Optional[TaskOut]:
        self.tracker.arm(UPDATE, task.id)

        payload = task.model_dump(mode="json", by_alias=True)
        payload["isCompleted"] = not task.is_completed
        try:
            response = await self.client.put(f"{self.tasks_url}/{task.id}", json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Error updating task %s: %s", task.id, e)
            self.notify("Failed to update task", "error")
            return None
        updated = TaskOut.model_validate(response.json())

        self._upsert(updated)
        status = "completed" if updated.is_completed else "reopened"
        self.notify(
            f'Task {status}: "{updated.title}"',
            "success" if updated.is_completed else "info",
        )
        return updated

    async def delete_task(self, task_id: int) -> bool:
        task_to_delete = self.find_task(task_id)
        self.tracker.arm(DELETE, task_id)

        try:
            response = await self.client.delete(f"{self.tasks_url}/{task_id}")
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Error deleting task %s: %s", task_id, e)
            self.notify("Failed to delete task", "error")
            return False

        self._remove(task_id)
        if task_to_delete:
            self.notify(f'Task deleted: "{task_to_delete.title}"', "warning")
        return True

    async def generate_summary(self) -> Optional[TaskSummaryOut]:
        if not self.tasks:
            self.notify("Add some tasks first!", "warning")
            return None

        self.notify("Generating AI summary...", "info")
        try:
            response = await self.client.post(f"{self.tasks_url}/summary")
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Error generating summary: %s", e)
            self.notify("Failed to generate summary", "error")
            return None
        self.summary = TaskSummaryOut.model_validate(response.json())
        self.notify("AI summary generated successfully!", "success")
        return self.summary

    # --- 实时推送 ---

    def handle_event(self, event: str, data: Any):
        """合并一条广播到本地状态，并决定是否通知"""
        if event == "TaskAdded":
            task = TaskOut.model_validate(data)
            self._upsert(task, insert_missing=True)
            if self.tracker.should_notify(event, task.id):
                self.notify(f'New task added by another user: "{task.title}"', "info")
            else:
                logger.debug("Ignoring own action: add-%s", task.id)

        elif event == "TaskUpdated":
            task = TaskOut.model_validate(data)
            self._upsert(task)
            if self.tracker.should_notify(event, task.id):
                status = "completed" if task.is_completed else "reopened"
                self.notify(f'Task {status} by another user: "{task.title}"', "info")
            else:
                logger.debug("Ignoring own action: update-%s", task.id)

        elif event == "TaskDeleted":
            task_id = int(data)
            deleted_task = self.find_task(task_id)
            self._remove(task_id)
            if self.tracker.should_notify(event, task_id):
                # 不认识的任务没有标题可显示，不通知
                if deleted_task:
                    self.notify(f'Task deleted by another user: "{deleted_task.title}"', "info")
            else:
                logger.debug("Ignoring own action: delete-%s", task_id)

        else:
            logger.warning("Unknown event from hub: %s", event)

    def handle_message(self, message: str):
        try:
            frame: Dict[str, Any] = json.loads(message)
        except json.JSONDecodeError:
            logger.warning("Malformed message from hub: %r", message)
            return
        if "event" not in frame:
            return  # pong 等心跳消息
        self.handle_event(frame["event"], frame.get("data"))

    async def listen(self):
        """
        连接 hub 并持续处理广播。

        首次连接失败不重试，状态为 Connection Failed。
        连接建立后如果断开，每隔 reconnect_delay 秒重连一次，
        直到重连成功、重连次数用尽 (提示连接丢失) 或调用了 stop()。
        """
        self._stopped = False
        self.connection_status = RECONNECTING
        connected_once = False
        attempts = 0

        while not self._stopped:
            logger.info("Connecting to hub: %s", self.hub_url)
            try:
                async with self._connect(self.hub_url) as websocket:
                    self.websocket = websocket
                    self.connection_status = CONNECTED
                    attempts = 0
                    if connected_once:
                        self.notify("Reconnected successfully!", "success")
                    else:
                        self.notify("Connected to real-time updates!", "success")
                    connected_once = True
                    await self._receive(websocket)
            except (OSError, asyncio.TimeoutError, WebSocketException) as e:
                if not connected_once:
                    logger.error("Hub connection failed: %s", e)
                    self.connection_status = CONNECTION_FAILED
                    self.notify("Failed to connect to server. Real-time updates disabled.", "warning")
                    return
                logger.warning("Reconnect attempt %d failed: %s", attempts, e)
            finally:
                self.websocket = None

            if self._stopped:
                break
            if self.max_reconnect_attempts is not None and attempts >= self.max_reconnect_attempts:
                self.connection_status = DISCONNECTED
                self.notify("Connection to server lost", "warning")
                return
            if self.connection_status == CONNECTED:
                self.connection_status = RECONNECTING
                self.notify("Reconnecting to server...", "warning")
            attempts += 1
            await asyncio.sleep(self.reconnect_delay)

        self.connection_status = DISCONNECTED

    async def _receive(self, websocket):
        # 处理一个连接上的消息，连接关闭时返回
        while True:
            try:
                message = await asyncio.wait_for(websocket.recv(), timeout=self.ping_interval)
                self.handle_message(message)
            except asyncio.TimeoutError:
                await websocket.send(json.dumps({"type": "ping"}))
            except ConnectionClosed:
                logger.info("Hub connection closed")
                return

    async def stop(self):
        """停止 listen()，不再重连"""
        self._stopped = True
        if self.websocket is not None:
            await self.websocket.close()

    async def close(self):
        await self.stop()
        if not self.client.is_closed:
            await self.client.aclose()

    # --- 本地状态 ---

    def _upsert(self, task: TaskOut, insert_missing: bool = False):
        # 更新事件只替换本地已有的任务
        for index, existing in enumerate(self.tasks):
            if existing.id == task.id:
                self.tasks[index] = task
                return
        if insert_missing:
            self.tasks.insert(0, task)

    def _remove(self, task_id: int):
        self.tasks = [t for t in self.tasks if t.id != task_id]
