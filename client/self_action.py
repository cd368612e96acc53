"""
自身操作的回声抑制。

客户端发起增删改请求时，服务端除了直接返回结果，还会把同一个变更通过 WebSocket
广播回来。为了不对自己的操作重复弹出通知，发起请求前 (新增则在拿到 id 之后)
先记下 "{operation}-{id}"，收到匹配的广播时只更新状态、不通知。

标记在固定时间窗口后自动失效，避免永久屏蔽之后相同的操作。这只是启发式：
- 广播如果晚于窗口到达，仍然会重复通知；
- 同一客户端在窗口内连续两次相同操作，第二次的通知可能被误抑制。
"""

import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Union

ADD = "add"
UPDATE = "update"
DELETE = "delete"

# 新增用 2 秒，更新/删除用 1 秒 (沿用前端的取值，两者不一致)
DEFAULT_WINDOWS: Dict[str, float] = {
    ADD: 2.0,
    UPDATE: 1.0,
    DELETE: 1.0,
}

# 广播事件名 -> 操作名
EVENT_OPERATIONS: Dict[str, str] = {
    "TaskAdded": ADD,
    "TaskUpdated": UPDATE,
    "TaskDeleted": DELETE,
}


def marker_key(operation: str, task_id: Union[int, str]) -> str:
    return f"{operation}-{task_id}"


@dataclass
class Marker:
    key: str
    deadline: float


class SelfActionTracker:
    """
    只保存一个标记，新的标记会覆盖旧的。
    过期用 "截止时间 + 可注入的时钟" 表示，测试里可以传入手动时钟。
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        windows: Optional[Dict[str, float]] = None,
    ):
        self.clock = clock
        self.windows = dict(DEFAULT_WINDOWS)
        if windows:
            self.windows.update(windows)
        self._marker: Optional[Marker] = None

    @property
    def current(self) -> Optional[str]:
        self._expire()
        return self._marker.key if self._marker else None

    def arm(self, operation: str, task_id: Union[int, str]) -> str:
        if operation not in self.windows:
            raise ValueError(f"Unknown operation: {operation}")
        key = marker_key(operation, task_id)
        self._marker = Marker(key=key, deadline=self.clock() + self.windows[operation])
        return key

    def clear(self):
        self._marker = None

    def consume(self, operation: str, task_id: Union[int, str]) -> bool:
        """
        广播到达时调用。与当前标记匹配则清除标记并返回 True (应当抑制通知)，
        否则返回 False。
        """
        self._expire()
        if self._marker is None or self._marker.key != marker_key(operation, task_id):
            return False
        self._marker = None
        return True

    def should_notify(self, event: str, task_id: Union[int, str]) -> bool:
        operation = EVENT_OPERATIONS.get(event)
        if operation is None:
            raise ValueError(f"Unknown event: {event}")
        return not self.consume(operation, task_id)

    def _expire(self):
        if self._marker is not None and self.clock() >= self._marker.deadline:
            self._marker = None
