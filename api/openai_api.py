"""
OpenAI chat-completions 调用，用于生成任务总结。

总结失败不会向调用方抛出异常，只返回固定的提示文本。
"""

from typing import Optional, Sequence

import httpx
from fastapi import Request

from config import settings
from core.log import get_logger
from database.models import Tasks

logger = get_logger(__name__)

NO_TASKS_SUMMARY = "No tasks to summarize."
SUMMARY_ERROR = "Error calling OpenAI API"
UNABLE_TO_SUMMARIZE = "Unable to generate summary."

SYSTEM_PROMPT = "You are a helpful task management assistant that provides insightful summaries."


def build_summary_prompt(tasks: Sequence[Tasks]) -> str:
    task_descriptions = "\n".join(f"- {task.title}: {task.description}" for task in tasks)
    return (
        "Provide a concise, professional summary of the following tasks.\n"
        "Include insights about progress, priorities, and any patterns you notice.\n"
        "Keep it under 150 words and use a friendly, encouraging tone.\n"
        "\n"
        f"Tasks:\n{task_descriptions}"
    )


class SummarizationClient:
    def __init__(
        self,
        api_key: str = None,
        api_url: str = None,
        model: str = None,
        max_tokens: int = None,
        temperature: float = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = settings.OPENAI_API_KEY if api_key is None else api_key
        self.api_url = api_url or settings.OPENAI_API_URL
        self.model = model or settings.OPENAI_MODEL
        self.max_tokens = max_tokens or settings.OPENAI_MAX_TOKENS
        self.temperature = settings.OPENAI_TEMPERATURE if temperature is None else temperature
        # 不设置超时，使用 httpx 默认值
        self.client = httpx.AsyncClient(transport=transport)
        self._is_closed = False

    async def __aenter__(self):
        """支持异步上下文管理器进入"""
        return self

    async def __aexit__(self, exc_type, exc, tb):
        """支持异步上下文管理器退出，确保连接关闭"""
        await self.close()

    async def summarize_tasks(self, tasks: Sequence[Tasks]) -> str:
        if not tasks:
            return NO_TASKS_SUMMARY

        if not self.api_key:
            logger.warning("No OpenAI API key configured, the summary request will most likely fail.")

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_summary_prompt(tasks)},
            ],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }
        try:
            response = await self.client.post(
                self.api_url,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
            if response.status_code != 200:
                logger.error("OpenAI API error: %s - %s", response.status_code, response.text)
            response.raise_for_status()

            data = response.json()
            summary = data["choices"][0]["message"]["content"] or UNABLE_TO_SUMMARIZE
            logger.info("Successfully generated AI summary")
            return summary
        except Exception:
            logger.exception("Error calling OpenAI API")
            return SUMMARY_ERROR

    async def close(self):
        """关闭 HTTP 客户端连接"""
        if self._is_closed:
            return
        if not self.client.is_closed:
            await self.client.aclose()
        self._is_closed = True


# 依赖注入 - 提供生命周期内创建的总结客户端
def get_summarizer(request: Request) -> SummarizationClient:
    return request.app.state.summarizer
