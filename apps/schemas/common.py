from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional


class CamelModel(BaseModel):
    """前端约定使用 camelCase 字段名，请求体同时接受 snake_case"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorResponse(CamelModel):
    """统一的错误响应体"""
    status_code: int = Field(..., description="HTTP 状态码")
    message: str = Field(..., description="简短的错误信息")
    detailed: Optional[str] = Field(None, description="详细错误信息，生产环境不返回")
