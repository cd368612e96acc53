from typing import List

from pydantic_settings import BaseSettings,SettingsConfigDict


class Settings(BaseSettings):
    DEBUG_MODE: bool =False
    ENVIRONMENT: str = "development"   # production 环境下错误响应不返回 detailed 字段

    APP_HOST: str = "127.0.0.1"
    APP_PORT: int = 8080
    API_PREFIX: str = "/api"
    HUB_PATH: str = "/taskHub"

    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "https://localhost:3000",
        "http://localhost:5173",  # Vite 开发服务器
        "https://localhost:5173",
    ]

    SQLMODE: str = "SQLITE"
    SQLITE_URL: str = "sqlite://tasks.sqlite3"
    MYSQL_HOST:str = "127.0.0.1"
    MYSQL_PORT:str = '3306'
    MYSQL_USER:str = 'root'
    MYSQL_PASSWORD:str = ""
    MYSQL_DATABASE:str = "tasks"

    OPENAI_API_KEY: str = ""
    OPENAI_API_URL: str = "https://api.openai.com/v1/chat/completions"
    OPENAI_MODEL: str = "gpt-3.5-turbo"
    OPENAI_MAX_TOKENS: int = 250
    OPENAI_TEMPERATURE: float = 0.7

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


settings = Settings()
