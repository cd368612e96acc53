import json
import logging
from pathlib import Path

LOG_DIR = Path("./logs")
LOG_CONFIG_PATH = Path(__file__).resolve().parent.parent / "uvicorn_config.json"


def create_log_file():
    LOG_DIR.mkdir(parents=True, exist_ok=True)  # 创建目录（若不存在）

    for name in ("app.log", "access.log"):
        (LOG_DIR / name).touch(exist_ok=True)   # 创建空文件（若不存在）


def load_log_config(path: Path = LOG_CONFIG_PATH) -> dict:
    """读取 uvicorn 的日志配置 (dictConfig 格式)，同时保证日志文件存在"""
    create_log_file()
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
