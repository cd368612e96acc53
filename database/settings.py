# tortoise_config.py

from config import settings

MYSQL_HOST = settings.MYSQL_HOST
MYSQL_PORT = settings.MYSQL_PORT
MYSQL_USER = settings.MYSQL_USER
MYSQL_PASSWORD = settings.MYSQL_PASSWORD
MYSQL_DATABASE = settings.MYSQL_DATABASE

TORTOISE_ORM_SQLITE = {
    "connections": {"default": settings.SQLITE_URL},
    "apps": {
        "models": {
            "models": ["database.models", "aerich.models"],
            "default_connection": "default",
        },
    },
    "use_tz": True,
    "timezone": "UTC",
}

TORTOISE_ORM_MYSQL = {
    'connections': {
        'default': {
            # 'engine': 'tortoise.backends.asyncpg',  PostgreSQL
            'engine': 'tortoise.backends.mysql',  # MySQL or Mariadb
            'credentials': {
                'host': MYSQL_HOST,
                'port': MYSQL_PORT,
                'user': MYSQL_USER,
                'password':MYSQL_PASSWORD,
                'database': MYSQL_DATABASE,
                'minsize': 1,
                'maxsize': 5,
                'charset': 'utf8mb4',
                "echo": settings.DEBUG_MODE
            }
        },
    },
    'apps': {
        'models': {
            'models': ["database.models", "aerich.models"],
            'default_connection': 'default',

        }
    },
    'use_tz': True,
    'timezone': 'UTC'
}

# aerich 读取的配置 (pyproject.toml -> [tool.aerich])
TORTOISE_ORM = TORTOISE_ORM_MYSQL if settings.SQLMODE == "MYSQL" else TORTOISE_ORM_SQLITE
