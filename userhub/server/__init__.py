# Server package

# 暴露主要的服务端类和函数
from .db import Database
from .models import User, UserCreate, UserUpdate
from .server import UserHubServer, create_app

__all__ = [
    "Database",
    "User",
    "UserCreate",
    "UserUpdate",
    "UserHubServer",
    "create_app",
]
