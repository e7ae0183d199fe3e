"""
服务器端数据模型

纯数据类，用于API请求和响应的数据验证
"""
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class UserCreate(BaseModel):
    """创建用户的请求模型"""
    name: str
    email: str


class UserUpdate(BaseModel):
    """更新用户的请求模型，未提供的字段保留原值"""
    name: Optional[str] = None
    email: Optional[str] = None


class User(BaseModel):
    """用户数据模型"""
    id: UUID
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


__all__ = [
    "User",
    "UserCreate",
    "UserUpdate",
]
