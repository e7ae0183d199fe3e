from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from peewee import PeeweeException
from playhouse.pool import MaxConnectionsExceeded

from .db import Database, UserNotFoundError
from .logger import get_logger
from .models import User, UserCreate, UserUpdate
from .services import UserService

logger = get_logger("Endpoints")

router = APIRouter()

# 数据库层错误：peewee 异常，以及连接池耗尽（它是 ValueError 的子类）
STORAGE_ERRORS = (PeeweeException, MaxConnectionsExceeded)


# 明确的依赖注入函数
async def get_db(request: Request) -> Database:
    """获取启动时创建的数据库实例（连接池持有者）"""
    return request.app.state.db


def get_user_service(
        db: Database = Depends(get_db)
) -> UserService:
    return UserService(db)


def _not_found() -> PlainTextResponse:
    return PlainTextResponse("User not found", status_code=404)


def _storage_error(message: str) -> PlainTextResponse:
    # 只记录日志，不向客户端暴露数据库错误细节
    logger.exception(message)
    return PlainTextResponse(message, status_code=500)


@router.get("/users", response_model=List[User])
async def list_users(service: UserService = Depends(get_user_service)):
    """
    获取全部用户

    HTTP调用方式:
    GET /users

    返回:
    - 200: User对象数组（顺序不固定）
    - 500: Failed to fetch users
    """
    try:
        return await service.list_users()
    except STORAGE_ERRORS:
        return _storage_error("Failed to fetch users")


@router.get("/users/{user_id}", response_model=User)
async def get_user(user_id: UUID, service: UserService = Depends(get_user_service)):
    """
    根据ID获取用户信息

    HTTP调用方式:
    GET /users/{user_id}

    路径参数:
    - user_id: 用户的UUID

    返回:
    - 200: User对象
    - 404: User not found
    - 422: UUID格式错误
    - 500: Error fetching user
    """
    try:
        return await service.get_user(user_id)
    except UserNotFoundError:
        return _not_found()
    except STORAGE_ERRORS:
        return _storage_error("Error fetching user")


@router.post("/users", response_model=User, status_code=201)
async def create_user(user_data: UserCreate, service: UserService = Depends(get_user_service)):
    """
    创建用户

    HTTP调用方式:
    POST /users
    Content-Type: application/json
    Body: {
        "name": "Ann",
        "email": "ann@x.com"
    }

    功能:
    - ID 由服务端生成
    - 不做重复检测

    返回:
    - 201: 新建的User对象（含生成的ID）
    - 422: 请求体格式错误或缺少字段
    - 500: Failed to insert user
    """
    try:
        return await service.create_user(user_data)
    except STORAGE_ERRORS:
        return _storage_error("Failed to insert user")


@router.put("/users/{user_id}", response_model=User)
async def update_user(user_id: UUID, user_data: UserUpdate,
                      service: UserService = Depends(get_user_service)):
    """
    部分更新用户

    HTTP调用方式:
    PUT /users/{user_id}
    Content-Type: application/json
    Body: {
        "name": "Annie",   // 可选
        "email": "..."     // 可选
    }

    功能:
    - 未提供的字段保留原值
    - 先读后写，两步之间不加锁也不开事务

    返回:
    - 200: 更新后的User对象
    - 404: User not found
    - 422: UUID格式错误或请求体格式错误
    - 500: Failed to update user
    """
    try:
        return await service.update_user(user_id, user_data)
    except UserNotFoundError:
        return _not_found()
    except STORAGE_ERRORS:
        return _storage_error("Failed to update user")


@router.delete("/users/{user_id}", response_class=PlainTextResponse)
async def delete_user(user_id: UUID, service: UserService = Depends(get_user_service)):
    """
    删除用户

    HTTP调用方式:
    DELETE /users/{user_id}

    返回:
    - 200: User deleted
    - 404: User not found
    - 422: UUID格式错误
    - 500: Failed to delete user
    """
    try:
        deleted = await service.delete_user(user_id)
    except STORAGE_ERRORS:
        return _storage_error("Failed to delete user")

    if not deleted:
        return _not_found()
    return "User deleted"
