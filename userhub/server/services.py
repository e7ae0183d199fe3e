from typing import List
from uuid import UUID

from .db import Database
from .models import User, UserCreate, UserUpdate


class UserService:
    def __init__(self, db: Database):
        self.db = db

    async def list_users(self) -> List[User]:
        return await self.db.list_users()

    async def get_user(self, user_id: UUID) -> User:
        return await self.db.get_user(user_id)

    async def create_user(self, user_data: UserCreate) -> User:
        return await self.db.create_user(user_data)

    async def update_user(self, user_id: UUID, user_data: UserUpdate) -> User:
        """
        部分更新用户

        先读取现有行（不存在时抛出 UserNotFoundError），未提供的字段沿用原值，
        再整行写回。读和写是两条独立语句，不在同一事务内：两者之间发生的并发
        删除或更新会导致写入落空，或者返回值与最终状态不一致。
        """
        existing = await self.db.get_user(user_id)

        name = user_data.name if user_data.name is not None else existing.name
        email = user_data.email if user_data.email is not None else existing.email

        await self.db.update_user(user_id, name, email)
        return User(id=user_id, name=name, email=email)

    async def delete_user(self, user_id: UUID) -> bool:
        return await self.db.delete_user(user_id)
