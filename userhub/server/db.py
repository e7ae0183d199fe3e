"""
数据库模块 - 一站式解决方案

职责：
1. 定义数据库代理（避免循环导入）
2. 定义表结构
3. 提供数据访问层（Database类）
"""
import uuid
from pathlib import Path
from typing import List
from uuid import UUID

from peewee import DatabaseProxy, Model, SqliteDatabase, UUIDField, TextField
from playhouse.db_url import connect

from .models import User, UserCreate


# ============================================================================
# 第一部分：数据库代理（核心，避免循环导入）
# ============================================================================

db_proxy = DatabaseProxy()


def init_database(database_url: str):
    """
    初始化数据库代理

    Args:
        database_url: 数据库连接串，例如 sqlite:///userhub.db、
            postgresql://user:pw@host/db、postgresql+pool://...
    """
    # 创建真实的数据库实例（URL 中的 +pool 后缀会启用连接池）
    database = connect(database_url)

    # SQLite 文件数据库：确保目录存在
    if isinstance(database, SqliteDatabase) and database.database != ':memory:':
        Path(database.database).parent.mkdir(parents=True, exist_ok=True)

    # 将代理绑定到实际数据库
    db_proxy.initialize(database)
    return database


def get_database():
    """获取数据库代理"""
    return db_proxy


# ============================================================================
# 第二部分：表定义
# ============================================================================

class BaseTable(Model):
    """
    数据库表基类

    所有表模型均继承此类，使用统一的数据库代理
    """
    class Meta:
        database = db_proxy  # 使用代理，而非具体数据库


class UserTable(BaseTable):
    """用户数据表"""
    id = UUIDField(primary_key=True, default=uuid.uuid4)
    name = TextField()
    email = TextField()  # 不限长度，不做唯一性和格式约束

    class Meta:
        table_name = 'users'


def get_all_tables():
    """获取所有表模型列表"""
    return [UserTable]


# ============================================================================
# 第三部分：数据访问层
# ============================================================================

class UserNotFoundError(ValueError):
    """按 ID 查找用户时没有匹配的行"""


class Database:
    """
    数据访问层 - 封装所有数据库操作

    每个操作通过 connection_context() 获取连接，结束时释放（连接池模式下归还池中）。
    peewee 的异常（PeeweeException 及其子类）原样向上抛出，由调用方决定如何响应。

    使用示例：
        >>> db = Database("sqlite:///userhub.db")
        >>> user = await db.create_user(UserCreate(name="Ann", email="ann@x.com"))
        >>> await db.get_user(user.id)
    """

    def __init__(self, database_url: str = None):
        """
        创建 Database 实例

        Args:
            database_url: 数据库连接串
                    - 如果提供，则初始化数据库代理
                    - 如果为 None，则使用已初始化的代理
        """
        if database_url:
            init_database(database_url)

        # 使用代理
        self.db = db_proxy

    async def disconnect(self):
        """断开数据库连接，连接池模式下关闭池中所有连接"""
        if not self.db.is_closed():
            self.db.close()
        if hasattr(self.db.obj, 'close_all'):
            self.db.obj.close_all()

    async def list_users(self) -> List[User]:
        """获取全部用户（不保证顺序）"""
        with self.db.connection_context():
            return [User.model_validate(db_user) for db_user in UserTable.select()]

    async def get_user(self, user_id: UUID) -> User:
        """根据ID获取用户信息"""
        with self.db.connection_context():
            db_user = UserTable.get_or_none(UserTable.id == user_id)
        if db_user is None:
            raise UserNotFoundError(f"User with id {user_id} not found")
        return User.model_validate(db_user)

    async def create_user(self, user_data: UserCreate) -> User:
        """创建用户，ID 由服务端生成"""
        user_id = uuid.uuid4()
        with self.db.connection_context():
            UserTable.insert(
                id=user_id,
                name=user_data.name,
                email=user_data.email
            ).execute()

        return User(id=user_id, name=user_data.name, email=user_data.email)

    async def update_user(self, user_id: UUID, name: str, email: str) -> int:
        """整行写回 name 和 email，返回受影响的行数"""
        with self.db.connection_context():
            return (
                UserTable
                .update(name=name, email=email)
                .where(UserTable.id == user_id)
                .execute()
            )

    async def delete_user(self, user_id: UUID) -> bool:
        """删除用户，返回是否有行被删除"""
        with self.db.connection_context():
            deleted = UserTable.delete().where(UserTable.id == user_id).execute()
        return deleted > 0
