"""
UserHub Server - 服务器启动封装

提供开箱即用的服务器启动能力
"""
import sys
from contextlib import asynccontextmanager
from typing import Optional

import typer
import uvicorn
from fastapi import FastAPI
from pydantic import ValidationError

from .config import get_settings
from .db import Database
from .endpoints import router
from .init import check_database, check_environment, migrate_database, reset_database
from .logger import get_logger

logger = get_logger("UserHubServer")

# 全局 app 实例（用于 uvicorn --factory）
_app = None


def create_app(database_url: str) -> FastAPI:
    """
    创建 FastAPI 应用

    数据库实例在 lifespan 中创建并执行一次迁移，之后挂在 app.state.db 上，
    通过依赖注入交给各个接口使用。迁移失败会中止启动。
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("FastAPI 应用启动中...")
        database = Database(database_url)
        migrate_database()
        app.state.db = database

        yield

        logger.info("FastAPI 应用正在关闭...")
        await database.disconnect()

    app = FastAPI(
        title="UserHub Server",
        description="用户资源的增删改查服务",
        version="0.1.0",
        lifespan=lifespan
    )

    # 注册路由
    app.include_router(router)
    return app


def get_app() -> FastAPI:
    """获取或创建 FastAPI 应用实例（配置来自环境变量）"""
    global _app
    if _app is None:
        _app = create_app(get_settings().database_url)
    return _app


class UserHubServer:
    """
    UserHub 服务器

    Examples:
        >>> server = UserHubServer(database_url="sqlite:///userhub.db")
        >>> server.run()

        >>> server = UserHubServer(
        ...     database_url="postgresql+pool://user:pw@localhost/userhub",
        ...     host="0.0.0.0",
        ...     port=8080
        ... )
        >>> server.run()
    """

    def __init__(
        self,
        database_url: str,
        host: str = "127.0.0.1",
        port: int = 8000
    ):
        """
        初始化 UserHub 服务器

        Args:
            database_url: 数据库连接串（必填）
            host: 服务监听地址，默认 127.0.0.1
            port: 服务监听端口，默认 8000
        """
        self.database_url = database_url
        self.host = host
        self.port = port

    def _validate_config(self):
        """验证必备配置"""
        errors = []

        if not self.database_url:
            errors.append("❌ 缺少数据库配置 DATABASE_URL")

        if self.port < 1 or self.port > 65535:
            errors.append(f"❌ 端口号无效: {self.port}，必须在 1-65535 之间")

        if errors:
            logger.error("配置验证失败:")
            for error in errors:
                logger.error(f"  {error}")
            raise ValueError("缺少必备配置，服务无法启动")

        logger.info("✅ 配置验证通过")

    def _check_database(self):
        """检查数据库是否可以连接"""
        logger.info("正在检查数据库连接...")
        Database(self.database_url)

        if not check_database():
            raise ConnectionError("无法连接到数据库")
        logger.info("✅ 数据库连接正常")

    def run(self):
        """
        启动 UserHub 服务器

        迁移在应用 lifespan 中执行，失败时 uvicorn 以启动失败退出。

        Raises:
            SystemExit: 配置验证或数据库检查失败
        """
        try:
            logger.info("=" * 60)
            logger.info("🚀 UserHub Server 启动中...")
            logger.info("=" * 60)

            self._validate_config()
            self._check_database()

            logger.info(f"📍 FastAPI Server: http://{self.host}:{self.port}")

            uvicorn.run(
                create_app(self.database_url),
                host=self.host,
                port=self.port,
                log_level="info",
                lifespan="on"
            )

        except KeyboardInterrupt:
            logger.info("收到停止信号，服务已关闭")

        except Exception as e:
            logger.error(f"❌ 服务启动失败: {e}")
            sys.exit(1)


cli = typer.Typer(help="UserHub Server - 用户增删改查服务", add_completion=False)


@cli.command()
def serve(
    migrate: bool = typer.Option(False, "--migrate", help="执行数据库迁移后退出"),
    reset: bool = typer.Option(False, "--reset", help="删除并重建数据表后退出（仅开发环境）"),
    check: bool = typer.Option(False, "--check", help="检查数据库连接和表状态后退出"),
    host: Optional[str] = typer.Option(None, help="监听地址，默认取 HOST 配置"),
    port: Optional[int] = typer.Option(None, help="监听端口，默认取 PORT 配置"),
) -> None:
    """启动服务，或执行一次性的数据库维护操作"""
    try:
        settings = get_settings()
    except (ValidationError, ValueError) as e:
        logger.error(f"❌ 配置加载失败: {e}")
        logger.info("💡 请设置 DATABASE_URL 环境变量或在 .env 文件中配置")
        raise typer.Exit(code=1)

    if migrate or reset or check:
        try:
            Database(settings.database_url)
            if check:
                ok = check_environment()
                raise typer.Exit(code=0 if ok else 1)
            if reset:
                reset_database()
            else:
                migrate_database()
        except typer.Exit:
            raise
        except Exception as e:
            logger.error(f"❌ 数据库操作失败: {e}")
            raise typer.Exit(code=1)
        return

    UserHubServer(
        database_url=settings.database_url,
        host=host or settings.host,
        port=port or settings.port
    ).run()


def main():
    cli()


if __name__ == "__main__":
    main()
