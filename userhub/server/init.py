"""
服务器初始化模块
职责：数据库迁移、重置、环境检查等启动相关操作
"""
import copy

from playhouse.migrate import SchemaMigrator, migrate

from .logger import get_logger
from .db import get_database, get_all_tables

logger = get_logger("ServerInit")


def _add_missing_columns(db, table):
    """给已存在的表补齐模型中新增的字段"""
    table_name = table._meta.table_name
    existing = {column.name for column in db.get_columns(table_name)}
    missing = [field for field in table._meta.sorted_fields if field.column_name not in existing]

    if not missing:
        logger.debug(f"表已存在: {table_name}")
        return

    migrator = SchemaMigrator.from_database(db.obj)
    operations = []
    for field in missing:
        logger.info(f"添加字段: {table_name}.{field.column_name}")
        # add_column 会修改传入的字段对象，这里使用副本
        column = copy.copy(field)
        if not column.null and column.default is None:
            column.default = ''  # 已有行用空字符串回填
        operations.append(migrator.add_column(table_name, field.column_name, column))

    migrate(*operations)


def migrate_database():
    """数据库迁移 - 保留数据的升级方式"""
    db = get_database()
    db.connect(reuse_if_open=True)

    try:
        # 检查表是否存在，不存在则创建；已存在则补齐缺失字段
        for table in get_all_tables():
            if not table.table_exists():
                logger.info(f"创建新表: {table._meta.table_name}")
                table.create_table()
            else:
                _add_missing_columns(db, table)

        logger.info("✅ 数据库迁移完成")

    except Exception as e:
        logger.error(f"❌ 数据库迁移失败: {e}")
        raise
    finally:
        db.close()


def reset_database():
    """重置数据库 - 完全清空重建（仅开发环境使用）"""
    logger.warning("⚠️ 即将完全重置数据库，所有数据将丢失！")
    db = get_database()
    db.connect(reuse_if_open=True)

    try:
        tables = get_all_tables()
        for table in reversed(tables):
            if table.table_exists():
                logger.info(f"删除表: {table._meta.table_name}")
                table.drop_table()

        for table in tables:
            logger.info(f"创建表: {table._meta.table_name}")
            table.create_table()

        logger.info("✅ 数据库重置完成")

    except Exception as e:
        logger.error(f"❌ 数据库重置失败: {e}")
        raise
    finally:
        db.close()


def check_database() -> bool:
    """
    检查数据库连接和表状态

    Returns:
        bool: 数据库是否可连接
    """
    db = get_database()
    try:
        db.connect(reuse_if_open=True)

        logger.info("🔍 检查数据库状态...")
        for table in get_all_tables():
            exists = "✅" if table.table_exists() else "❌"
            logger.info(f"{exists} {table._meta.table_name}")

        return True
    except Exception as e:
        logger.error(f"❌ 数据库检查失败: {e}")
        return False
    finally:
        db.close()


def check_environment() -> bool:
    """
    检查所有环境依赖

    Returns:
        bool: 所有检查是否通过
    """
    if check_database():
        return True

    logger.error("="*60)
    logger.error("❌ 环境检查失败，部分依赖不可用")
    logger.error("="*60)
    logger.error("💡 请检查：")
    logger.error("   1. 数据库服务是否启动")
    logger.error("   2. 数据库连接配置是否正确 (.env 文件中的 DATABASE_URL)")
    logger.error("   3. SQLite 数据库文件路径是否可写")
    logger.error("="*60)
    return False
