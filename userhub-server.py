#!/usr/bin/env python3
"""
UserHub Server - 统一启动脚本

用法:
    python userhub-server.py            # 启动服务
    python userhub-server.py --migrate  # 仅执行数据库迁移
    python userhub-server.py --check    # 检查数据库状态
"""
from userhub.server.server import main

if __name__ == "__main__":
    main()
