#!/usr/bin/env python3
"""
开发环境启动脚本

功能:
1. 自动加载 settings.yaml / .env 配置
2. 支持热重载
3. 可配置端口和主机
4. 可选：启动前初始化数据库并写入示例领域

使用方式:
    # 直接运行
    python run_dev.py

    # 指定端口
    python run_dev.py --port 8080

    # 关闭热重载
    python run_dev.py --no-reload

    # 初始化数据库（建表 + 默认领域）
    python run_dev.py --init-db
"""

import argparse
import os
import sys

# 确保项目根目录在 Python 路径中
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))


def main():
    parser = argparse.ArgumentParser(description="PaperTrove Backend Dev Server")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind (default: 8000)")
    parser.add_argument("--reload", action="store_true", default=True, help="Enable auto-reload (default: True)")
    parser.add_argument("--no-reload", dest="reload", action="store_false", help="Disable auto-reload")
    parser.add_argument("--init-db", action="store_true", help="Create tables and seed default fields first")
    parser.add_argument("--log-level", default="info", choices=["debug", "info", "warning", "error"], help="Log level")

    args = parser.parse_args()

    if args.init_db:
        from papertrove.scripts.init_db import init_db
        init_db()

    # 启动 uvicorn
    import uvicorn

    print(f"""
╔══════════════════════════════════════════════════════════════╗
║              📚 PaperTrove Backend                           ║
╠══════════════════════════════════════════════════════════════╣
║  Host:     {args.host:<48} ║
║  Port:     {args.port:<48} ║
║  Reload:   {str(args.reload):<48} ║
║  Log:      {args.log_level:<48} ║
╠══════════════════════════════════════════════════════════════╣
║  API Docs: http://{args.host}:{args.port}/docs{' ' * 28}║
║  ReDoc:    http://{args.host}:{args.port}/redoc{' ' * 27}║
╚══════════════════════════════════════════════════════════════╝
    """)

    uvicorn.run(
        "main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
        reload_dirs=["api", "papertrove"] if args.reload else None,
    )


if __name__ == "__main__":
    main()
