#!/usr/bin/env python
"""
Run the CPQ backend API (FastAPI + uvicorn).

Usage:
    python scripts/run_api.py [--reload]
"""
import subprocess
import sys
import os
from pathlib import Path

# Add src to path for imports
project_root = Path(__file__).parent.parent
src_path = project_root / 'src'
sys.path.insert(0, str(src_path))

from cpq_backend.config.settings import get_settings


def main():
    settings = get_settings()

    # Ensure src is in python path for the uvicorn process
    env = os.environ.copy()
    if "PYTHONPATH" in env:
        env["PYTHONPATH"] = f"{src_path}{os.pathsep}{env['PYTHONPATH']}"
    else:
        env["PYTHONPATH"] = str(src_path)

    cmd = [
        sys.executable, "-m", "uvicorn",
        "cpq_backend.api.main:app",
        "--host", settings.host,
        "--port", str(settings.port),
    ]
    if "--reload" in sys.argv[1:]:
        cmd.append("--reload")

    print(f"Starting CPQ Backend API on {settings.host}:{settings.port}...")
    try:
        subprocess.run(cmd, env=env, cwd=str(project_root))
    except KeyboardInterrupt:
        print("\nAPI stopped.")


if __name__ == "__main__":
    main()
