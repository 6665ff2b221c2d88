"""
Samithi portal startup script.

Starts the FastAPI backend and the Streamlit frontend together.
Run with: python start.py [--backend-only | --frontend-only]
"""

import argparse
import os
import sys
import time
import signal
import subprocess
from pathlib import Path

# Configuration
BACKEND_HOST = os.getenv("API_HOST", "127.0.0.1")
BACKEND_PORT = int(os.getenv("API_PORT", "8000"))
FRONTEND_PORT = int(os.getenv("FRONTEND_PORT", "8501"))

PROJECT_ROOT = Path(__file__).parent
processes = []


def _spawn(name, cmd):
    env = dict(os.environ)
    env.setdefault("API_BASE_URL", f"http://{BACKEND_HOST}:{BACKEND_PORT}")
    process = subprocess.Popen(
        cmd,
        cwd=str(PROJECT_ROOT),
        env=env,
        stdout=sys.stdout,
        stderr=sys.stderr,
    )
    processes.append((name, process))
    return process


def start_backend():
    """Start FastAPI backend."""
    print(f"[BACKEND] Starting on http://{BACKEND_HOST}:{BACKEND_PORT}")
    return _spawn("backend", [
        sys.executable, "-m", "uvicorn",
        "backend.main:app",
        "--host", BACKEND_HOST,
        "--port", str(BACKEND_PORT),
        "--reload" if os.getenv("DEBUG") else "--no-access-log",
    ])


def start_frontend():
    """Start Streamlit frontend."""
    print(f"[FRONTEND] Starting on http://localhost:{FRONTEND_PORT}")
    return _spawn("frontend", [
        sys.executable, "-m", "streamlit", "run",
        "frontend/app.py",
        "--server.port", str(FRONTEND_PORT),
        "--server.headless", "true",
    ])


def wait_for_backend(timeout=30):
    """Poll the liveness route until the API answers."""
    import urllib.request
    import urllib.error

    url = f"http://{BACKEND_HOST}:{BACKEND_PORT}/api/v1/health/live"
    deadline = time.time() + timeout

    while time.time() < deadline:
        try:
            with urllib.request.urlopen(url, timeout=2) as response:
                if response.status == 200:
                    print("[BACKEND] Ready!")
                    return True
        except (urllib.error.URLError, ConnectionRefusedError, OSError):
            time.sleep(0.5)

    print("[BACKEND] Failed to start within timeout")
    return False


def cleanup(signum=None, frame=None):
    """Stop every child process."""
    print("\n[SHUTDOWN] Stopping all services...")

    for name, process in processes:
        if process.poll() is None:
            print(f"[SHUTDOWN] Stopping {name}...")
            process.terminate()
            try:
                process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                process.kill()

    print("[SHUTDOWN] Done")
    sys.exit(0)


def main():
    parser = argparse.ArgumentParser(description="Start the Samithi portal")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--backend-only", action="store_true", help="Start only the API")
    group.add_argument("--frontend-only", action="store_true", help="Start only the Streamlit app")
    args = parser.parse_args()

    signal.signal(signal.SIGINT, cleanup)
    signal.signal(signal.SIGTERM, cleanup)

    print("=" * 50)
    print("Sabari Sastha Seva Samithi - Starting Services")
    print("=" * 50)

    if not args.frontend_only:
        start_backend()
        if not wait_for_backend():
            print("[ERROR] Backend failed to start. Check logs above.")
            cleanup()
            return

    if not args.backend_only:
        start_frontend()

    print("=" * 50)
    if not args.frontend_only:
        print(f"Backend:  http://{BACKEND_HOST}:{BACKEND_PORT}/docs")
    if not args.backend_only:
        print(f"Frontend: http://localhost:{FRONTEND_PORT}")
    print("Press Ctrl+C to stop")
    print("=" * 50)

    try:
        while True:
            for name, process in processes:
                if process.poll() is not None:
                    print(f"[ERROR] {name} exited with code {process.returncode}")
                    cleanup()
                    return
            time.sleep(1)
    except KeyboardInterrupt:
        cleanup()


if __name__ == "__main__":
    main()
