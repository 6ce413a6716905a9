# demandcast/cli.py
import os
import sys
import signal
import time
import subprocess
import webbrowser
from pathlib import Path

from demandcast.config import APP_HOST, APP_PORT, LLM_BASE, LLM_PORT, configure_logging
from demandcast.llm_client import is_http_healthy, wait_for_port

# ---- Paths & defaults -------------------------------------------------------
ROOT = Path(__file__).resolve().parents[1]
APP_PATH = ROOT / "apps" / "streamlit_app" / "app.py"


# ---- Utilities ---------------------------------------------------------------
def _wait_http_ok(url: str, timeout=60):
    """Poll a URL until it answers below 500 or timeout."""
    t0 = time.time()
    while time.time() - t0 < timeout:
        if is_http_healthy(url, timeout=3):
            return True
        time.sleep(0.5)
    return False


def _env_with_defaults():
    env = os.environ.copy()
    env.setdefault("LLM_BASE", LLM_BASE)
    env.setdefault("LLM_URL", f"{LLM_BASE}/generate")
    env.setdefault("STREAMLIT_BROWSER_GATHER_USAGE_STATS", "false")
    # top-level packages (agent, tools, demandcast) import from the repo root
    env["PYTHONPATH"] = os.pathsep.join(p for p in (str(ROOT), env.get("PYTHONPATH")) if p)
    return env


def _app_cmd():
    return [
        sys.executable, "-m", "streamlit", "run", str(APP_PATH),
        "--server.address", APP_HOST,
        "--server.port", str(APP_PORT),
        "--server.headless", "true",
        "--server.fileWatcherType", "none",
    ]


def _foreground(proc):
    try:
        return proc.wait()
    except KeyboardInterrupt:
        return 0
    finally:
        try:
            proc.terminate()
        except OSError:
            pass


# ---- Launchers ---------------------------------------------------------------
def start_llm():
    env = _env_with_defaults()
    env.setdefault("LLM_PORT", str(LLM_PORT))
    return subprocess.Popen([sys.executable, "-m", "agent.llm_service"], cwd=str(ROOT), env=env)


def run_llm():
    """Console script `demandcast-llm`: generation service only (foreground)."""
    configure_logging()
    sys.exit(_foreground(start_llm()))


def run_app():
    """Console script `demandcast-app`: Streamlit dashboard only (foreground)."""
    configure_logging()
    if not APP_PATH.exists():
        print(f"[demandcast] App not found: {APP_PATH}", file=sys.stderr)
        sys.exit(1)
    sys.exit(_foreground(subprocess.Popen(_app_cmd(), env=_env_with_defaults())))


# ---- One-shot launcher -------------------------------------------------------
def main():
    """
    Starts the generation service (unless one already answers /health),
    starts Streamlit -> waits for port -> opens browser.
    Cleanly shuts down both on Ctrl+C.
    """
    configure_logging()
    health_url = f"{LLM_BASE}/health"

    # 1) LLM
    llm_proc = None
    if is_http_healthy(health_url):
        print(f"[demandcast] Using running LLM service at {LLM_BASE}")
    else:
        print("[demandcast] Starting LLM service...")
        llm_proc = start_llm()
        if not _wait_http_ok(health_url, timeout=300):
            print("[demandcast] LLM /health not ready. Exiting.", file=sys.stderr)
            llm_proc.terminate()
            sys.exit(4)

    # 2) Streamlit
    print("[demandcast] Starting Streamlit app...")
    app_proc = subprocess.Popen(_app_cmd(), env=_env_with_defaults())
    procs = [p for p in (app_proc, llm_proc) if p is not None]

    # 3) Wait for app port, then open browser
    if wait_for_port(APP_HOST, APP_PORT, timeout=90):
        webbrowser.open(f"http://{APP_HOST}:{APP_PORT}", new=2, autoraise=True)
        print(f"[demandcast] App is up: http://{APP_HOST}:{APP_PORT}")
    else:
        print("[demandcast] App port did not open in time; you can try opening "
              f"http://{APP_HOST}:{APP_PORT} manually.", file=sys.stderr)

    def _shutdown(*_):
        print("\n[demandcast] Shutting down...")
        for p in procs:
            p.terminate()
        time.sleep(0.6)
        for p in procs:
            if p.poll() is None:
                p.kill()
        sys.exit(0)

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    # If the app exits, bring the service down too
    exit_code = 0
    try:
        exit_code = app_proc.wait()
    finally:
        if llm_proc is not None:
            llm_proc.terminate()
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
