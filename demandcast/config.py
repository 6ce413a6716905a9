# demandcast/config.py
"""
Runtime settings, read once from the environment (and an optional .env file).
"""
import logging
import os

from dotenv import load_dotenv

load_dotenv()

# ---- Generative service ------------------------------------------------------
LLM_HOST = os.getenv("LLM_HOST", "127.0.0.1")
LLM_PORT = int(os.getenv("LLM_PORT", "8899"))
LLM_BASE = os.getenv("LLM_BASE", f"http://{LLM_HOST}:{LLM_PORT}")
LLM_URL = os.getenv("LLM_URL", f"{LLM_BASE}/generate")
LLM_TIMEOUT = float(os.getenv("LLM_TIMEOUT", "120"))

# ---- Local model (agent/llm_service.py) --------------------------------------
BASE_MODEL = os.getenv("BASE_MODEL", "Qwen/Qwen2.5-1.5B-Instruct")
TOKENIZER_PATH = os.getenv("TOKENIZER_PATH", BASE_MODEL)
ADAPTER_PATH = os.getenv("ADAPTER_PATH", "artifacts/adapter")
MAX_NEW_TOKENS = int(os.getenv("MAX_NEW_TOKENS", "768"))
TEMPERATURE = float(os.getenv("TEMPERATURE", "0.2"))
TOP_P = float(os.getenv("TOP_P", "0.95"))
PRELOAD_MODEL = os.getenv("PRELOAD_MODEL", "1").lower() not in ("0", "false", "no")

# ---- Streamlit app -----------------------------------------------------------
APP_HOST = os.getenv("APP_HOST", "127.0.0.1")
APP_PORT = int(os.getenv("STREAMLIT_SERVER_PORT", os.getenv("APP_PORT", "8501")))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level=None):
    """Install a root handler; later calls are no-ops (basicConfig semantics)."""
    logging.basicConfig(level=(level or LOG_LEVEL).upper(), format=LOG_FORMAT)
