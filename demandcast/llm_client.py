# demandcast/llm_client.py
import logging
import socket
import time
from typing import Optional

import requests

from agent.errors import ExternalCallFailure
from demandcast.config import LLM_TIMEOUT, LLM_URL

logger = logging.getLogger(__name__)


def wait_for_port(host: str, port: int, timeout: float = 30.0) -> bool:
    start = time.time()
    while time.time() - start < timeout:
        try:
            with socket.create_connection((host, port), timeout=1.0):
                return True
        except OSError:
            time.sleep(0.25)
    return False


def is_http_healthy(url: str, timeout: float = 2.0) -> bool:
    try:
        r = requests.get(url, timeout=timeout)
        return r.status_code < 500
    except requests.RequestException:
        return False


def generate(prompt: str, schema: Optional[dict] = None, url: str = LLM_URL,
             timeout: float = LLM_TIMEOUT) -> str:
    """
    One round trip to the generative service: POST {"prompt", "schema"} and
    return the reply text. Anything short of a 2xx JSON answer raises
    ExternalCallFailure.
    """
    payload = {"prompt": prompt}
    if schema is not None:
        payload["schema"] = schema
    logger.debug("POST %s (%d prompt chars)", url, len(prompt))
    try:
        r = requests.post(url, json=payload, timeout=timeout)
        r.raise_for_status()
        body = r.json()
    except requests.Timeout as e:
        raise ExternalCallFailure(f"The AI service did not answer within {timeout:g}s.") from e
    except requests.RequestException as e:
        raise ExternalCallFailure(f"The AI service request failed: {e}") from e
    except ValueError as e:
        raise ExternalCallFailure("The AI service returned a non-JSON body.") from e

    if not isinstance(body, dict):
        raise ExternalCallFailure("The AI service returned an unexpected body.")
    text = body.get("text") or body.get("generated_text") or ""
    if not isinstance(text, str):
        raise ExternalCallFailure("The AI service returned an unexpected body.")
    return text
