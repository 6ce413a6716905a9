from unittest.mock import MagicMock, patch

import pytest
import requests

from agent.errors import ExternalCallFailure
from demandcast import llm_client


def response(status=200, body=None):
    r = MagicMock()
    r.status_code = status
    r.json.return_value = body if body is not None else {}
    if status >= 400:
        r.raise_for_status.side_effect = requests.HTTPError(f"{status} Server Error")
    return r


def test_generate_posts_prompt_and_schema():
    with patch("demandcast.llm_client.requests.post", return_value=response(body={"text": "{}"})) as post:
        out = llm_client.generate("hi", {"type": "object"}, url="http://llm/generate", timeout=5)
    assert out == "{}"
    post.assert_called_once_with("http://llm/generate", json={"prompt": "hi", "schema": {"type": "object"}},
                                 timeout=5)


def test_generated_text_key_is_accepted():
    with patch("demandcast.llm_client.requests.post", return_value=response(body={"generated_text": "ok"})):
        assert llm_client.generate("hi") == "ok"


@pytest.mark.parametrize("effect", [
    requests.ConnectionError("refused"),
    requests.Timeout("slow"),
])
def test_transport_errors_are_external_call_failures(effect):
    with patch("demandcast.llm_client.requests.post", side_effect=effect):
        with pytest.raises(ExternalCallFailure):
            llm_client.generate("hi")


def test_http_error_is_external_call_failure():
    with patch("demandcast.llm_client.requests.post", return_value=response(status=500)):
        with pytest.raises(ExternalCallFailure, match="500"):
            llm_client.generate("hi")


def test_non_json_body_is_external_call_failure():
    r = response()
    r.json.side_effect = ValueError("Expecting value")
    with patch("demandcast.llm_client.requests.post", return_value=r):
        with pytest.raises(ExternalCallFailure):
            llm_client.generate("hi")


@pytest.mark.parametrize("text", [{"forecast": "x"}, ["a"], 42])
def test_non_string_text_is_external_call_failure(text):
    with patch("demandcast.llm_client.requests.post", return_value=response(body={"text": text})):
        with pytest.raises(ExternalCallFailure, match="unexpected body"):
            llm_client.generate("hi")


def test_is_http_healthy():
    with patch("demandcast.llm_client.requests.get", return_value=response(status=200)):
        assert llm_client.is_http_healthy("http://llm/health")
    with patch("demandcast.llm_client.requests.get", side_effect=requests.ConnectionError()):
        assert not llm_client.is_http_healthy("http://llm/health")


def test_wait_for_port_gives_up():
    with patch("demandcast.llm_client.socket.create_connection", side_effect=OSError):
        assert not llm_client.wait_for_port("127.0.0.1", 1, timeout=0.3)
