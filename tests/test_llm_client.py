import pytest
import requests

from sitegen import llm_client


class _Resp:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


def _ok(content):
    return _Resp(payload={"choices": [{"message": {"role": "assistant", "content": content}}]})


MESSAGES = [{"role": "system", "content": "s"}, {"role": "user", "content": "u"}]


def test_complete_posts_model_temperature_and_messages(monkeypatch):
    seen = {}

    def fake_post(url, headers=None, json=None, timeout=None):
        seen.update(url=url, headers=headers, body=json, timeout=timeout)
        return _ok('{"html": ""}')

    monkeypatch.setattr(llm_client.requests, "post", fake_post)
    c = llm_client.OpenAIChatClient("sk-test", model="gpt-4", temperature=0.7, timeout=30)
    assert c.complete(MESSAGES) == '{"html": ""}'
    assert seen["url"] == "https://api.openai.com/v1/chat/completions"
    assert seen["headers"]["Authorization"] == "Bearer sk-test"
    assert seen["body"] == {"model": "gpt-4", "messages": MESSAGES, "temperature": 0.7}
    assert seen["timeout"] == 30


def test_complete_uses_first_choice_only(monkeypatch):
    payload = {"choices": [{"message": {"content": "first"}}, {"message": {"content": "second"}}]}
    monkeypatch.setattr(llm_client.requests, "post", lambda *a, **k: _Resp(payload=payload))
    assert llm_client.OpenAIChatClient("k").complete(MESSAGES) == "first"


def test_missing_key_fails_without_network(monkeypatch):
    def boom(*a, **k):
        raise AssertionError("should not call out without a key")

    monkeypatch.setattr(llm_client.requests, "post", boom)
    with pytest.raises(llm_client.LLMError):
        llm_client.OpenAIChatClient("  ").complete(MESSAGES)


def test_transport_error_raises_llm_error(monkeypatch):
    def fail(*a, **k):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(llm_client.requests, "post", fail)
    with pytest.raises(llm_client.LLMError):
        llm_client.OpenAIChatClient("k").complete(MESSAGES)


def test_empty_completion_is_returned_as_reply_text(monkeypatch):
    monkeypatch.setattr(llm_client.requests, "post", lambda *a, **k: _ok(""))
    assert llm_client.OpenAIChatClient("k").complete(MESSAGES) == ""


@pytest.mark.parametrize(
    "resp",
    [
        _Resp(status_code=401, text='{"error": "invalid api key"}'),
        _Resp(status_code=500, text="upstream exploded"),
        _Resp(payload=None, text="<html>gateway</html>"),
        _Resp(payload={"choices": []}),
        _Resp(payload={"choices": [{"text": "legacy"}]}),
        _Resp(payload={"choices": [{"message": {"content": None}}]}),
        _Resp(payload=["not", "an", "envelope"]),
    ],
)
def test_bad_responses_raise_llm_error(monkeypatch, resp):
    monkeypatch.setattr(llm_client.requests, "post", lambda *a, **k: resp)
    with pytest.raises(llm_client.LLMError):
        llm_client.OpenAIChatClient("k").complete(MESSAGES)


def test_from_env_reads_module_config(monkeypatch):
    monkeypatch.setattr(llm_client, "OPENAI_API_KEY", "env-key")
    monkeypatch.setattr(llm_client, "OPENAI_MODEL", "gpt-4o")
    monkeypatch.setattr(llm_client, "TEMPERATURE", 0.2)
    monkeypatch.setattr(llm_client, "LLM_TIMEOUT_SECS", 15)
    c = llm_client.OpenAIChatClient.from_env()
    assert (c.api_key, c.model, c.temperature, c.timeout) == ("env-key", "gpt-4o", 0.2, 15)
    assert c.status() == {
        "provider": "openai",
        "model": "gpt-4o",
        "has_token": True,
        "endpoint": llm_client.OPENAI_ENDPOINT,
    }
