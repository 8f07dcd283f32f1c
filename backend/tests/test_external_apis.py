"""
Unit tests for the HTTP retry helper and the Ollama generator (mocked).
Run from backend: python -m pytest tests/test_external_apis.py -v
"""
import pytest
import requests
from unittest.mock import patch, MagicMock

from core.errors import GeneratorUnavailableError
from core.external_apis import OllamaGenerator, post_with_retries


@patch("core.external_apis.http_retry.time.sleep")
@patch("core.external_apis.http_retry.requests.post")
def test_post_with_retries_success_first_try(mock_post, mock_sleep):
    mock_post.return_value = MagicMock(status_code=200)
    resp, err = post_with_retries("http://x", json_body={"a": 1}, max_retries=3)
    assert err is None
    assert resp.status_code == 200
    assert mock_post.call_count == 1
    mock_sleep.assert_not_called()


@patch("core.external_apis.http_retry.time.sleep")
@patch("core.external_apis.http_retry.requests.post")
def test_post_with_retries_backoff_then_success(mock_post, mock_sleep):
    """Timeout, then 503, then 200: two exponential sleeps."""
    mock_post.side_effect = [
        requests.Timeout("slow"),
        MagicMock(status_code=503),
        MagicMock(status_code=200),
    ]
    resp, err = post_with_retries("http://x", max_retries=3, initial_backoff=0.5)
    assert err is None and resp.status_code == 200
    assert [c.args[0] for c in mock_sleep.call_args_list] == [0.5, 1.0]


@patch("core.external_apis.http_retry.time.sleep")
@patch("core.external_apis.http_retry.requests.post")
def test_post_with_retries_exhausted(mock_post, mock_sleep):
    mock_post.side_effect = requests.ConnectionError("refused")
    resp, err = post_with_retries("http://x", max_retries=2)
    assert resp is None
    assert "ConnectionError" in err
    assert mock_post.call_count == 2
    assert mock_sleep.call_count == 1


@patch("core.external_apis.http_retry.time.sleep")
@patch("core.external_apis.http_retry.requests.post")
def test_post_with_retries_4xx_not_retried(mock_post, mock_sleep):
    mock_post.return_value = MagicMock(status_code=404)
    resp, err = post_with_retries("http://x", max_retries=3)
    assert resp.status_code == 404 and err is None
    assert mock_post.call_count == 1


@patch("core.external_apis.ollama.post_with_retries")
def test_ollama_generate_success(mock_post):
    mock_post.return_value = (MagicMock(status_code=200, json=lambda: {"response": '{"safe": true}'}), None)
    gen = OllamaGenerator(url="http://ollama/api/generate", model="m1", temperature=0.1)
    assert gen.generate("hello") == '{"safe": true}'
    body = mock_post.call_args.kwargs["json_body"]
    assert body["model"] == "m1"
    assert body["prompt"] == "hello"
    assert body["stream"] is False
    assert body["options"] == {"temperature": 0.1}


@patch("core.external_apis.ollama.post_with_retries")
def test_ollama_unavailable(mock_post):
    mock_post.return_value = (None, "Read timed out")
    with pytest.raises(GeneratorUnavailableError):
        OllamaGenerator(url="http://ollama").generate("x")


@patch("core.external_apis.ollama.post_with_retries")
def test_ollama_non_200(mock_post):
    mock_post.return_value = (MagicMock(status_code=404, text="model not found"), None)
    with pytest.raises(GeneratorUnavailableError):
        OllamaGenerator(url="http://ollama").generate("x")


@patch("core.external_apis.ollama.post_with_retries")
def test_ollama_bad_envelope(mock_post):
    def _bad_json():
        raise ValueError("not json")
    mock_post.return_value = (MagicMock(status_code=200, json=_bad_json), None)
    with pytest.raises(GeneratorUnavailableError):
        OllamaGenerator(url="http://ollama").generate("x")
    mock_post.return_value = (MagicMock(status_code=200, json=lambda: {"response": None}), None)
    with pytest.raises(GeneratorUnavailableError):
        OllamaGenerator(url="http://ollama").generate("x")


@pytest.mark.parametrize("body", [["not", "an", "object"], "text", 42, None])
@patch("core.external_apis.ollama.post_with_retries")
def test_ollama_non_object_envelope(mock_post, body):
    """A 200 whose JSON body is not an object is an unavailable generator, not a crash."""
    mock_post.return_value = (MagicMock(status_code=200, json=lambda: body), None)
    with pytest.raises(GeneratorUnavailableError):
        OllamaGenerator(url="http://ollama").generate("x")
