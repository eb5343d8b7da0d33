"""
Tests for wingetgen.explain module.

Tests script explanations including:
- Gemini request building and response parsing
- API key handling
- HTTP error mapping
- Markdown-lite rendering
"""

from __future__ import annotations

import pytest
import requests
import requests_mock

from wingetgen.exceptions import ConfigError, NetworkError
from wingetgen.explain import render_explanation, request_explanation
from wingetgen.explain.client import API_BASE_URL, DEFAULT_MODEL, build_request_body

API_URL = f"{API_BASE_URL}/models/{DEFAULT_MODEL}:generateContent"


def _gemini_payload(*texts: str) -> dict:
    return {
        "candidates": [
            {"content": {"parts": [{"text": text} for text in texts], "role": "model"}}
        ]
    }


class TestRequestExplanation:
    """Tests for the Gemini client."""

    def test_returns_explanation_text(self):
        """Test the text of the first candidate is returned."""
        with requests_mock.Mocker() as m:
            m.post(API_URL, json=_gemini_payload("# Overview\n\nIt updates apps."))

            text = request_explanation("Write-Host 'hi'", api_key="secret")

        assert text == "# Overview\n\nIt updates apps."

    def test_joins_multiple_parts(self):
        """Test multi-part responses are concatenated."""
        with requests_mock.Mocker() as m:
            m.post(API_URL, json=_gemini_payload("Part one. ", "Part two."))

            text = request_explanation("script", api_key="secret")

        assert text == "Part one. Part two."

    def test_sends_script_and_key(self):
        """Test the request carries the API key header and the script."""
        with requests_mock.Mocker() as m:
            m.post(API_URL, json=_gemini_payload("ok"))

            request_explanation("Stop-Transcript", api_key="secret")

            sent = m.last_request
            assert sent.headers["x-goog-api-key"] == "secret"
            prompt = sent.json()["contents"][0]["parts"][0]["text"]
            assert "Stop-Transcript" in prompt

    def test_custom_model_url(self):
        """Test the model name selects the endpoint."""
        url = f"{API_BASE_URL}/models/gemini-custom:generateContent"
        with requests_mock.Mocker() as m:
            m.post(url, json=_gemini_payload("ok"))

            assert request_explanation("s", api_key="k", model="gemini-custom") == "ok"

    def test_api_key_from_environment(self, monkeypatch):
        """Test GEMINI_API_KEY is used when no key is passed."""
        monkeypatch.setenv("GEMINI_API_KEY", "from-env")
        with requests_mock.Mocker() as m:
            m.post(API_URL, json=_gemini_payload("ok"))

            request_explanation("script")

            assert m.last_request.headers["x-goog-api-key"] == "from-env"

    def test_api_key_from_dotenv_in_working_dir(self, tmp_test_dir, monkeypatch):
        """Test a .env file in the working directory supplies the key."""
        monkeypatch.setenv("GEMINI_API_KEY", "unset-at-teardown")
        monkeypatch.delenv("GEMINI_API_KEY")
        dotenv_file = tmp_test_dir / ".env"
        dotenv_file.write_text("GEMINI_API_KEY=from-dotenv\n", encoding="utf-8")
        monkeypatch.chdir(tmp_test_dir)

        with requests_mock.Mocker() as m:
            m.post(API_URL, json=_gemini_payload("ok"))

            request_explanation("script")

            assert m.last_request.headers["x-goog-api-key"] == "from-dotenv"

    def test_missing_api_key_raises(self, tmp_test_dir, monkeypatch):
        """Test no key at all raises ConfigError before any request."""
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.chdir(tmp_test_dir)

        with pytest.raises(ConfigError, match="GEMINI_API_KEY"):
            request_explanation("script")

    @pytest.mark.parametrize(
        ("status", "message"),
        [(401, "rejected the API key"), (403, "rejected the API key"),
         (429, "rate limit"), (500, "request failed: 500")],
    )
    def test_http_errors(self, status, message):
        """Test HTTP errors are mapped to NetworkError."""
        with requests_mock.Mocker() as m:
            m.post(API_URL, status_code=status)

            with pytest.raises(NetworkError, match=message):
                request_explanation("script", api_key="secret")

    def test_connection_error(self):
        """Test transport failures raise NetworkError."""
        with requests_mock.Mocker() as m:
            m.post(API_URL, exc=requests.exceptions.ConnectTimeout)

            with pytest.raises(NetworkError, match="Failed to reach Gemini API"):
                request_explanation("script", api_key="secret")

    @pytest.mark.parametrize(
        "payload",
        [{}, {"candidates": []}, {"candidates": [{"content": {}}]}],
    )
    def test_missing_text_raises(self, payload):
        """Test responses without candidates or parts raise NetworkError."""
        with requests_mock.Mocker() as m:
            m.post(API_URL, json=payload)

            with pytest.raises(NetworkError, match="did not contain"):
                request_explanation("script", api_key="secret")

    def test_blank_text_raises(self):
        """Test an empty explanation raises NetworkError."""
        with requests_mock.Mocker() as m:
            m.post(API_URL, json=_gemini_payload("  \n"))

            with pytest.raises(NetworkError, match="empty"):
                request_explanation("script", api_key="secret")

    def test_request_body_shape(self):
        """Test the generateContent body holds one user content part."""
        body = build_request_body("Write-Host 'x'")

        assert len(body["contents"]) == 1
        assert "Write-Host 'x'" in body["contents"][0]["parts"][0]["text"]


class TestRenderExplanation:
    """Tests for markdown-lite rendering."""

    def test_headings(self):
        """Test '# ' and '## ' headings."""
        html = render_explanation("# Overview\n\n## Step **one**")

        assert html == "<h3>Overview</h3>\n<h4>Step <strong>one</strong></h4>"

    def test_list_block(self):
        """Test list blocks become one <li> per line."""
        html = render_explanation("- first\n- **second**\n* third")

        assert html == (
            "<ul><li>first</li><li><strong>second</strong></li>"
            "<li>third</li></ul>"
        )

    def test_paragraphs(self):
        """Test other blocks become paragraphs."""
        html = render_explanation("Line one\nline two\n\n   \n\nNext paragraph")

        assert html == "<p>Line one\nline two</p>\n<p>Next paragraph</p>"

    def test_bold_is_non_greedy(self):
        """Test several bold runs in one block."""
        html = render_explanation("**a** and **b**")

        assert html == "<p><strong>a</strong> and <strong>b</strong></p>"

    def test_html_is_escaped(self):
        """Test markup in the explanation text is escaped."""
        html = render_explanation("Runs as <SYSTEM> & logs")

        assert html == "<p>Runs as &lt;SYSTEM&gt; &amp; logs</p>"

    def test_surrounding_whitespace_trimmed(self):
        """Test block whitespace is trimmed before classification."""
        html = render_explanation("   # Title   \n\n   - item  ")

        assert html == "<h3>Title</h3>\n<ul><li>item</li></ul>"
