from unittest.mock import MagicMock, patch

import httpx
import openai
import pytest

from vault_import.extraction.exceptions import ExtractionNetworkError
from vault_import.extraction.openai_client_adapter import OpenAIClientAdapter


def _make_stream_event(content: str | None) -> MagicMock:
    choice = MagicMock()
    choice.delta.content = content
    event = MagicMock()
    event.choices = [choice]
    return event


def _make_adapter(mock_client: MagicMock) -> OpenAIClientAdapter:
    with patch(
        "vault_import.extraction.openai_client_adapter.openai.OpenAI",
        return_value=mock_client,
    ):
        return OpenAIClientAdapter(api_key="k", timeout_seconds=30, base_url=None)


def _collect(adapter: OpenAIClientAdapter) -> list[str]:
    return list(adapter.stream_text(model="m", temperature=0.0, prompt="extract this"))


class TestOpenAIClientAdapter:
    def test_yields_deltas_in_order(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = iter(
            [_make_stream_event('[{"name"'), _make_stream_event(': "A"}]')]
        )
        adapter = _make_adapter(mock_client)

        assert _collect(adapter) == ['[{"name"', ': "A"}]']

    def test_skips_empty_deltas_and_events_without_choices(self) -> None:
        no_choices = MagicMock()
        no_choices.choices = []
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = iter(
            [_make_stream_event(None), no_choices, _make_stream_event("[]"), _make_stream_event("")]
        )
        adapter = _make_adapter(mock_client)

        assert _collect(adapter) == ["[]"]

    def test_requests_streaming_completion(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = iter([])
        adapter = _make_adapter(mock_client)

        _collect(adapter)

        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["stream"] is True
        assert kwargs["model"] == "m"
        assert kwargs["temperature"] == 0.0
        assert kwargs["messages"] == [{"role": "user", "content": "extract this"}]

    def test_passes_base_url_and_timeout_to_client(self) -> None:
        with patch(
            "vault_import.extraction.openai_client_adapter.openai.OpenAI",
        ) as mock_cls:
            OpenAIClientAdapter(api_key="k", timeout_seconds=45, base_url="http://local/v1")
        mock_cls.assert_called_once_with(api_key="k", timeout=45, base_url="http://local/v1")

    def test_raises_network_error_on_connection_failure(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = openai.APIConnectionError(
            request=MagicMock()
        )
        adapter = _make_adapter(mock_client)

        with pytest.raises(ExtractionNetworkError, match="network error"):
            _collect(adapter)

    def test_raises_network_error_on_timeout(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = httpx.ReadTimeout("slow")
        adapter = _make_adapter(mock_client)

        with pytest.raises(ExtractionNetworkError, match="network error"):
            _collect(adapter)

    def test_raises_network_error_on_api_error(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = openai.APIError(
            message="server error",
            request=MagicMock(),
            body=None,
        )
        adapter = _make_adapter(mock_client)

        with pytest.raises(ExtractionNetworkError, match="API error"):
            _collect(adapter)

    def test_error_mid_stream_is_wrapped(self) -> None:
        def stream():
            yield _make_stream_event("[")
            raise httpx.ConnectError("reset")

        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = stream()
        adapter = _make_adapter(mock_client)

        deltas: list[str] = []
        with pytest.raises(ExtractionNetworkError):
            for delta in adapter.stream_text(model="m", temperature=0.0, prompt="p"):
                deltas.append(delta)
        assert deltas == ["["]
