# tests/test_gateway.py
"""Tests for ModelGateway routing and JSON degradation."""

import json
from types import SimpleNamespace

import pytest

from tubestudio.llm import UpstreamUnavailableError
from tubestudio.models import CloudUriReference


class TestRouting:
    def test_text_prompt_goes_to_llm(self, gateway, mock_llm, mock_video):
        mock_llm._mock_completion.return_value.choices[0].message.content = "text answer"
        assert gateway.generate("prompt") == "text answer"
        mock_video._vertex_mock.models.generate_content.assert_not_called()
        mock_video._files_mock.models.generate_content.assert_not_called()

    def test_video_prompt_goes_to_video_model(self, gateway, mock_llm, mock_video):
        mock_video._vertex_mock.models.generate_content.return_value = SimpleNamespace(text="video answer")
        ref = CloudUriReference(uri="gs://bucket/v.mp4")
        assert gateway.generate("prompt", ref) == "video answer"
        mock_llm._mock_completion.assert_not_called()


class TestGenerateJson:
    def test_parsed_and_validated(self, gateway, mock_llm):
        mock_llm._mock_completion.return_value.choices[0].message.content = '```json\n[1, 2, 3]\n```'
        assert gateway.generate_json("p", fallback=lambda raw: None, validate=sum) == 6

    def test_unparseable_uses_fallback(self, gateway, mock_llm):
        mock_llm._mock_completion.return_value.choices[0].message.content = "no json here"
        assert gateway.generate_json("p", fallback=lambda raw: f"fallback:{raw}") == "fallback:no json here"

    def test_validator_rejection_uses_fallback(self, gateway, mock_llm):
        mock_llm._mock_completion.return_value.choices[0].message.content = json.dumps({"a": 1})

        def reject(data):
            raise ValueError("wrong shape")

        assert gateway.generate_json("p", fallback=lambda raw: "fb", validate=reject) == "fb"

    def test_upstream_failure_propagates(self, gateway, mock_llm):
        mock_llm._mock_completion.side_effect = RuntimeError("quota exceeded")
        with pytest.raises(UpstreamUnavailableError):
            gateway.generate_json("p", fallback=lambda raw: "never")
