"""
Unit tests for reading JSON request payloads from files or literals.
"""

import json
import logging

import pytest
from livekit import api

from lksip.services.sip.exceptions import PayloadError
from lksip.services.sip.payload import read_payload_text, read_request_file_or_literal


@pytest.mark.unit
class TestReadPayload:
    def test_literal(self):
        req = read_request_file_or_literal('{"trunk": {"name": "lobby", "numbers": ["+15105550100"]}}', api.CreateSIPInboundTrunkRequest)

        assert req.trunk.name == "lobby"
        assert list(req.trunk.numbers) == ["+15105550100"]

    def test_literal_with_leading_whitespace(self):
        assert read_payload_text('  {"name": "x"}') == '  {"name": "x"}'

    def test_file(self, tmp_path):
        path = tmp_path / "rule.json"
        path.write_text(json.dumps({"name": "office", "trunk_ids": ["ST_1"]}))

        info = read_request_file_or_literal(str(path), api.SIPDispatchRuleInfo)

        assert info.name == "office"
        assert list(info.trunk_ids) == ["ST_1"]

    def test_logs_payload_source(self, tmp_path, caplog):
        path = tmp_path / "rule.json"
        path.write_text('{"name": "office"}')

        with caplog.at_level(logging.DEBUG, logger="lksip.services.sip.payload"):
            read_request_file_or_literal(str(path), api.SIPDispatchRuleInfo)
            read_request_file_or_literal('{"name": "office"}', api.SIPDispatchRuleInfo)

        messages = [record.getMessage() for record in caplog.records]
        assert f"Parsed SIPDispatchRuleInfo payload from {path}" in messages
        assert "Parsed SIPDispatchRuleInfo payload from literal" in messages

    def test_camel_case_names(self):
        info = read_request_file_or_literal('{"sipTrunkId": "ST_1", "authUsername": "bob"}', api.SIPOutboundTrunkInfo)

        assert info.sip_trunk_id == "ST_1"
        assert info.auth_username == "bob"

    def test_missing_file(self, tmp_path):
        with pytest.raises(PayloadError) as exc_info:
            read_request_file_or_literal(str(tmp_path / "missing.json"), api.SIPInboundTrunkInfo)
        assert "could not read request" in str(exc_info.value)
        assert "missing.json" in str(exc_info.value)

    def test_malformed_json(self):
        with pytest.raises(PayloadError):
            read_request_file_or_literal('{"name": ', api.SIPInboundTrunkInfo)

    def test_unknown_field(self):
        with pytest.raises(PayloadError):
            read_request_file_or_literal('{"no_such_field": 1}', api.SIPInboundTrunkInfo)
