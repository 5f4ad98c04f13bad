"""
Unit tests for the SIP resource schemas: transport normalization and
construction of the UpdateSIP*Request messages.
"""

import pytest
from livekit import api
from livekit.protocol.sip import SIPTransport

from lksip.services.sip.exceptions import InvalidInputError
from lksip.services.sip.resolver import Mode, MutationRequest
from lksip.services.sip.schemas import DISPATCH_RULE, INBOUND_TRUNK, OUTBOUND_TRUNK, normalize_transport
from lksip.services.sip.updates import ABSENT, Set, SetList


@pytest.mark.unit
class TestNormalizeTransport:
    @pytest.mark.parametrize("value", ["tcp", "TCP", "Tcp", "SIP_TRANSPORT_TCP", "sip_transport_tcp"])
    def test_spellings_resolve_to_same_value(self, value):
        assert normalize_transport(value) == SIPTransport.Value("SIP_TRANSPORT_TCP")

    @pytest.mark.parametrize("value", ["udp", "tls", "auto"])
    def test_other_transports(self, value):
        assert normalize_transport(value) == SIPTransport.Value("SIP_TRANSPORT_" + value.upper())

    def test_idempotent_on_enum_name(self):
        name = SIPTransport.Name(normalize_transport("tls"))
        assert normalize_transport(name) == normalize_transport("tls")

    @pytest.mark.parametrize("value", ["sctp", "websocket", "SIP_TRANSPORT_"])
    def test_unknown_value_fails_with_value_in_message(self, value):
        with pytest.raises(InvalidInputError) as exc_info:
            normalize_transport(value)
        assert value in str(exc_info.value)
        assert str(exc_info.value).startswith("unsupported transport:")


@pytest.mark.unit
class TestSchemaLayout:
    def test_inbound_fields(self):
        assert INBOUND_TRUNK.field_names == ("name", "numbers", "auth_username", "auth_password")
        assert INBOUND_TRUNK.id_field == "sip_trunk_id"

    def test_outbound_has_transport(self):
        assert "transport" in OUTBOUND_TRUNK.field_names
        assert "transport" not in INBOUND_TRUNK.field_names

    def test_dispatch_fields(self):
        assert DISPATCH_RULE.field_names == ("name", "trunk_ids")
        assert DISPATCH_RULE.id_field == "sip_dispatch_rule_id"

    def test_field_names_exist_on_update_messages(self):
        for schema in (INBOUND_TRUNK, OUTBOUND_TRUNK, DISPATCH_RULE):
            known = schema.update_type.DESCRIPTOR.fields_by_name
            for name in schema.field_names:
                assert name in known, f"{schema.kind}: {name}"


@pytest.mark.unit
class TestBuildRequest:
    def test_update_request(self):
        mutation = MutationRequest(
            resource_id="ST_1",
            mode=Mode.UPDATE,
            patch={
                "name": Set("front-desk"),
                "numbers": SetList([]),
                "auth_username": ABSENT,
                "auth_password": ABSENT,
            },
        )
        request = INBOUND_TRUNK.build_request(mutation)

        assert isinstance(request, api.UpdateSIPInboundTrunkRequest)
        assert request.sip_trunk_id == "ST_1"
        assert request.WhichOneof("action") == "update"
        assert request.update.name == "front-desk"
        assert request.update.HasField("numbers")
        assert list(request.update.numbers.set) == []
        assert not request.update.HasField("auth_username")

    def test_update_request_with_transport(self):
        mutation = MutationRequest(
            resource_id="ST_2",
            mode=Mode.UPDATE,
            patch={"transport": Set(SIPTransport.Value("SIP_TRANSPORT_TLS"))},
        )
        request = OUTBOUND_TRUNK.build_request(mutation)

        assert request.update.HasField("transport")
        assert request.update.transport == SIPTransport.Value("SIP_TRANSPORT_TLS")

    def test_empty_patch_still_selects_update(self):
        mutation = MutationRequest(resource_id="SDR_1", mode=Mode.UPDATE, patch={"name": ABSENT, "trunk_ids": ABSENT})
        request = DISPATCH_RULE.build_request(mutation)

        assert request.WhichOneof("action") == "update"
        assert not request.update.HasField("trunk_ids")

    def test_replace_request(self):
        replacement = api.SIPDispatchRuleInfo(name="lobby", trunk_ids=["ST_1"])
        mutation = MutationRequest(resource_id="SDR_1", mode=Mode.REPLACE, replacement=replacement)
        request = DISPATCH_RULE.build_request(mutation)

        assert isinstance(request, api.UpdateSIPDispatchRuleRequest)
        assert request.sip_dispatch_rule_id == "SDR_1"
        assert request.WhichOneof("action") == "replace"
        assert request.replace.name == "lobby"
        assert request.replace.sip_dispatch_rule_id == ""
