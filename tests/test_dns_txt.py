"""Tests for DNS TXT room discovery."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import dns.resolver
import pytest

from breakoutroom import dns_txt
from breakoutroom.dns_txt import (
    breakout_room_key,
    did_key,
    keybase_key,
    load,
    resolve_txt,
    value_from_domain,
    value_from_records,
)


class TestValueFromRecords:

    def test_finds_label(self):
        records = [["v=spf1 -all"], ["key=abc123"]]
        assert value_from_records(records, "key") == "abc123"

    def test_value_may_contain_equals(self):
        assert value_from_records([["key=YWJj=="]], "key") == "YWJj=="

    def test_split_strings_are_joined(self):
        assert value_from_records([["key=abc", "def"]], "key") == "abcdef"

    def test_last_match_wins(self):
        assert value_from_records([["key=first"], ["key=second"]], "key") == "second"

    def test_missing_label(self):
        assert value_from_records([["did=did:plc:x"], ["keyless"]], "key") is None


class TestResolveTxt:

    @pytest.mark.asyncio
    async def test_decodes_record_strings(self):
        answer = [SimpleNamespace(strings=(b"key=abc", b"def")), SimpleNamespace(strings=(b"other",))]

        with patch("dns.asyncresolver.resolve", new_callable=AsyncMock, return_value=answer) as mock_resolve:
            records = await resolve_txt("_breakoutroom.example.com")

        assert records == [["key=abc", "def"], ["other"]]
        assert mock_resolve.call_args.args[:2] == ("_breakoutroom.example.com", "TXT")


class TestValueFromDomain:

    @pytest.mark.asyncio
    async def test_found(self):
        with patch.object(dns_txt, "resolve_txt", AsyncMock(return_value=[["key=abc"]])):
            assert await value_from_domain("_breakoutroom.example.com", "key") == "abc"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [dns.resolver.NXDOMAIN, dns.resolver.NoAnswer])
    async def test_no_records_returns_none(self, error):
        with patch.object(dns_txt, "resolve_txt", AsyncMock(side_effect=error())):
            assert await value_from_domain("example.com", "key") is None

    @pytest.mark.asyncio
    async def test_other_failures_propagate(self):
        with patch.object(dns_txt, "resolve_txt", AsyncMock(side_effect=dns.resolver.NoNameservers())):
            with pytest.raises(dns.resolver.NoNameservers):
                await value_from_domain("example.com", "key")


class TestLoad:

    @pytest.mark.asyncio
    async def test_prefixes_proto(self):
        with patch.object(dns_txt, "value_from_domain", AsyncMock(return_value="abc")) as lookup:
            await load("example.com", "_breakoutroom", "key")

        lookup.assert_awaited_once_with("_breakoutroom.example.com", "key")

    @pytest.mark.asyncio
    async def test_does_not_double_prefix(self):
        with patch.object(dns_txt, "value_from_domain", AsyncMock(return_value="abc")) as lookup:
            await load("_breakoutroom.example.com", "_breakoutroom", "key")

        lookup.assert_awaited_once_with("_breakoutroom.example.com", "key")

    @pytest.mark.asyncio
    async def test_named_lookups(self):
        with patch.object(dns_txt, "value_from_domain", AsyncMock(return_value="v")) as lookup:
            await breakout_room_key("example.com")
            await did_key("example.com")
            await keybase_key("example.com")

        assert [c.args for c in lookup.call_args_list] == [
            ("_breakoutroom.example.com", "key"),
            ("_atproto.example.com", "did"),
            ("example.com", "keybase-site-verification"),
        ]
