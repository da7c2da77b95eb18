"""Tests for profile normalization and user id derivation."""

from __future__ import annotations

from typing import Callable

from oauthbridge.models import ProviderDescriptor
from oauthbridge.protocol.profile import derive_user_id, normalize_profile


class TestDeriveUserId:
    def test_literal_id_is_stringified(self) -> None:
        assert derive_user_id({"id": 42}, {}) == "42"

    def test_mapped_field(self) -> None:
        assert derive_user_id({"sub": "abc"}, {"id": "sub"}) == "abc"

    def test_neither_field_gives_none(self) -> None:
        assert derive_user_id({"name": "Ann"}, {"id": "sub"}) is None

    def test_no_mapping_and_no_id(self) -> None:
        assert derive_user_id({"sub": "abc"}, {}) is None

    def test_literal_id_wins_over_mapping(self) -> None:
        assert derive_user_id({"id": "lit", "sub": "mapped"}, {"id": "sub"}) == "lit"

    def test_null_id_falls_back_to_mapping(self) -> None:
        assert derive_user_id({"id": None, "sub": 7}, {"id": "sub"}) == "7"

    def test_null_mapped_value_gives_none(self) -> None:
        assert derive_user_id({"sub": None}, {"id": "sub"}) is None

    def test_zero_id_is_kept(self) -> None:
        assert derive_user_id({"id": 0}, {}) == "0"

    def test_empty_mapped_value_gives_none(self) -> None:
        assert derive_user_id({"sub": ""}, {"id": "sub"}) is None

    def test_empty_literal_id_falls_back_to_mapping(self) -> None:
        assert derive_user_id({"id": "", "sub": "u9"}, {"id": "sub"}) == "u9"

    def test_both_empty_gives_none(self) -> None:
        assert derive_user_id({"id": "", "sub": ""}, {"id": "sub"}) is None

    def test_boolean_id_renders_like_json(self) -> None:
        assert derive_user_id({"id": True}, {}) == "true"

    def test_integral_float_id_has_no_fraction(self) -> None:
        assert derive_user_id({"id": 42.0}, {}) == "42"
        assert derive_user_id({"uid": 1.5}, {"id": "uid"}) == "1.5"


class TestNormalizeProfile:
    def test_stamps_provider_and_id(self, descriptor: ProviderDescriptor) -> None:
        profile = normalize_profile({"sub": "u9", "email": "u9@acme.test"}, descriptor)
        assert profile.provider == "acme"
        assert profile.id == "u9"
        assert profile.to_dict() == {
            "provider": "acme",
            "id": "u9",
            "sub": "u9",
            "email": "u9@acme.test",
        }

    def test_absent_id_is_not_empty_string(self, descriptor: ProviderDescriptor) -> None:
        profile = normalize_profile({"name": "Ann"}, descriptor)
        assert profile.id is None
        assert "id" not in profile.to_dict()
        assert profile.get("name") == "Ann"

    def test_payload_provider_field_is_overwritten(self, descriptor: ProviderDescriptor) -> None:
        profile = normalize_profile({"sub": "x", "provider": "spoofed"}, descriptor)
        assert profile.provider == "acme"

    def test_payload_is_not_mutated(self, descriptor: ProviderDescriptor) -> None:
        payload = {"id": 42}
        normalize_profile(payload, descriptor)
        assert payload == {"id": 42}

    def test_empty_id_field_is_not_an_id(self, descriptor: ProviderDescriptor) -> None:
        profile = normalize_profile({"sub": ""}, descriptor)
        assert profile.id is None
        assert "id" not in profile.to_dict()

    def test_literal_numeric_id(self, make_descriptor: Callable[..., ProviderDescriptor]) -> None:
        descriptor = make_descriptor(mapping={})
        profile = normalize_profile({"id": 42, "login": "octocat"}, descriptor)
        assert profile.id == "42"
        assert profile.get("login") == "octocat"
