"""Testes da validação de assinatura dos webhooks (Cal.com e Stripe)."""

from __future__ import annotations

import pytest

from api.connectors.webhooks import (
    CAL_SIGNATURE_HEADER,
    STRIPE_SIGNATURE_HEADER,
    verify_cal_signature,
    verify_hmac_hex,
    verify_stripe_signature,
)
from tests.fakes.builders import CAL_SECRET, STRIPE_SECRET, sign_cal, sign_stripe

RAW = b'{"triggerEvent":"BOOKING_CREATED"}'
NOW = 1_773_144_000


class TestVerifyHmacHex:
    """Comparação HMAC hex com rotação de secrets."""

    def test_valid_signature(self) -> None:
        assert verify_hmac_hex(RAW, sign_cal(RAW), [CAL_SECRET]).valid is True

    def test_accepts_sha256_prefix_and_uppercase(self) -> None:
        signature = "sha256=" + sign_cal(RAW).upper()
        assert verify_hmac_hex(RAW, signature, CAL_SECRET).valid is True

    def test_any_rotated_secret_matches(self) -> None:
        """Assinatura com o secret novo vale durante a rotação."""
        signature = sign_cal(RAW, "new-secret")
        result = verify_hmac_hex(RAW, signature, ["old-secret", "new-secret"])
        assert result.valid is True

    def test_mismatch(self) -> None:
        result = verify_hmac_hex(RAW, sign_cal(RAW, "other"), [CAL_SECRET])
        assert result.valid is False
        assert result.error == "signature_mismatch"

    def test_tampered_body_is_rejected(self) -> None:
        result = verify_hmac_hex(RAW + b" ", sign_cal(RAW), [CAL_SECRET])
        assert result.error == "signature_mismatch"

    def test_missing_secret(self) -> None:
        result = verify_hmac_hex(RAW, sign_cal(RAW), [])
        assert result.error == "missing_secret"

    def test_empty_signature(self) -> None:
        result = verify_hmac_hex(RAW, "sha256=", [CAL_SECRET])
        assert result.error == "missing_signature"


class TestVerifyCalSignature:
    def test_header_lookup_is_case_insensitive(self) -> None:
        headers = {"X-Cal-Signature-256": sign_cal(RAW)}
        assert verify_cal_signature(RAW, headers, [CAL_SECRET]).valid is True

    def test_missing_header(self) -> None:
        result = verify_cal_signature(RAW, {}, [CAL_SECRET])
        assert result.error == "missing_signature"

    def test_missing_secret_checked_before_header(self) -> None:
        result = verify_cal_signature(RAW, {CAL_SIGNATURE_HEADER: "abc"}, ())
        assert result.error == "missing_secret"


class TestVerifyStripeSignature:
    """Header `t=...,v1=...` com janela de frescor."""

    def test_valid_signature(self) -> None:
        headers = {STRIPE_SIGNATURE_HEADER: sign_stripe(RAW, NOW)}
        result = verify_stripe_signature(RAW, headers, [STRIPE_SECRET], now=NOW + 10)
        assert result.valid is True

    def test_any_v1_candidate_matches(self) -> None:
        valid = sign_stripe(RAW, NOW).split("v1=")[1]
        header = f"t={NOW},v1={'0' * 64},v1={valid}"
        result = verify_stripe_signature(
            RAW, {STRIPE_SIGNATURE_HEADER: header}, [STRIPE_SECRET], now=NOW
        )
        assert result.valid is True

    def test_timestamp_outside_tolerance(self) -> None:
        headers = {STRIPE_SIGNATURE_HEADER: sign_stripe(RAW, NOW)}
        result = verify_stripe_signature(RAW, headers, [STRIPE_SECRET], now=NOW + 301)
        assert result.valid is False
        assert result.error == "timestamp_out_of_tolerance"

    def test_zero_tolerance_disables_freshness_check(self) -> None:
        headers = {STRIPE_SIGNATURE_HEADER: sign_stripe(RAW, NOW)}
        result = verify_stripe_signature(
            RAW, headers, [STRIPE_SECRET], tolerance_seconds=0, now=NOW + 86_400
        )
        assert result.valid is True

    def test_signature_checked_over_timestamp_and_body(self) -> None:
        """Trocar o `t` invalida a assinatura."""
        digest = sign_stripe(RAW, NOW).split("v1=")[1]
        header = f"t={NOW + 1},v1={digest}"
        result = verify_stripe_signature(
            RAW, {STRIPE_SIGNATURE_HEADER: header}, [STRIPE_SECRET], now=NOW
        )
        assert result.error == "signature_mismatch"

    @pytest.mark.parametrize(
        "header",
        ["v1=abc", f"t={NOW}", "t=notanumber,v1=abc", "garbage"],
    )
    def test_malformed_header(self, header: str) -> None:
        result = verify_stripe_signature(
            RAW, {STRIPE_SIGNATURE_HEADER: header}, [STRIPE_SECRET], now=NOW
        )
        assert result.error == "malformed_signature"

    def test_missing_header(self) -> None:
        result = verify_stripe_signature(RAW, {}, [STRIPE_SECRET], now=NOW)
        assert result.error == "missing_signature"

    def test_missing_secret(self) -> None:
        headers = {STRIPE_SIGNATURE_HEADER: sign_stripe(RAW, NOW)}
        result = verify_stripe_signature(RAW, headers, None, now=NOW)
        assert result.error == "missing_secret"
