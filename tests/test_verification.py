"""Tests for wren.verification — HMAC signature and replay window."""

import logging

import pytest

from wren.errors import InvalidSignature, StaleRequest, VerificationError
from wren.verification import compute_signature, verify_request

SECRET = b"8f742231b10e8888abcd99yyyzzz85a5"
BODY = b"payload=%7B%22type%22%3A%22shortcut%22%7D"
NOW = 1_700_000_000


def _signed(body: bytes = BODY, ts: int = NOW, secret: bytes = SECRET) -> tuple[str, str]:
    return compute_signature(secret, ts, body), str(ts)


class TestComputeSignature:
    def test_known_vector(self) -> None:
        # Published example from the platform's request-signing guide.
        body = (
            b"token=xyzz0WbapA4vBCDEFasx0q6G&team_id=T1DC2JH3J&team_domain=testteamnow"
            b"&channel_id=G8PSS9T3V&channel_name=foobar&user_id=U2CERLKJA&user_name=roadrunner"
            b"&command=%2Fwebhook-collect&text=&response_url=https%3A%2F%2Fhooks.slack.com"
            b"%2Fcommands%2FT1DC2JH3J%2F397700885554%2F96rGlfmibIGlgcZRskXaIFfN"
            b"&trigger_id=398738663015.47445629121.803a0bc887a14d10d2c447fce8b6703c"
        )
        signature = compute_signature(SECRET, 1531420618, body)
        assert signature == "v0=a2114d57b48eac39b9ad189dd8316235a7b4a8d21a10bd27519666489c69b503"

    def test_prefix(self) -> None:
        assert compute_signature(b"abc", 1, b"").startswith("v0=")


class TestVerifyRequest:
    def test_valid_request_passes(self) -> None:
        signature, ts = _signed()
        assert verify_request(BODY, signature, ts, SECRET, now=NOW) is None

    def test_within_window_passes(self) -> None:
        signature, ts = _signed(ts=NOW - 299)
        verify_request(BODY, signature, ts, SECRET, now=NOW)

    def test_future_timestamp_within_window_passes(self) -> None:
        signature, ts = _signed(ts=NOW + 60)
        verify_request(BODY, signature, ts, SECRET, now=NOW)

    def test_single_bit_body_mutation_rejected(self) -> None:
        signature, ts = _signed()
        mutated = bytes([BODY[0] ^ 0x01]) + BODY[1:]
        with pytest.raises(InvalidSignature):
            verify_request(mutated, signature, ts, SECRET, now=NOW)

    def test_single_bit_signature_mutation_rejected(self) -> None:
        signature, ts = _signed()
        last = signature[-1]
        mutated = signature[:-1] + chr(ord(last) ^ 0x01)
        with pytest.raises(InvalidSignature):
            verify_request(BODY, mutated, ts, SECRET, now=NOW)

    def test_wrong_secret_rejected(self) -> None:
        signature, ts = _signed(secret=b"other-secret")
        with pytest.raises(InvalidSignature):
            verify_request(BODY, signature, ts, SECRET, now=NOW)

    def test_tampered_timestamp_rejected(self) -> None:
        signature, _ = _signed()
        with pytest.raises(InvalidSignature):
            verify_request(BODY, signature, str(NOW + 1), SECRET, now=NOW)

    def test_stale_request_rejected_even_when_correctly_signed(self) -> None:
        signature, ts = _signed(ts=NOW - 400, secret=b"abc")
        with pytest.raises(StaleRequest):
            verify_request(BODY, signature, ts, b"abc", now=NOW)

    def test_stale_takes_precedence_over_bad_signature(self) -> None:
        with pytest.raises(StaleRequest):
            verify_request(BODY, "v0=deadbeef", str(NOW - 1000), SECRET, now=NOW)

    def test_custom_tolerance(self) -> None:
        signature, ts = _signed(ts=NOW - 30)
        with pytest.raises(StaleRequest):
            verify_request(BODY, signature, ts, SECRET, tolerance=10, now=NOW)

    @pytest.mark.parametrize("timestamp", [None, "", "not-a-number", "12.5"])
    def test_missing_or_unparseable_timestamp_is_stale(self, timestamp: str | None) -> None:
        with pytest.raises(StaleRequest):
            verify_request(BODY, "v0=abc", timestamp, SECRET, now=NOW)

    def test_missing_signature_rejected(self) -> None:
        with pytest.raises(InvalidSignature):
            verify_request(BODY, None, str(NOW), SECRET, now=NOW)

    def test_rejections_are_401(self) -> None:
        with pytest.raises(VerificationError) as exc_info:
            verify_request(BODY, None, str(NOW), SECRET, now=NOW)
        assert exc_info.value.status == 401

    def test_rejection_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="wren.verification"):
            with pytest.raises(InvalidSignature):
                verify_request(BODY, "v0=00", str(NOW), SECRET, now=NOW)
        assert "invalid signature" in caplog.text
