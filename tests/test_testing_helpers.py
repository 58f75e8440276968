"""Tests for wren.testing — body encoding and request signing helpers."""

from urllib.parse import parse_qs

from wren.testing import form_body, sign_request
from wren.verification import verify_request


class TestFormBody:
    def test_encodes_payload_field(self) -> None:
        body = form_body({"type": "shortcut"})
        assert parse_qs(body.decode()) == {"payload": ['{"type": "shortcut"}']}

    def test_raw_string_passed_through(self) -> None:
        body = form_body("{broken")
        assert parse_qs(body.decode()) == {"payload": ["{broken"]}


class TestSignRequest:
    def test_signature_verifies(self) -> None:
        body = form_body({"type": "shortcut"})
        headers = sign_request(body, "s3cret", timestamp=1_700_000_000)

        assert headers["x-slack-request-timestamp"] == "1700000000"
        verify_request(
            body,
            headers["x-slack-signature"],
            headers["x-slack-request-timestamp"],
            b"s3cret",
            now=1_700_000_000,
        )
