"""Interaction payload builders shaped like the platform's own."""

from typing import Any

RESPONSE_URL = "https://hooks.example.com/actions/T0001/1234/abcd"


def block_actions_payload(**action: Any) -> dict[str, Any]:
    first = {"block_id": "order_block", "action_id": "new_order", "type": "button", "value": "1"}
    first.update(action)
    return {
        "type": "block_actions",
        "user": {"id": "U0001"},
        "actions": [first],
        "response_url": RESPONSE_URL,
    }


def attachment_action_payload(callback_id: str = "order_form", **extra: Any) -> dict[str, Any]:
    payload = {
        "type": "interactive_message",
        "callback_id": callback_id,
        "actions": [{"name": "approve", "type": "button", "value": "yes"}],
        "response_url": RESPONSE_URL,
    }
    payload.update(extra)
    return payload


def dialog_submission_payload(callback_id: str = "ticket_dialog") -> dict[str, Any]:
    return {
        "type": "dialog_submission",
        "callback_id": callback_id,
        "submission": {"title": "Broken build"},
        "response_url": RESPONSE_URL,
    }


def message_action_payload(callback_id: str = "save_message") -> dict[str, Any]:
    return {
        "type": "message_action",
        "callback_id": callback_id,
        "message": {"text": "hello"},
        "response_url": RESPONSE_URL,
    }


def block_suggestion_payload(action_id: str = "city_select") -> dict[str, Any]:
    return {
        "type": "block_suggestion",
        "block_id": "city_block",
        "action_id": action_id,
        "value": "Ber",
    }


def view_submission_payload(callback_id: str = "order_modal") -> dict[str, Any]:
    return {
        "type": "view_submission",
        "view": {"callback_id": callback_id, "external_id": "order-42"},
        "response_urls": [{"response_url": RESPONSE_URL}],
    }


def shortcut_payload(callback_id: str = "open_ticket") -> dict[str, Any]:
    return {"type": "shortcut", "callback_id": callback_id, "trigger_id": "123.456"}
