"""Payload normalization — verified body in, one tagged Event out.

The platform posts ``application/x-www-form-urlencoded`` bodies with a
single ``payload`` field holding JSON. Classification uses a fixed
discriminator order so every payload lands in exactly one variant:

1. ``type == "dialog_submission"``                 -> DialogSubmission
2. ``actions`` carrying ``block_id``/``action_id``  -> BlockAction
3. ``type == "message_action"``                    -> MessageAction
4. ``callback_id`` + ``actions`` without block ids -> AttachmentAction
5. an options-load shape                           -> OptionsRequest
6. ``view_submission`` / ``view_closed`` / ``shortcut``

Anything else raises ``MalformedPayload``.
"""

import json
from collections.abc import Mapping
from typing import Any
from urllib.parse import parse_qs

from wren.errors import MalformedPayload
from wren.events import (
    AttachmentAction,
    BlockAction,
    DialogSubmission,
    Event,
    MessageAction,
    OptionsRequest,
    Shortcut,
    ViewClosed,
    ViewSubmission,
)

_FORM_TYPE = "application/x-www-form-urlencoded"

# Options-load ``type`` values and the ``within`` each one implies
_OPTIONS_WITHIN: dict[str, str] = {
    "block_suggestion": "block_actions",
    "dialog_suggestion": "dialog",
    "interactive_message": "interactive_message",
}


def parse_form(body: bytes, content_type: str | None = None) -> dict[str, str]:
    """Decode a URL-encoded body into a ``field -> first value`` dict.

    Raises:
        MalformedPayload: If the content type is not URL-encoded form data
            or the body is not valid UTF-8.
    """
    media_type = (content_type or _FORM_TYPE).split(";", 1)[0].strip().lower()
    if media_type != _FORM_TYPE:
        raise MalformedPayload(f"Unsupported content type {media_type!r}")
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedPayload("Body is not valid UTF-8") from exc
    parsed = parse_qs(text, keep_blank_values=True)
    return {key: values[0] for key, values in parsed.items() if values}


def decode_payload(form: Mapping[str, str]) -> dict[str, Any]:
    """Decode the JSON ``payload`` field of a parsed form."""
    raw = form.get("payload")
    if raw is None:
        raise MalformedPayload("Missing 'payload' field")
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise MalformedPayload(f"Payload is not valid JSON: {exc.msg}") from exc
    if not isinstance(payload, dict):
        raise MalformedPayload("Payload must be a JSON object")
    return payload


def normalize(body: bytes, content_type: str | None = None) -> Event:
    """Decode a verified request body and classify it."""
    return normalize_payload(decode_payload(parse_form(body, content_type)))


def normalize_payload(payload: dict[str, Any]) -> Event:
    """Classify an already-decoded payload into one Event variant."""
    payload_type = payload.get("type")
    actions = payload.get("actions")
    first_action = _first_action(actions)

    if payload_type == "dialog_submission":
        return DialogSubmission(
            payload=payload,
            callback_id=_str(payload.get("callback_id")),
            type="dialog_submission",
            within="dialog",
            response_url=_str(payload.get("response_url")),
        )

    if first_action is not None and ("block_id" in first_action or "action_id" in first_action):
        return BlockAction(
            payload=payload,
            callback_id=_str(_view(payload).get("callback_id")),
            block_id=_str(first_action.get("block_id")),
            action_id=_str(first_action.get("action_id")),
            type=_str(first_action.get("type")),
            within="block_actions",
            external_id=_str(_view(payload).get("external_id")),
            response_url=_str(payload.get("response_url")),
        )

    if payload_type == "message_action":
        return MessageAction(
            payload=payload,
            callback_id=_str(payload.get("callback_id")),
            type="message_action",
            response_url=_str(payload.get("response_url")),
        )

    if first_action is not None and "callback_id" in payload:
        return AttachmentAction(
            payload=payload,
            callback_id=_str(payload.get("callback_id")),
            type=_str(first_action.get("type")),
            within="interactive_message",
            unfurl=bool(payload.get("is_app_unfurl", False)),
            response_url=_str(payload.get("response_url")),
        )

    if actions is None and payload_type in _OPTIONS_WITHIN and _is_options_load(payload):
        return OptionsRequest(
            payload=payload,
            callback_id=_str(payload.get("callback_id")),
            block_id=_str(payload.get("block_id")),
            action_id=_str(payload.get("action_id")),
            type=payload_type,
            within=_OPTIONS_WITHIN[payload_type],
            unfurl=bool(payload.get("is_app_unfurl", False)),
            external_id=_str(_view(payload).get("external_id")),
        )

    if payload_type in ("view_submission", "view_closed"):
        view = _view(payload)
        if not view:
            raise MalformedPayload(f"{payload_type} payload has no 'view'")
        variant = ViewSubmission if payload_type == "view_submission" else ViewClosed
        return variant(
            payload=payload,
            callback_id=_str(view.get("callback_id")),
            type=payload_type,
            external_id=_str(view.get("external_id")),
            response_url=_first_response_url(payload),
        )

    if payload_type == "shortcut":
        return Shortcut(
            payload=payload,
            callback_id=_str(payload.get("callback_id")),
            type="shortcut",
        )

    raise MalformedPayload(f"Unrecognized interaction payload type {payload_type!r}")


def _first_action(actions: Any) -> dict[str, Any] | None:
    if actions is None:
        return None
    if not isinstance(actions, list) or not actions or not isinstance(actions[0], dict):
        raise MalformedPayload("'actions' must be a non-empty list of objects")
    return actions[0]


def _is_options_load(payload: dict[str, Any]) -> bool:
    """Options loads carry the typed-so-far ``value`` and no ``actions``."""
    if payload["type"] == "interactive_message":
        # Legacy attachment menus identify themselves by ``name``.
        return "name" in payload and "value" in payload
    return "value" in payload


def _view(payload: dict[str, Any]) -> dict[str, Any]:
    view = payload.get("view")
    return view if isinstance(view, dict) else {}


def _first_response_url(payload: dict[str, Any]) -> str | None:
    urls = payload.get("response_urls")
    if isinstance(urls, list) and urls and isinstance(urls[0], dict):
        return _str(urls[0].get("response_url"))
    return None


def _str(value: Any) -> str | None:
    return value if isinstance(value, str) else None
