"""Renderings of a quality report for CI steps and notifications."""

from eap_gate.reporting.notification import DEFAULT_CHANNEL, build_chat_payload
from eap_gate.reporting.renderers import (
    build_json_report,
    escape_service_value,
    exit_code_for,
    render_json_report,
    render_service_messages,
    render_text_report,
)

__all__ = [
    "DEFAULT_CHANNEL",
    "build_chat_payload",
    "build_json_report",
    "escape_service_value",
    "exit_code_for",
    "render_json_report",
    "render_service_messages",
    "render_text_report",
]
