"""Message transport collaborator.

The host chat client owns real delivery; this module provides the seam plus a
directory outbox that stands in for it from the command line.
"""

from __future__ import annotations

from pathlib import Path
import re
import shutil
from typing import Protocol

from ..models.datatypes import DeliveryReceipt


class MessageTransport(Protocol):
    """Sends a voice payload into a conversation; fire-and-forget."""

    def send_voice(self, payload_path: Path, conversation: str) -> DeliveryReceipt:
        """Hand `payload_path` to the conversation identified by `conversation`."""


class OutboxTransport:
    """Copy voice payloads into `<root>/<conversation>/`."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def send_voice(self, payload_path: Path, conversation: str) -> DeliveryReceipt:
        target_dir = self.root / _safe_segment(conversation)
        target_dir.mkdir(parents=True, exist_ok=True)
        target = target_dir / payload_path.name
        shutil.copyfile(payload_path, target)
        return DeliveryReceipt(
            conversation=conversation,
            payload_path=target,
            source_audio_path=payload_path,
        )


def _safe_segment(conversation: str) -> str:
    # Conversation handles become one directory level, never a path.
    cleaned = re.sub(r"[^A-Za-z0-9._-]+", "_", conversation.strip()).strip("._")
    return cleaned or "conversation"
