"""
Channel registry

Explicit list of (channel, handler) bindings built once at startup and passed
to the EventSubscriberManager.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, List, Optional

from uniguide.infrastructure.exceptions import ConfigurationError

EventHandler = Callable[[Any], Awaitable[None]]

STUDENT_CREATED_CHANNEL = "prediction:student_created"
TRANSCRIPT_CREATED_CHANNEL = "transcript:created"
TRANSCRIPT_UPDATED_CHANNEL = "transcript:updated"
OCR_FILE_CREATED_CHANNEL = "ocr:file_created"


@dataclass(frozen=True)
class ChannelBinding:
    channel: str
    handler: EventHandler


def validate_bindings(bindings: Iterable[ChannelBinding]) -> List[ChannelBinding]:
    """Reject empty channel names and channels bound twice."""
    seen = set()
    result = []
    for binding in bindings:
        if not binding.channel:
            raise ConfigurationError("Channel name cannot be empty")
        if binding.channel in seen:
            raise ConfigurationError(f"Channel '{binding.channel}' is bound more than once")
        seen.add(binding.channel)
        result.append(binding)
    return result


def build_channel_bindings(
    student_listener: Any,
    transcript_listener: Any,
    ocr_listener: Any,
    extra: Optional[Iterable[ChannelBinding]] = None,
) -> List[ChannelBinding]:
    """Bindings for every inbound channel of the prediction backend."""
    bindings = [
        ChannelBinding(STUDENT_CREATED_CHANNEL, student_listener.handle_student_created),
        ChannelBinding(TRANSCRIPT_CREATED_CHANNEL, transcript_listener.handle_transcript_changed),
        ChannelBinding(TRANSCRIPT_UPDATED_CHANNEL, transcript_listener.handle_transcript_changed),
        ChannelBinding(OCR_FILE_CREATED_CHANNEL, ocr_listener.handle_file_created),
    ]
    bindings.extend(extra or [])
    return validate_bindings(bindings)
