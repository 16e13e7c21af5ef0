"""
Execution channels - run identical wp-cli commands locally or over SSH.

The channel is chosen once per run from settings and injected into every
component through the run context.

Usage:
    from wpexport.execution.channels import create_channel

    channel = create_channel(settings)
    result = channel.run(commands.post_type_list_public())
    if not result.succeeded:
        ...
"""

from wpexport.core.settings import ChannelKind, ExportSettings
from wpexport.execution.channels._base import BaseChannel, StubChannel
from wpexport.execution.channels._types import (
    SESSION_TERMINATION_MARKERS,
    Channel,
    ChannelCapabilities,
    ChannelResult,
    has_termination_marker,
)
from wpexport.execution.channels.local import LocalChannel
from wpexport.execution.channels.remote import RemoteChannel


def create_channel(settings: ExportSettings) -> BaseChannel:
    """Build the channel described by ``settings.channel``."""
    if settings.channel == ChannelKind.REMOTE:
        return RemoteChannel.from_settings(settings)
    return LocalChannel.from_settings(settings)


__all__ = [
    "BaseChannel",
    "Channel",
    "ChannelCapabilities",
    "ChannelResult",
    "LocalChannel",
    "RemoteChannel",
    "SESSION_TERMINATION_MARKERS",
    "StubChannel",
    "create_channel",
    "has_termination_marker",
]
