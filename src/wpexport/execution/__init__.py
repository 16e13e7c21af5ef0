"""
Execution layer: wp-cli command construction and the channels that run them.
"""

from wpexport.execution import commands
from wpexport.execution.channels import BaseChannel, ChannelResult, StubChannel, create_channel

__all__ = ["BaseChannel", "ChannelResult", "StubChannel", "commands", "create_channel"]
