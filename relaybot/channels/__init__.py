"""
Channel ports: where messages come from and where replies go
"""

from .base import ChannelPort
from .console import ConsoleChannel
from .slack import SlackChannel

__all__ = ['ChannelPort', 'ConsoleChannel', 'SlackChannel']
