"""
Ritual Weave

Household rituals, their runs, the attention items that block them and the
automations bound to their lifecycle.
"""

import importlib.metadata

__version__ = importlib.metadata.version("ritual-weave")

from .api import create_app
from .state import AppState
from .triggers import NextTrigger, build_next_triggers

__all__ = [
    "AppState",
    "NextTrigger",
    "build_next_triggers",
    "create_app",
]
