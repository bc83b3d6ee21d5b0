"""profagent: runtime profiles of a Python process, served as text reports.

A sampler collects raw profiles (heap, threads, thread creation, lock
contention, allocations, CPU); the report engine folds their samples per
stack location and renders flat, cumulative or call-graph views. The tool
server exposes both to remote callers over JSON-RPC.

Example:
    from profagent import ProfileDispatcher, default_sampler

    dispatcher = ProfileDispatcher(default_sampler())
    print(dispatcher.render("goroutine", view="graph", limit=20))
"""

from __future__ import annotations

from profagent import cli, logging
from profagent._version import __version__
from profagent.config import DEFAULT_CONFIG, AgentConfig, load_config
from profagent.dispatch import ProfileDispatcher
from profagent.errors import (
    ProfileError,
    ProfileNotFound,
    ProfileParseError,
    ProfileWriteError,
)
from profagent.runtime.sampler import RuntimeSampler, Sampler, default_sampler
from profagent.server.server import ProfileServer
from profagent.types import Frame, Profile, ProfileKind, Sample, ViewMode

__all__ = [
    # Version
    "__version__",
    # Types
    "Frame",
    "Sample",
    "Profile",
    "ProfileKind",
    "ViewMode",
    # Configuration
    "AgentConfig",
    "DEFAULT_CONFIG",
    "load_config",
    # Acquisition and dispatch
    "Sampler",
    "RuntimeSampler",
    "default_sampler",
    "ProfileDispatcher",
    "ProfileServer",
    # Errors
    "ProfileError",
    "ProfileNotFound",
    "ProfileParseError",
    "ProfileWriteError",
    # Utilities
    "cli",
    "logging",
]
