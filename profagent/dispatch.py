"""Profile acquisition and rendering for one request.

The dispatcher resolves a profile kind, fetches its samples from a
:class:`~profagent.runtime.sampler.Sampler` (collecting CPU samples for a
duration first), and renders the requested view. Failures are raised as
:class:`~profagent.errors.ProfileError` subclasses and never retried; logging
them is left to the caller.
"""

from __future__ import annotations

from typing import Any, Optional

from profagent.config import DEFAULT_CONFIG, AgentConfig
from profagent.errors import ProfileError, ProfileNotFound, ProfileParseError, ProfileWriteError
from profagent.logging import get_logger
from profagent.report.views import render_view
from profagent.runtime.folded import dump_folded, parse_folded
from profagent.runtime.sampler import Sampler
from profagent.types.base import ProfileKind, ViewMode
from profagent.types.dto import Profile

logger = get_logger(__name__)

#: Row limit used when a request carries no usable limit.
DEFAULT_LIMIT = 100


def resolve_limit(limit: Any) -> int:
    """Return ``limit`` when it is a positive integer, otherwise DEFAULT_LIMIT."""
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        return DEFAULT_LIMIT
    return limit


class ProfileDispatcher:
    """Turn profile requests into report text."""

    def __init__(self, sampler: Sampler, config: AgentConfig = DEFAULT_CONFIG):
        self.sampler = sampler
        self.config = config

    def acquire(self, kind: str, duration: Optional[float] = None) -> Profile:
        """Fetch the profile of ``kind``.

        Args:
            kind: Profile kind name.
            duration: CPU sampling time in seconds; ignored for other kinds.

        Raises:
            ProfileNotFound: If ``kind`` is not a known profile kind.
            ProfileWriteError: If the sampler fails.
            ProfileParseError: If the CPU profile cannot be decoded.
        """
        try:
            profile_kind = ProfileKind.from_string(kind)
        except ValueError:
            raise ProfileNotFound(str(kind)) from None

        if profile_kind is not ProfileKind.CPU:
            try:
                samples = self.sampler.current_samples(profile_kind)
            except Exception as exc:
                raise ProfileWriteError(
                    profile_kind.value, f"failed to write profile: {exc}"
                ) from exc
            return Profile(kind=profile_kind, samples=tuple(samples))

        seconds = self.config.default_duration if duration is None else duration
        logger.debug(f"Collecting CPU profile for {seconds}s")
        try:
            data = self.sampler.cpu_profile(seconds)
        except ProfileError:
            raise
        except Exception as exc:
            raise ProfileWriteError(
                profile_kind.value, f"failed to write profile: {exc}"
            ) from exc

        try:
            return parse_folded(data, kind=profile_kind)
        except ValueError as exc:
            raise ProfileParseError(
                profile_kind.value, f"failed to parse profile: {exc}"
            ) from exc

    def render(
        self,
        kind: str,
        view: Any = ViewMode.FLAT,
        limit: Any = None,
        duration: Optional[float] = None,
    ) -> str:
        """Acquire ``kind`` and render it in ``view`` with at most ``limit`` rows."""
        profile = self.acquire(kind, duration)
        return render_view(
            profile,
            view,
            resolve_limit(limit),
            inclusive_cumulative=self.config.inclusive_cumulative,
        )

    def dump(self, kind: str, duration: Optional[float] = None) -> str:
        """Acquire ``kind`` and return every sample with its full stack.

        The text is the folded-stack serialization of the profile, so it can
        be saved and rendered later with ``profagent render``.
        """
        profile = self.acquire(kind, duration)
        return dump_folded(profile).decode("utf-8")
