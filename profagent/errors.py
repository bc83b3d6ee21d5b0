"""Exceptions raised while acquiring and rendering profiles.

Every failure on the render path is a :class:`ProfileError` carrying the
profile kind it concerns. Nothing here is retried; the tool server turns the
error into a single error-flagged response.
"""

from __future__ import annotations

from typing import Union


class ProfileError(Exception):
    """A profile could not be produced.

    Attributes:
        kind: Name of the requested profile kind, as given by the caller.
        cause: Underlying error or message.
    """

    def __init__(self, kind: str, cause: Union[BaseException, str]):
        self.kind = kind
        self.cause = cause
        super().__init__(f"profile error ({kind}): {cause}")


class ProfileNotFound(ProfileError):
    """The requested kind is not one of the known profile kinds."""

    def __init__(self, kind: str):
        super().__init__(kind, "profile not found")


class ProfileWriteError(ProfileError):
    """The sampler failed to collect or serialize the requested data."""


class ProfileParseError(ProfileError):
    """Serialized profile data could not be decoded."""


class SamplerBusy(RuntimeError):
    """A CPU profile is already being collected."""
