"""Host login pipeline integration."""

from .hook import (
    AnotherPassModule,
    LoginAttempt,
    LoginVerdict,
    StaticUserDirectory,
    UserDirectory,
)

__all__ = [
    "AnotherPassModule",
    "LoginAttempt",
    "LoginVerdict",
    "StaticUserDirectory",
    "UserDirectory",
]
