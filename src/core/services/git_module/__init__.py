from .core import GitRemoteResolver
from .models import RemoteCoordinates
from .utils import parse_remote_url

from .exceptions import (
    GitExceptions,
    GitLocalPathError,
    GitRemoteError,
)

__all__ = [
    "GitRemoteResolver",
    "RemoteCoordinates",
    "parse_remote_url",
    "GitExceptions",
    "GitLocalPathError",
    "GitRemoteError",
]
