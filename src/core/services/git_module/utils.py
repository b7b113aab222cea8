import re
from pathlib import Path
from typing import Optional, Tuple, Union


PathLike = Union[str, Path]

_GITHUB_URL = re.compile(
    r"""^(?:
        (?:https?|ssh|git)://(?:[^@/]+@)?github\.com(?::\d+)?/   # https://, ssh://git@
        |
        [^@/]+@github\.com:                                        # git@github.com:
    )
    (?P<owner>[A-Za-z0-9_.-]+)/(?P<repo>[A-Za-z0-9_.-]+?)
    (?:\.git)?/?$""",
    re.VERBOSE,
)


def parse_remote_url(url: str) -> Optional[Tuple[str, str]]:
    """
    Разбирает URL remote'а GitHub в пару (owner, repo).

    Поддерживаются:
    - https://github.com/owner/repo(.git)
    - git@github.com:owner/repo(.git)
    - ssh://git@github.com/owner/repo(.git)

    Для всего остального возвращает None.
    """
    match = _GITHUB_URL.match(url.strip())
    if match is None:
        return None
    return match.group("owner"), match.group("repo")
