from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional


@dataclass
class RemoteCoordinates:
    """
    Координаты GitHub-репозитория, прочитанные из локального клона.

    repo_path — корень рабочей копии;
    owner     — владелец (пользователь или организация);
    repo      — имя репозитория без .git;
    branch    — текущая ветка, None для detached HEAD;
    logs      — текстовые логи шагов.
    """

    repo_path: Path
    owner: str
    repo: str
    branch: Optional[str]
    logs: List[str]
