from git import (
    Repo as GitRepo,
    InvalidGitRepositoryError,
    NoSuchPathError,
)

from pathlib import Path
from typing import List

from .models import RemoteCoordinates
from .utils import parse_remote_url, PathLike
from .exceptions import GitLocalPathError, GitRemoteError


class GitRemoteResolver:
    """
    Определяет координаты source-репозитория по локальной рабочей копии,
    чтобы не прописывать owner/repo/branch руками.

    Ничего не клонирует и не ходит в сеть: читает только .git/config и HEAD.
    """

    def __init__(self, default_remote: str = "origin") -> None:
        self.default_remote = default_remote

    def resolve(self, path: PathLike, remote: str | None = None) -> RemoteCoordinates:
        """
        :param path:   Путь до рабочей копии (или любой вложенной папки).
        :param remote: Имя remote'а, по умолчанию origin.
        :raises GitLocalPathError: путь не существует или это не git-репозиторий.
        :raises GitRemoteError:    remote не найден или указывает не на GitHub.
        """
        if remote is None:
            remote = self.default_remote

        logs: List[str] = []
        repo_path = Path(path)
        logs.append(f"Читаем git-репозиторий: {repo_path}")

        if not repo_path.exists():
            logs.append("Ошибка: указанный путь не существует.")
            raise GitLocalPathError(path=str(repo_path), logs=logs)

        try:
            repo_obj = GitRepo(repo_path, search_parent_directories=True)
        except (InvalidGitRepositoryError, NoSuchPathError):
            logs.append("GitPython: путь не является git-репозиторием.")
            raise GitLocalPathError(path=str(repo_path), logs=logs)

        try:
            names = [r.name for r in repo_obj.remotes]
            if remote not in names:
                logs.append(f"Remote {remote} не найден. Есть: {', '.join(names) or '-'}")
                raise GitRemoteError(remote=remote, logs=logs)

            url = repo_obj.remotes[remote].url
            logs.append(f"Remote {remote}: {url}")
            parsed = parse_remote_url(url)
            if parsed is None:
                raise GitRemoteError(remote=remote, url=url, logs=logs)
            owner, repo_name = parsed

            if repo_obj.head.is_detached:
                branch = None
                logs.append("HEAD в состоянии detached — ветку нужно указать явно.")
            else:
                branch = repo_obj.active_branch.name
                logs.append(f"Текущая ветка: {branch}")

            root = Path(repo_obj.working_tree_dir or repo_path)
        finally:
            repo_obj.close()

        return RemoteCoordinates(
            repo_path=root,
            owner=owner,
            repo=repo_name,
            branch=branch,
            logs=logs,
        )
