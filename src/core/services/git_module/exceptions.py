from typing import List, Optional

from exception import CLIException


class GitExceptions(CLIException):
    """
    Базовое исключение для работы с локальным git-репозиторием.

    Дополнительно хранит логи (steps), накопленные во время операции.
    """

    def __init__(
        self,
        *args,
        description: str = "Something happend when work with Git",
        logs: Optional[List[str]] = None,
    ) -> None:
        super().__init__(*args, description=description)
        self.logs: List[str] = logs or []


class GitLocalPathError(GitExceptions):
    """
    Путь не существует или не является git-репозиторием.
    """

    def __init__(
        self,
        path: str,
        logs: Optional[List[str]] = None,
        *args,
    ) -> None:
        description = f"Error to use local repository path {path}"
        super().__init__(*args, description=description, logs=logs)
        self.path = path


class GitRemoteError(GitExceptions):
    """
    Remote не найден или его URL не указывает на GitHub-репозиторий.
    """

    def __init__(
        self,
        remote: str,
        url: Optional[str] = None,
        logs: Optional[List[str]] = None,
        *args,
    ) -> None:
        if url:
            description = f"Remote {remote} ({url}) is not a GitHub repository"
        else:
            description = f"Remote {remote} is not configured"
        super().__init__(*args, description=description, logs=logs)
        self.remote = remote
        self.url = url
