from typing import List, Optional

import click


class CLIException(Exception):
    def __init__(self, *args, description: str = "Something happend..."):
        click.echo(description, err=True)
        super().__init__(description, *args)
        self.description = description


class ConfigurationError(CLIException):
    """
    Ошибка сборки топологии пайплайна.

    Бросается до того, как что-либо уйдёт во внешний движок:
    отсутствующий параметр, ссылка на несуществующий артефакт,
    повторная метка окружения.
    """

    def __init__(
        self,
        description: str = "Invalid pipeline configuration",
        logs: Optional[List[str]] = None,
        *args,
    ) -> None:
        super().__init__(*args, description=description)
        self.logs: List[str] = logs or []
