from typing import Any, Dict, Iterable, List, Set, Tuple

from exception import ConfigurationError
from model import Action, ArtifactPath, Stage


def _collect_paths(value: Any) -> Iterable[str]:
    if isinstance(value, ArtifactPath):
        yield value.artifact
    elif isinstance(value, dict):
        for key, item in value.items():
            if key == "input" and isinstance(item, str):
                yield item
            else:
                yield from _collect_paths(item)
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield from _collect_paths(item)


def referenced_artifacts(action: Action) -> List[str]:
    """
    Все артефакты, которые читает действие: явные inputs, файлы внутри
    артефактов (ArtifactPath) и карты подстановки образов.
    """
    names = list(action.inputs)
    for name in _collect_paths(action.params):
        if name not in names:
            names.append(name)
    return names


def check_artifacts(stages: List[Stage]) -> Dict[str, Tuple[str, str]]:
    """
    Проверяет граф артефактов:
    - у каждого артефакта ровно один производитель;
    - артефакт произведён строго раньше потребителя: в более ранней стадии
      или в той же стадии, но с меньшим run_order (действия с одинаковым
      run_order выполняются параллельно);
    - всё, что указано в ArtifactPath, объявлено во inputs действия.

    Возвращает {артефакт: (стадия, действие-производитель)}.
    :raises ConfigurationError: при любой висячей или повторной ссылке.
    """
    producers: Dict[str, Tuple[str, str]] = {}

    for stage in stages:
        produced_here: Dict[str, int] = {}
        for action in stage.actions:
            for name in action.outputs:
                if name in producers or name in produced_here:
                    raise ConfigurationError(
                        description=f"Artifact {name!r} has more than one producer "
                        f"(second one is {stage.name}/{action.name})"
                    )
                produced_here[name] = action.run_order

        for action in stage.actions:
            for name in referenced_artifacts(action):
                if name in producers:
                    continue
                run_order = produced_here.get(name)
                if run_order is not None and run_order < action.run_order:
                    continue
                raise ConfigurationError(
                    description=f"Action {stage.name}/{action.name} consumes artifact "
                    f"{name!r} that no earlier action produces"
                )

            missing: Set[str] = set(_collect_paths(action.params)) - set(action.inputs)
            if missing:
                raise ConfigurationError(
                    description=f"Action {stage.name}/{action.name} reads files from "
                    f"undeclared inputs: {', '.join(sorted(missing))}"
                )

        for action in stage.actions:
            for name in action.outputs:
                producers[name] = (stage.name, action.name)

    return producers
