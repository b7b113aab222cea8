from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


Variant = Literal["container", "template"]


class ActionKind(str, Enum):
    SOURCE_FETCH = "source-fetch"
    IMAGE_SOURCE = "image-source"
    CONTAINERIZED_BUILD = "containerized-build"
    TEMPLATE_CHANGE_PREPARE = "template-change-prepare"
    TEMPLATE_CHANGE_EXECUTE = "template-change-execute"
    CONTAINER_BLUE_GREEN_DEPLOY = "container-blue-green-deploy"


class ArtifactPath(BaseModel):
    """
    Путь к файлу внутри артефакта, в нотации движка: "<Artifact>::<file>".
    """

    model_config = ConfigDict(frozen=True)

    artifact: str
    path: str

    def __str__(self) -> str:
        return f"{self.artifact}::{self.path}"


class Artifact(BaseModel):
    """
    Именованный непрозрачный хэндл данных между действиями.
    Производится ровно одним действием, потребляется любым числом последующих.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)

    def at_path(self, path: str) -> ArtifactPath:
        return ArtifactPath(artifact=self.name, path=path)


class Action(BaseModel):
    """
    Единица работы внутри стадии.
    На этом уровне не привязана к CodePipeline: параметры вида действия лежат в params.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    kind: ActionKind
    run_order: int = 1
    inputs: Tuple[str, ...] = ()
    outputs: Tuple[str, ...] = ()
    params: Dict[str, Any] = Field(default_factory=dict)


class Stage(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    actions: Tuple[Action, ...]

    @property
    def action_names(self) -> List[str]:
        return [action.name for action in self.actions]


class PolicyStatement(BaseModel):
    model_config = ConfigDict(frozen=True)

    actions: Tuple[str, ...]
    resources: Tuple[str, ...] = ("*",)


class BuildProject(BaseModel):
    """
    Описание проекта сборки: где лежит buildspec, в каком образе собираем
    и какие права нужны (только явный минимальный список).
    """

    model_config = ConfigDict(frozen=True)

    build_spec: str
    build_image: str
    privileged: bool = True
    environment_variables: Dict[str, str] = Field(default_factory=dict)
    policy_statements: Tuple[PolicyStatement, ...] = ()


class NotificationRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    detail_type: str = "FULL"
    event_type_ids: Tuple[str, ...] = ("codepipeline-pipeline-pipeline-execution-failed",)
    target_type: str = "SNS"
    target_topic: str


class PipelineSpec(BaseModel):
    """
    Абстрактный пайплайн доставки: упорядоченные стадии, проект сборки
    и подписка на уведомления о падении.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    variant: Variant
    stages: Tuple[Stage, ...]
    build_project: BuildProject
    notification: Optional[NotificationRule] = None

    @model_validator(mode="after")
    def _unique_stage_names(self) -> "PipelineSpec":
        seen = set()
        for stage in self.stages:
            if stage.name in seen:
                raise ValueError(f"duplicate stage name: {stage.name}")
            seen.add(stage.name)
        return self

    @property
    def stage_names(self) -> List[str]:
        return [stage.name for stage in self.stages]

    def stage(self, name: str) -> Stage:
        for stage in self.stages:
            if stage.name == name:
                return stage
        raise KeyError(name)

    def iter_actions(self):
        for stage in self.stages:
            for action in stage.actions:
                yield stage, action


# Ссылка на бакет артефактов самого пайплайна; рендер подставляет реальный ресурс
ARTIFACT_BUCKET_REF = "@artifact-bucket"
