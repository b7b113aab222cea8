from pydantic import BaseModel, Field
from typing import List, Literal, Dict, Optional

from model import Variant


class SecretReference(BaseModel):
    """
    Ссылка на секрет во внешнем хранилище (Secrets Manager).
    Сам секрет в описание пайплайна не попадает: движок разрешает ссылку
    один раз при развёртывании шаблона пайплайна.
    """
    secret_id: str = Field(min_length=1)
    json_field: Optional[str] = None

    def dynamic_reference(self) -> str:
        field = self.json_field or ""
        return f"{{{{resolve:secretsmanager:{self.secret_id}:SecretString:{field}::}}}}"


class SourceRepository(BaseModel):
    """
    Координаты репозитория на GitHub.
    credential — если не задан, берётся общий секрет из SharedConfig.
    """
    owner: str
    repo: str
    branch: str = "master"
    credential: Optional[SecretReference] = None


class ImageSource(BaseModel):
    """
    Базовый образ из ECR, который попадает в сборку вторым source-артефактом.
    """
    repository: str
    tag: str = "release"


class ContainerDeployOptions(BaseModel):
    app_prefix: str
    deployment_config: str
    image: ImageSource
    cluster: str = "default"
    placeholder: str = "PLACEHOLDER"


class TemplateDeployOptions(BaseModel):
    stack_name: str
    template_name: str
    name_prefix: str = "TriviaGame"
    stack_config_file: str = "StackConfig.json"
    change_set_name: str = "StagedChangeSet"


class PipelineRequest(BaseModel):
    """
    Входные параметры одного пайплайна доставки.

    name         — короткое имя, к нему добавляется общий префикс из SharedConfig;
    variant      — container (blue/green в ECS) или template (CloudFormation change set);
    build_spec   — путь до buildspec относительно корня source-артефакта;
    environments — метки окружений в порядке продвижения.
    """
    name: str
    variant: Variant
    source: SourceRepository
    build_spec: str
    environments: List[str] = Field(default_factory=lambda: ["Test", "Prod"])
    container: Optional[ContainerDeployOptions] = None
    template: Optional[TemplateDeployOptions] = None


class EcsDeploymentTarget(BaseModel):
    label: str
    application_name: str
    deployment_group_name: str
    deployment_config_name: str
    task_definition_file: str
    app_spec_file: str


class StackDeploymentTarget(BaseModel):
    label: str
    stack_name: str
    template_file: str
    config_file: str
    change_set_name: str


class PipelineSummary(BaseModel):
    pipeline_name: str
    variant: Variant
    stages_count: int
    actions_count: int
    stages: List[str]
    action_names: List[str]
    artifacts: List[str]
    # Короткое текстовое описание для CLI
    description: str


class BuildResponse(BaseModel):
    status: Literal["ok", "error"]
    ci_templates: Dict[str, str] = {}
    warnings: List[str] = []
    logs: List[str] = []
    pipeline_summary: Optional[PipelineSummary] = None
