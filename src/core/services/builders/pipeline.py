import click

from typing import List, Optional, Tuple

from pydantic import ValidationError

from core.build_permissions import make_environment_variables, make_policy_statements
from core.config import SharedConfig
from core.models import PipelineRequest, PipelineSummary, SecretReference
from exception import ConfigurationError
from model import (
    ARTIFACT_BUCKET_REF,
    Action,
    ActionKind,
    Artifact,
    BuildProject,
    NotificationRule,
    PipelineSpec,
    Stage,
)
from .deploy import add_deploy_stage
from .validation import check_artifacts

SOURCE_STAGE = "Source"
BUILD_STAGE = "Build"


def _require(value: Optional[str], name: str) -> str:
    if value is None or not str(value).strip():
        raise ConfigurationError(description=f"Required parameter '{name}' is missing")
    return value


def _validate_request(request: PipelineRequest, config: SharedConfig) -> SecretReference:
    _require(request.name, "name")
    _require(request.source.owner, "source.owner")
    _require(request.source.repo, "source.repo")
    _require(request.source.branch, "source.branch")
    _require(request.build_spec, "build_spec")
    _require(config.build_image, "build_image")

    if not request.environments:
        raise ConfigurationError(description="At least one environment is required")

    if request.variant == "container":
        if request.container is None:
            raise ConfigurationError(
                description="Required parameter 'container' is missing for the container variant"
            )
        _require(request.container.app_prefix, "container.app_prefix")
        _require(request.container.deployment_config, "container.deployment_config")
        _require(request.container.image.repository, "container.image.repository")
        _require(request.container.image.tag, "container.image.tag")
    elif request.variant == "template":
        if request.template is None:
            raise ConfigurationError(
                description="Required parameter 'template' is missing for the template variant"
            )
        _require(request.template.stack_name, "template.stack_name")
        _require(request.template.template_name, "template.template_name")
        _require(request.template.change_set_name, "template.change_set_name")
    else:
        raise ConfigurationError(description=f"Unknown pipeline variant: {request.variant!r}")

    credential = request.source.credential
    if credential is None:
        _require(config.github_token_secret, "github_token_secret")
        credential = SecretReference(secret_id=config.github_token_secret)
    return credential


def build_pipeline(
    request: PipelineRequest, config: SharedConfig
) -> Tuple[PipelineSpec, List[str], List[str]]:
    """
    Строим топологию пайплайна доставки:
    [Source] -> [Build] -> [Deploy <env>] -> ...

    Возвращает (PipelineSpec, logs, warnings).
    Ничего не отправляет во внешний движок; при ошибке частичная топология не возвращается.

    :raises ConfigurationError: отсутствует обязательный параметр, висячая ссылка
                                на артефакт или повторная метка окружения.
    """
    logs: List[str] = []
    warnings: List[str] = []

    credential = _validate_request(request, config)
    pipeline_name = config.pipeline_name_prefix + request.name
    variant = request.variant

    click.echo(f"Строим пайплайн {pipeline_name} (вариант {variant})", err=True)
    logs.append(f"Строим пайплайн {pipeline_name} (вариант {variant})")

    stages: List[Stage] = []

    # --- Source ---
    source_output = Artifact(name="SourceArtifact")
    source_actions = [
        Action(
            name="GitHubSource",
            kind=ActionKind.SOURCE_FETCH,
            outputs=[source_output.name],
            params={
                "owner": request.source.owner,
                "repo": request.source.repo,
                "branch": request.source.branch,
                "oauth_token": credential,
            },
        )
    ]

    base_image_output: Optional[Artifact] = None
    if variant == "container":
        base_image_output = Artifact(name="BaseImage")
        source_actions.append(
            Action(
                name="BaseImage",
                kind=ActionKind.IMAGE_SOURCE,
                outputs=[base_image_output.name],
                params={
                    "repository": request.container.image.repository,
                    "image_tag": request.container.image.tag,
                },
            )
        )
    stages.append(Stage(name=SOURCE_STAGE, actions=source_actions))
    logs.append(
        f"Стадия {SOURCE_STAGE}: "
        + ", ".join(action.name for action in source_actions)
    )

    # --- Build ---
    build_output = Artifact(name="BuildArtifact")
    build_outputs = [build_output.name]
    build_inputs = [source_output.name]
    image_details: Optional[Artifact] = None
    if base_image_output is not None:
        build_inputs.append(base_image_output.name)
        image_details = Artifact(name="ImageDetails")
        build_outputs.append(image_details.name)

    build_project = BuildProject(
        build_spec=request.build_spec,
        build_image=config.build_image,
        privileged=True,
        environment_variables=make_environment_variables(variant, ARTIFACT_BUCKET_REF),
        policy_statements=make_policy_statements(variant),
    )
    stages.append(
        Stage(
            name=BUILD_STAGE,
            actions=[
                Action(
                    name="CodeBuild",
                    kind=ActionKind.CONTAINERIZED_BUILD,
                    inputs=build_inputs,
                    outputs=build_outputs,
                    params={
                        "build_spec": request.build_spec,
                        "primary_source": source_output.name,
                    },
                )
            ],
        )
    )
    logs.append(
        f"Стадия {BUILD_STAGE}: CodeBuild ({', '.join(build_inputs)} -> {', '.join(build_outputs)})"
    )

    # --- Deploy ---
    options = request.container if variant == "container" else request.template
    for label in request.environments:
        stage = add_deploy_stage(stages, variant, label, build_output, image_details, options)
        logs.append(f"Стадия {stage.name}: {', '.join(stage.action_names)}")

    producers = check_artifacts(stages)
    logs.append(f"Артефакты: {', '.join(producers)}")

    notification = None
    if config.notification_topic:
        notification = NotificationRule(name=pipeline_name, target_topic=config.notification_topic)
    else:
        warnings.append(
            "Топик уведомлений не задан — о падениях пайплайна никто не узнает. "
            "Укажите PIPE2CLOUD_NOTIFICATION_TOPIC."
        )

    try:
        pipeline = PipelineSpec(
            name=pipeline_name,
            variant=variant,
            stages=stages,
            build_project=build_project,
            notification=notification,
        )
    except ValidationError as e:
        raise ConfigurationError(description=f"Invalid pipeline {pipeline_name}: {e}", logs=logs)

    if request.source.credential is None:
        logs.append(f"Токен GitHub берётся из общего секрета {credential.secret_id}")

    message = f"Пайплайн сформирован: {len(pipeline.stages)} стадий: {', '.join(pipeline.stage_names)}."
    logs.append(message)
    click.echo(message, err=True)

    return pipeline, logs, warnings


def summarize_pipeline(pipeline: PipelineSpec) -> PipelineSummary:
    """
    Строит краткое резюме пайплайна для CLI.
    """
    stages = pipeline.stage_names
    action_names = [action.name for _, action in pipeline.iter_actions()]
    artifacts = [name for _, action in pipeline.iter_actions() for name in action.outputs]

    description = (
        f"Пайплайн {pipeline.name} ({pipeline.variant}) из {len(stages)} стадий "
        f"и {len(action_names)} действий: стадии {', '.join(stages)}."
    )

    return PipelineSummary(
        pipeline_name=pipeline.name,
        variant=pipeline.variant,
        stages_count=len(stages),
        actions_count=len(action_names),
        stages=stages,
        action_names=action_names,
        artifacts=artifacts,
        description=description,
    )
