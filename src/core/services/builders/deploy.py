from typing import List, Optional, Union

import click

from core.models import (
    ContainerDeployOptions,
    EcsDeploymentTarget,
    StackDeploymentTarget,
    TemplateDeployOptions,
)
from exception import ConfigurationError
from model import Action, ActionKind, Artifact, Stage, Variant

DeployOptions = Union[ContainerDeployOptions, TemplateDeployOptions]


def _normalize_label(label: str) -> str:
    if label is None or not label.strip():
        raise ConfigurationError(description="Environment label must not be empty")
    return label.strip()


def resolve_ecs_target(options: ContainerDeployOptions, label: str) -> EcsDeploymentTarget:
    """
    Имена заранее созданных приложения и группы CodeDeploy выводятся из метки окружения:
    AppECS-<cluster>-<app_prefix>-<label>, DgpECS-<cluster>-<app_prefix>-<label>.
    """
    label = _normalize_label(label)
    suffix = label.lower()
    service = f"{options.cluster}-{options.app_prefix}-{suffix}"
    return EcsDeploymentTarget(
        label=label,
        application_name=f"AppECS-{service}",
        deployment_group_name=f"DgpECS-{service}",
        deployment_config_name=options.deployment_config,
        task_definition_file=f"task-definition-{suffix}.json",
        app_spec_file=f"appspec-{suffix}.json",
    )


def resolve_stack_target(options: TemplateDeployOptions, label: str) -> StackDeploymentTarget:
    """
    Стек <prefix><stack_name><Label>, шаблон <prefix><template_name><Label>.template.yaml.
    """
    label = _normalize_label(label)
    return StackDeploymentTarget(
        label=label,
        stack_name=f"{options.name_prefix}{options.stack_name}{label}",
        template_file=f"{options.name_prefix}{options.template_name}{label}.template.yaml",
        config_file=options.stack_config_file,
        change_set_name=options.change_set_name,
    )


def _ecs_deploy_stage(
    label: str,
    build_output: Artifact,
    image_details: Optional[Artifact],
    options: ContainerDeployOptions,
) -> Stage:
    if image_details is None:
        raise ConfigurationError(
            description=f"Stage {label}: container deployment requires an image details artifact"
        )

    target = resolve_ecs_target(options, label)
    action = Action(
        name="Deploy" + target.label,
        kind=ActionKind.CONTAINER_BLUE_GREEN_DEPLOY,
        inputs=[build_output.name, image_details.name],
        params={
            "application_name": target.application_name,
            "deployment_group_name": target.deployment_group_name,
            "deployment_config_name": target.deployment_config_name,
            "task_definition_template": build_output.at_path(target.task_definition_file),
            "app_spec_template": build_output.at_path(target.app_spec_file),
            "container_image_inputs": [
                {"input": image_details.name, "placeholder": options.placeholder},
            ],
        },
    )
    return Stage(name=target.label, actions=[action])


def _cfn_deploy_stage(
    label: str,
    build_output: Artifact,
    image_details: Optional[Artifact],
    options: TemplateDeployOptions,
) -> Stage:
    target = resolve_stack_target(options, label)

    # prepare и execute обязаны ссылаться на один и тот же change set
    prepare = Action(
        name="PrepareChanges" + target.label,
        kind=ActionKind.TEMPLATE_CHANGE_PREPARE,
        run_order=1,
        inputs=[build_output.name],
        params={
            "stack_name": target.stack_name,
            "change_set_name": target.change_set_name,
            "admin_permissions": True,
            "template_path": build_output.at_path(target.template_file),
            "template_configuration": build_output.at_path(target.config_file),
        },
    )
    execute = Action(
        name="ExecuteChanges" + target.label,
        kind=ActionKind.TEMPLATE_CHANGE_EXECUTE,
        run_order=2,
        params={
            "stack_name": target.stack_name,
            "change_set_name": target.change_set_name,
        },
    )
    return Stage(name=target.label, actions=[prepare, execute])


DEPLOY_STAGE_FACTORIES = {
    "container": (ContainerDeployOptions, _ecs_deploy_stage),
    "template": (TemplateDeployOptions, _cfn_deploy_stage),
}


def make_deploy_stage(
    variant: Variant,
    label: str,
    build_output: Artifact,
    image_details: Optional[Artifact],
    options: DeployOptions,
) -> Stage:
    """
    Одна стадия деплоя для окружения label.

    Test и Prod строятся одной и той же функцией, отличаются только меткой,
    поэтому структура окружений не может разъехаться.
    Чистая функция: одинаковые входы дают одинаковую стадию.
    """
    try:
        options_type, factory = DEPLOY_STAGE_FACTORIES[variant]
    except KeyError:
        raise ConfigurationError(description=f"Unknown pipeline variant: {variant!r}")

    if not isinstance(options, options_type):
        raise ConfigurationError(
            description=f"Variant {variant!r} requires {options_type.__name__} options"
        )

    return factory(label, build_output, image_details, options)


def add_deploy_stage(
    stages: List[Stage],
    variant: Variant,
    label: str,
    build_output: Artifact,
    image_details: Optional[Artifact],
    options: DeployOptions,
) -> Stage:
    """
    Добавляет стадию деплоя в конец списка стадий.

    :raises ConfigurationError: пустая метка или метка, уже использованная
                                в этом пайплайне (без учёта регистра: имена
                                ресурсов строятся из label.lower()).
    """
    label = _normalize_label(label)
    used = {stage.name.lower() for stage in stages}
    if label.lower() in used:
        raise ConfigurationError(
            description=f"Environment label {label!r} is already used in this pipeline"
        )

    stage = make_deploy_stage(variant, label, build_output, image_details, options)
    stages.append(stage)
    click.echo(
        f"Добавлена стадия деплоя {stage.name}: {', '.join(stage.action_names)}", err=True
    )
    return stage
