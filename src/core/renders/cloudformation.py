import json
from typing import Any, Callable, Dict, List, Tuple

import yaml

from model import ARTIFACT_BUCKET_REF, Action, ActionKind, ArtifactPath, PipelineSpec

"""
Рендер абстрактного пайплайна в CloudFormation-шаблон для CodePipeline.

Внешние ресурсы (группы CodeDeploy, стеки окружений, SNS-топик, секрет с токеном)
должны существовать заранее: шаблон ссылается на них только по имени.
"""

PIPELINE_ROLE_PARAMETER = "PipelineRoleArn"
DEPLOY_ROLE_PARAMETER = "CloudFormationDeployRoleArn"
EVENTS_ROLE_PARAMETER = "SourceEventsRoleArn"


def _value(value: Any) -> Any:
    if value == ARTIFACT_BUCKET_REF:
        return {"Ref": "ArtifactBucket"}
    if isinstance(value, ArtifactPath):
        return str(value)
    return value


def _arn(service: str, resource: str) -> Dict[str, str]:
    return {
        "Fn::Sub": f"arn:${{AWS::Partition}}:{service}:${{AWS::Region}}:${{AWS::AccountId}}:{resource}"
    }


def _type_id(category: str, owner: str, provider: str) -> Dict[str, str]:
    return {"Category": category, "Owner": owner, "Provider": provider, "Version": "1"}


def _github_source(action: Action) -> Dict[str, Any]:
    params = action.params
    return {
        "ActionTypeId": _type_id("Source", "ThirdParty", "GitHub"),
        "Configuration": {
            "Owner": params["owner"],
            "Repo": params["repo"],
            "Branch": params["branch"],
            "OAuthToken": params["oauth_token"].dynamic_reference(),
            "PollForSourceChanges": False,
        },
    }


def _ecr_source(action: Action) -> Dict[str, Any]:
    return {
        "ActionTypeId": _type_id("Source", "AWS", "ECR"),
        "Configuration": {
            "RepositoryName": action.params["repository"],
            "ImageTag": action.params["image_tag"],
        },
    }


def _github_webhook(action: Action) -> Dict[str, Any]:
    params = action.params
    return {
        "Type": "AWS::CodePipeline::Webhook",
        "Properties": {
            "Authentication": "GITHUB_HMAC",
            "AuthenticationConfiguration": {
                "SecretToken": params["oauth_token"].dynamic_reference(),
            },
            "Filters": [
                {"JSONPath": "$.ref", "MatchEquals": "refs/heads/{Branch}"},
            ],
            "TargetAction": action.name,
            "TargetPipeline": {"Ref": "Pipeline"},
            "TargetPipelineVersion": {"Fn::GetAtt": ["Pipeline", "Version"]},
            "RegisterWithThirdParty": True,
        },
    }


def _ecr_push_rule(action: Action) -> Dict[str, Any]:
    # PutImage из CloudTrail: перезапуск при каждом push нужного тега
    return {
        "Type": "AWS::Events::Rule",
        "Properties": {
            "EventPattern": {
                "source": ["aws.ecr"],
                "detail-type": ["AWS API Call via CloudTrail"],
                "detail": {
                    "eventSource": ["ecr.amazonaws.com"],
                    "eventName": ["PutImage"],
                    "requestParameters": {
                        "repositoryName": [action.params["repository"]],
                        "imageTag": [action.params["image_tag"]],
                    },
                },
            },
            "State": "ENABLED",
            "Targets": [
                {
                    "Id": "Pipeline",
                    "Arn": _arn("codepipeline", "${Pipeline}"),
                    "RoleArn": {"Ref": EVENTS_ROLE_PARAMETER},
                }
            ],
        },
    }


# Триггеры запуска пайплайна для source-действий
SOURCE_TRIGGERS: Dict[ActionKind, Tuple[str, Callable[[Action], Dict[str, Any]]]] = {
    ActionKind.SOURCE_FETCH: ("Webhook", _github_webhook),
    ActionKind.IMAGE_SOURCE: ("ImagePushRule", _ecr_push_rule),
}


def _codebuild(action: Action) -> Dict[str, Any]:
    configuration: Dict[str, Any] = {"ProjectName": {"Ref": "BuildProject"}}
    if len(action.inputs) > 1:
        configuration["PrimarySource"] = action.params["primary_source"]
    return {
        "ActionTypeId": _type_id("Build", "AWS", "CodeBuild"),
        "Configuration": configuration,
    }


def _change_set_replace(action: Action) -> Dict[str, Any]:
    params = action.params
    configuration = {
        "ActionMode": "CHANGE_SET_REPLACE",
        "StackName": params["stack_name"],
        "ChangeSetName": params["change_set_name"],
        "TemplatePath": _value(params["template_path"]),
        "TemplateConfiguration": _value(params["template_configuration"]),
        "Capabilities": "CAPABILITY_NAMED_IAM,CAPABILITY_AUTO_EXPAND",
    }
    if params.get("admin_permissions"):
        configuration["RoleArn"] = {"Ref": DEPLOY_ROLE_PARAMETER}
    return {
        "ActionTypeId": _type_id("Deploy", "AWS", "CloudFormation"),
        "Configuration": configuration,
    }


def _change_set_execute(action: Action) -> Dict[str, Any]:
    return {
        "ActionTypeId": _type_id("Deploy", "AWS", "CloudFormation"),
        "Configuration": {
            "ActionMode": "CHANGE_SET_EXECUTE",
            "StackName": action.params["stack_name"],
            "ChangeSetName": action.params["change_set_name"],
        },
    }


def _codedeploy_ecs(action: Action) -> Dict[str, Any]:
    params = action.params
    task_definition: ArtifactPath = params["task_definition_template"]
    app_spec: ArtifactPath = params["app_spec_template"]
    configuration = {
        "ApplicationName": params["application_name"],
        "DeploymentGroupName": params["deployment_group_name"],
        "TaskDefinitionTemplateArtifact": task_definition.artifact,
        "TaskDefinitionTemplatePath": task_definition.path,
        "AppSpecTemplateArtifact": app_spec.artifact,
        "AppSpecTemplatePath": app_spec.path,
    }
    for index, image_input in enumerate(params["container_image_inputs"], start=1):
        configuration[f"Image{index}ArtifactName"] = image_input["input"]
        configuration[f"Image{index}ContainerName"] = image_input["placeholder"]
    return {
        "ActionTypeId": _type_id("Deploy", "AWS", "CodeDeployToECS"),
        "Configuration": configuration,
    }


ACTION_RENDERS: Dict[ActionKind, Callable[[Action], Dict[str, Any]]] = {
    ActionKind.SOURCE_FETCH: _github_source,
    ActionKind.IMAGE_SOURCE: _ecr_source,
    ActionKind.CONTAINERIZED_BUILD: _codebuild,
    ActionKind.TEMPLATE_CHANGE_PREPARE: _change_set_replace,
    ActionKind.TEMPLATE_CHANGE_EXECUTE: _change_set_execute,
    ActionKind.CONTAINER_BLUE_GREEN_DEPLOY: _codedeploy_ecs,
}


def _render_action(action: Action) -> Dict[str, Any]:
    rendered: Dict[str, Any] = {"Name": action.name}
    rendered.update(ACTION_RENDERS[action.kind](action))
    rendered["RunOrder"] = action.run_order
    if action.inputs:
        rendered["InputArtifacts"] = [{"Name": name} for name in action.inputs]
    if action.outputs:
        rendered["OutputArtifacts"] = [{"Name": name} for name in action.outputs]
    return rendered


def _build_role(pipeline: PipelineSpec) -> Dict[str, Any]:
    statements: List[Dict[str, Any]] = [
        {
            "Effect": "Allow",
            "Action": ["logs:CreateLogGroup", "logs:CreateLogStream", "logs:PutLogEvents"],
            "Resource": _arn("logs", "log-group:/aws/codebuild/*"),
        },
        {
            "Effect": "Allow",
            "Action": ["s3:GetObject*", "s3:GetBucket*", "s3:List*", "s3:PutObject"],
            "Resource": [
                {"Fn::GetAtt": ["ArtifactBucket", "Arn"]},
                {"Fn::Sub": "${ArtifactBucket.Arn}/*"},
            ],
        },
    ]
    for statement in pipeline.build_project.policy_statements:
        statements.append(
            {"Effect": "Allow", "Action": list(statement.actions), "Resource": list(statement.resources)}
        )

    return {
        "Type": "AWS::IAM::Role",
        "Properties": {
            "AssumeRolePolicyDocument": {
                "Version": "2012-10-17",
                "Statement": [
                    {
                        "Effect": "Allow",
                        "Principal": {"Service": "codebuild.amazonaws.com"},
                        "Action": "sts:AssumeRole",
                    }
                ],
            },
            "Policies": [
                {
                    "PolicyName": "BuildProjectPolicy",
                    "PolicyDocument": {"Version": "2012-10-17", "Statement": statements},
                }
            ],
        },
    }


def _build_project(pipeline: PipelineSpec) -> Dict[str, Any]:
    project = pipeline.build_project
    return {
        "Type": "AWS::CodeBuild::Project",
        "Properties": {
            "Artifacts": {"Type": "CODEPIPELINE"},
            "Source": {"Type": "CODEPIPELINE", "BuildSpec": project.build_spec},
            "Environment": {
                "Type": "LINUX_CONTAINER",
                "ComputeType": "BUILD_GENERAL1_SMALL",
                "Image": project.build_image,
                "PrivilegedMode": project.privileged,
                "EnvironmentVariables": [
                    {"Name": name, "Type": "PLAINTEXT", "Value": _value(value)}
                    for name, value in project.environment_variables.items()
                ],
            },
            "ServiceRole": {"Fn::GetAtt": ["BuildProjectRole", "Arn"]},
        },
    }


def to_template(pipeline: PipelineSpec) -> Dict[str, Any]:
    """
    CloudFormation-шаблон в виде словаря.
    """
    parameters: Dict[str, Any] = {
        PIPELINE_ROLE_PARAMETER: {
            "Type": "String",
            "Description": "Role assumed by CodePipeline",
        }
    }
    needs_deploy_role = any(
        action.params.get("admin_permissions") for _, action in pipeline.iter_actions()
    )
    if needs_deploy_role:
        parameters[DEPLOY_ROLE_PARAMETER] = {
            "Type": "String",
            "Description": "Role passed to CloudFormation when applying change sets",
        }

    resources: Dict[str, Any] = {
        "ArtifactBucket": {"Type": "AWS::S3::Bucket", "DeletionPolicy": "Retain"},
        "BuildProjectRole": _build_role(pipeline),
        "BuildProject": _build_project(pipeline),
        "Pipeline": {
            "Type": "AWS::CodePipeline::Pipeline",
            "Properties": {
                "Name": pipeline.name,
                "RoleArn": {"Ref": PIPELINE_ROLE_PARAMETER},
                "ArtifactStore": {"Type": "S3", "Location": {"Ref": "ArtifactBucket"}},
                "Stages": [
                    {
                        "Name": stage.name,
                        "Actions": [_render_action(action) for action in stage.actions],
                    }
                    for stage in pipeline.stages
                ],
            },
        },
    }

    needs_events_role = False
    for _, action in pipeline.iter_actions():
        trigger = SOURCE_TRIGGERS.get(action.kind)
        if trigger is None:
            continue
        suffix, make_trigger = trigger
        resources[action.name + suffix] = make_trigger(action)
        needs_events_role = needs_events_role or action.kind == ActionKind.IMAGE_SOURCE

    if needs_events_role:
        parameters[EVENTS_ROLE_PARAMETER] = {
            "Type": "String",
            "Description": "Role EventBridge uses to start the pipeline on image push",
        }

    if pipeline.notification is not None:
        rule = pipeline.notification
        resources["PipelineNotifications"] = {
            "Type": "AWS::CodeStarNotifications::NotificationRule",
            "Properties": {
                "Name": rule.name,
                "DetailType": rule.detail_type,
                "Resource": _arn("codepipeline", "${Pipeline}"),
                "EventTypeIds": list(rule.event_type_ids),
                "Targets": [
                    {"TargetType": rule.target_type, "TargetAddress": _arn("sns", rule.target_topic)}
                ],
            },
        }

    return {
        "AWSTemplateFormatVersion": "2010-09-09",
        "Description": f"Delivery pipeline {pipeline.name} ({pipeline.variant})",
        "Parameters": parameters,
        "Resources": resources,
        "Outputs": {"PipelineName": {"Value": {"Ref": "Pipeline"}}},
    }


def render(pipeline: PipelineSpec, fmt: str = "yaml") -> str:
    template = to_template(pipeline)
    if fmt == "json":
        return json.dumps(template, indent=2)
    if fmt == "yaml":
        return yaml.safe_dump(template, sort_keys=False, default_flow_style=False)
    raise ValueError(f"Unsupported template format: {fmt}")
