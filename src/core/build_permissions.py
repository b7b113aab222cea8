# core/build_permissions.py
from __future__ import annotations

from typing import Dict, List

from model import PolicyStatement, Variant


# Права на push/pull образов в ECR из CodeBuild
ECR_PUSH_PULL_ACTIONS: List[str] = [
    "ecr:GetAuthorizationToken",
    "ecr:BatchCheckLayerAvailability",
    "ecr:GetDownloadUrlForLayer",
    "ecr:GetRepositoryPolicy",
    "ecr:DescribeRepositories",
    "ecr:ListImages",
    "ecr:DescribeImages",
    "ecr:BatchGetImage",
    "ecr:InitiateLayerUpload",
    "ecr:UploadLayerPart",
    "ecr:CompleteLayerUpload",
    "ecr:PutImage",
]

# buildspec контейнерного варианта читает ресурсы стека сервиса
STACK_INSPECT_ACTIONS: List[str] = [
    "cloudformation:DescribeStackResources",
]


def make_policy_statements(variant: Variant) -> List[PolicyStatement]:
    """
    Минимальный allow-list для роли проекта сборки.

    variant:
      - 'template'  -> ничего сверх базовых прав CodeBuild
      - 'container' -> чтение ресурсов стека + push/pull образов
    """
    if variant == "template":
        return []
    if variant == "container":
        return [
            PolicyStatement(actions=list(STACK_INSPECT_ACTIONS)),
            PolicyStatement(actions=list(ECR_PUSH_PULL_ACTIONS)),
        ]
    raise ValueError(f"Unsupported pipeline variant: {variant}")


def make_environment_variables(variant: Variant, artifact_bucket_ref: str) -> Dict[str, str]:
    """
    Переменные окружения сборки.
    Шаблонному варианту нужен бакет артефактов пайплайна (туда кладутся ассеты шаблонов).
    """
    if variant == "template":
        return {"ARTIFACTS_BUCKET": artifact_bucket_ref}
    if variant == "container":
        return {}
    raise ValueError(f"Unsupported pipeline variant: {variant}")
