"""Pytest fixtures for pipe2cloud tests."""

import pytest

from core.config import SharedConfig
from core.models import (
    ContainerDeployOptions,
    ImageSource,
    PipelineRequest,
    SourceRepository,
    TemplateDeployOptions,
)


@pytest.fixture
def shared_config():
    """Explicit shared config, independent of the environment."""
    return SharedConfig(
        pipeline_name_prefix="reinvent-trivia-game-",
        github_token_secret="TriviaGitHubToken",
        github_owner="vl-gian",
        github_repo="aws-reinvent-2019-trivia-game",
        notification_topic="reinvent-trivia-notifications",
        build_image="aws/codebuild/amazonlinux2-x86_64-standard:3.0",
    )


@pytest.fixture
def source():
    return SourceRepository(owner="vl-gian", repo="aws-reinvent-2019-trivia-game")


@pytest.fixture
def container_options():
    return ContainerDeployOptions(
        app_prefix="trivia-backend",
        deployment_config="trivia-backend-canary",
        image=ImageSource(repository="reinvent-trivia-backend-base", tag="release"),
    )


@pytest.fixture
def template_options():
    return TemplateDeployOptions(stack_name="Backend", template_name="Backend")


@pytest.fixture
def container_request(source, container_options):
    return PipelineRequest(
        name="trivia-backend-with-codedeploy",
        variant="container",
        source=source,
        build_spec="trivia-backend/infra/codedeploy-blue-green/buildspec.yml",
        container=container_options,
    )


@pytest.fixture
def template_request(source, template_options):
    return PipelineRequest(
        name="backend",
        variant="template",
        source=source,
        build_spec="trivia-backend/infra/cdk/buildspec.yml",
        template=template_options,
    )
