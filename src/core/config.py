import os

from pydantic import BaseModel, Field

"""
Общие настройки, которые раньше были «глобальными» для всех пайплайнов:
секрет с токеном GitHub, SNS-топик для уведомлений, образ сборки.

Значения берутся из переменных окружения PIPE2CLOUD_* и передаются в билдер явно,
через SharedConfig, а не читаются из глобального состояния.
"""

PIPELINE_NAME_PREFIX = os.getenv("PIPE2CLOUD_PIPELINE_PREFIX", "reinvent-trivia-game-")
GITHUB_TOKEN_SECRET = os.getenv("PIPE2CLOUD_GITHUB_SECRET", "TriviaGitHubToken")
GITHUB_OWNER = os.getenv("PIPE2CLOUD_GITHUB_OWNER", "vl-gian")
GITHUB_REPO = os.getenv("PIPE2CLOUD_GITHUB_REPO", "aws-reinvent-2019-trivia-game")
NOTIFICATION_TOPIC = os.getenv("PIPE2CLOUD_NOTIFICATION_TOPIC", "reinvent-trivia-notifications")
# codebuild.LinuxBuildImage.AMAZON_LINUX_2_3
BUILD_IMAGE = os.getenv(
    "PIPE2CLOUD_BUILD_IMAGE", "aws/codebuild/amazonlinux2-x86_64-standard:3.0"
)


class SharedConfig(BaseModel):
    pipeline_name_prefix: str = PIPELINE_NAME_PREFIX
    github_token_secret: str = Field(default=GITHUB_TOKEN_SECRET, min_length=1)
    github_owner: str = GITHUB_OWNER
    github_repo: str = GITHUB_REPO
    notification_topic: str = NOTIFICATION_TOPIC
    build_image: str = Field(default=BUILD_IMAGE, min_length=1)


def load_shared_config() -> SharedConfig:
    """
    Перечитывает окружение (а не значения, зафиксированные при импорте модуля).
    """
    return SharedConfig(
        pipeline_name_prefix=os.getenv("PIPE2CLOUD_PIPELINE_PREFIX", PIPELINE_NAME_PREFIX),
        github_token_secret=os.getenv("PIPE2CLOUD_GITHUB_SECRET", GITHUB_TOKEN_SECRET),
        github_owner=os.getenv("PIPE2CLOUD_GITHUB_OWNER", GITHUB_OWNER),
        github_repo=os.getenv("PIPE2CLOUD_GITHUB_REPO", GITHUB_REPO),
        notification_topic=os.getenv("PIPE2CLOUD_NOTIFICATION_TOPIC", NOTIFICATION_TOPIC),
        build_image=os.getenv("PIPE2CLOUD_BUILD_IMAGE", BUILD_IMAGE),
    )
