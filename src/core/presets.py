from typing import Any, Dict

"""
Готовые описания пайплайнов игры re:Invent Trivia.

trivia-backend-with-codedeploy — образ в ECR + blue/green деплой через CodeDeploy;
остальные — CloudFormation-стеки, которые выкатываются через change set.
"""


def _cfn_preset(name: str, stack_name: str, directory: str) -> Dict[str, Any]:
    return {
        "name": name,
        "variant": "template",
        "build_spec": directory + "/buildspec.yml",
        "template": {
            "stack_name": stack_name,
            "template_name": stack_name,
        },
    }


PRESETS: Dict[str, Dict[str, Any]] = {
    "trivia-backend-with-codedeploy": {
        "name": "trivia-backend-with-codedeploy",
        "variant": "container",
        "build_spec": "trivia-backend/infra/codedeploy-blue-green/buildspec.yml",
        "container": {
            "app_prefix": "trivia-backend",
            "deployment_config": "trivia-backend-canary",
            "image": {"repository": "reinvent-trivia-backend-base", "tag": "release"},
        },
    },
    "backend": _cfn_preset("backend", "Backend", "trivia-backend/infra/cdk"),
    "static-site": _cfn_preset("static-site", "StaticSite", "static-site/cdk"),
    "chat-bot": _cfn_preset("chat-bot", "ChatBot", "chat-bot/cdk"),
    "canaries": _cfn_preset("canaries", "Canaries", "canaries"),
}
