"""Tests for the deployment stage factory."""

import json

import pytest

from core.services.builders.deploy import (
    add_deploy_stage,
    make_deploy_stage,
    resolve_ecs_target,
    resolve_stack_target,
)
from exception import ConfigurationError
from model import ActionKind, Artifact, Stage

BUILD = Artifact(name="BuildArtifact")
IMAGE = Artifact(name="ImageDetails")


def _dump(stage: Stage) -> str:
    return json.dumps(stage.model_dump(mode="json"), sort_keys=True)


def test_ecs_target_naming(container_options):
    target = resolve_ecs_target(container_options, "Test")
    assert target.application_name == "AppECS-default-trivia-backend-test"
    assert target.deployment_group_name == "DgpECS-default-trivia-backend-test"
    assert target.deployment_config_name == "trivia-backend-canary"
    assert target.task_definition_file == "task-definition-test.json"
    assert target.app_spec_file == "appspec-test.json"


def test_ecs_target_uses_cluster(container_options):
    options = container_options.model_copy(update={"cluster": "trivia"})
    target = resolve_ecs_target(options, "Prod")
    assert target.application_name == "AppECS-trivia-trivia-backend-prod"


def test_stack_target_naming(template_options):
    target = resolve_stack_target(template_options, "Prod")
    assert target.stack_name == "TriviaGameBackendProd"
    assert target.template_file == "TriviaGameBackendProd.template.yaml"
    assert target.config_file == "StackConfig.json"


def test_container_stage(container_options):
    stage = make_deploy_stage("container", "Test", BUILD, IMAGE, container_options)

    assert stage.name == "Test"
    [action] = stage.actions
    assert action.kind == ActionKind.CONTAINER_BLUE_GREEN_DEPLOY
    assert action.inputs == ("BuildArtifact", "ImageDetails")
    assert str(action.params["app_spec_template"]) == "BuildArtifact::appspec-test.json"
    assert action.params["container_image_inputs"] == [
        {"input": "ImageDetails", "placeholder": "PLACEHOLDER"}
    ]


def test_container_stage_requires_image_details(container_options):
    with pytest.raises(ConfigurationError):
        make_deploy_stage("container", "Test", BUILD, None, container_options)


def test_template_stage_prepare_before_execute(template_options):
    stage = make_deploy_stage("template", "Test", BUILD, None, template_options)

    prepare, execute = stage.actions
    assert prepare.kind == ActionKind.TEMPLATE_CHANGE_PREPARE
    assert execute.kind == ActionKind.TEMPLATE_CHANGE_EXECUTE
    assert prepare.name == "PrepareChangesTest"
    assert execute.name == "ExecuteChangesTest"
    assert prepare.params["change_set_name"] == execute.params["change_set_name"]
    assert prepare.params["stack_name"] == execute.params["stack_name"] == "TriviaGameBackendTest"
    assert prepare.run_order < execute.run_order


@pytest.mark.parametrize("variant", ["container", "template"])
def test_factory_is_deterministic(variant, container_options, template_options):
    options = container_options if variant == "container" else template_options
    first = make_deploy_stage(variant, "Test", BUILD, IMAGE, options)
    second = make_deploy_stage(variant, "Test", BUILD, IMAGE, options)
    assert first == second
    assert _dump(first) == _dump(second)


@pytest.mark.parametrize("variant", ["container", "template"])
def test_test_and_prod_are_isomorphic(variant, container_options, template_options):
    options = container_options if variant == "container" else template_options
    test_stage = make_deploy_stage(variant, "Test", BUILD, IMAGE, options)
    prod_stage = make_deploy_stage(variant, "Prod", BUILD, IMAGE, options)

    substituted = _dump(test_stage).replace("Test", "Prod").replace("test", "prod")
    assert substituted == _dump(prod_stage)


def test_unknown_variant(template_options):
    with pytest.raises(ConfigurationError, match="Unknown pipeline variant"):
        make_deploy_stage("lambda", "Test", BUILD, None, template_options)


def test_options_must_match_variant(template_options):
    with pytest.raises(ConfigurationError, match="ContainerDeployOptions"):
        make_deploy_stage("container", "Test", BUILD, IMAGE, template_options)


class TestAddDeployStage:

    def test_appends_stage(self, template_options):
        stages = []
        stage = add_deploy_stage(stages, "template", "Test", BUILD, None, template_options)
        assert stages == [stage]

    @pytest.mark.parametrize("label", ["", "   "])
    def test_empty_label(self, label, template_options):
        stages = []
        with pytest.raises(ConfigurationError):
            add_deploy_stage(stages, "template", label, BUILD, None, template_options)
        assert stages == []

    def test_label_collision_is_case_insensitive(self, template_options):
        stages = []
        add_deploy_stage(stages, "template", "Prod", BUILD, None, template_options)
        with pytest.raises(ConfigurationError):
            add_deploy_stage(stages, "template", "PROD", BUILD, None, template_options)
        assert [s.name for s in stages] == ["Prod"]
