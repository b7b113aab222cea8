"""Tests for the pipeline topology builder."""

import pytest

from core.services.builders.pipeline import build_pipeline, summarize_pipeline
from exception import ConfigurationError
from model import ARTIFACT_BUCKET_REF, ActionKind


class TestContainerPipeline:

    @pytest.fixture
    def pipeline(self, container_request, shared_config):
        pipeline, _, _ = build_pipeline(container_request, shared_config)
        return pipeline

    def test_stage_order(self, pipeline):
        assert pipeline.stage_names == ["Source", "Build", "Test", "Prod"]
        assert pipeline.name == "reinvent-trivia-game-trivia-backend-with-codedeploy"

    def test_source_stage_has_github_and_image_actions(self, pipeline):
        source = pipeline.stage("Source")
        assert source.action_names == ["GitHubSource", "BaseImage"]
        assert {a.run_order for a in source.actions} == {1}

        image = source.actions[1]
        assert image.kind == ActionKind.IMAGE_SOURCE
        assert image.params == {"repository": "reinvent-trivia-backend-base", "image_tag": "release"}
        assert image.outputs == ("BaseImage",)

    def test_credential_falls_back_to_shared_secret(self, pipeline):
        github = pipeline.stage("Source").actions[0]
        assert github.params["oauth_token"].secret_id == "TriviaGitHubToken"

    def test_build_stage_artifacts(self, pipeline):
        build = pipeline.stage("Build").actions[0]
        assert build.kind == ActionKind.CONTAINERIZED_BUILD
        assert build.inputs == ("SourceArtifact", "BaseImage")
        assert build.outputs == ("BuildArtifact", "ImageDetails")

    def test_build_permissions_are_an_explicit_allow_list(self, pipeline):
        statements = pipeline.build_project.policy_statements
        actions = [a for s in statements for a in s.actions]
        assert "cloudformation:DescribeStackResources" in actions
        assert "ecr:PutImage" in actions
        assert not any(a.endswith(":*") or a == "*" for a in actions)
        assert pipeline.build_project.environment_variables == {}

    def test_deploy_targets(self, pipeline):
        deploy = pipeline.stage("Test").actions[0]
        assert deploy.name == "DeployTest"
        assert deploy.params["application_name"] == "AppECS-default-trivia-backend-test"
        assert deploy.params["deployment_group_name"] == "DgpECS-default-trivia-backend-test"
        assert str(deploy.params["task_definition_template"]) == "BuildArtifact::task-definition-test.json"

        prod = pipeline.stage("Prod").actions[0]
        assert prod.params["application_name"] == "AppECS-default-trivia-backend-prod"

    def test_notification_rule(self, pipeline):
        assert pipeline.notification.name == pipeline.name
        assert pipeline.notification.target_topic == "reinvent-trivia-notifications"
        assert pipeline.notification.event_type_ids == (
            "codepipeline-pipeline-pipeline-execution-failed",
        )


class TestTemplatePipeline:

    @pytest.fixture
    def pipeline(self, template_request, shared_config):
        pipeline, _, _ = build_pipeline(template_request, shared_config)
        return pipeline

    def test_stage_order(self, pipeline):
        assert pipeline.stage_names == ["Source", "Build", "Test", "Prod"]

    def test_source_stage_has_only_github(self, pipeline):
        assert pipeline.stage("Source").action_names == ["GitHubSource"]

    def test_build_stage(self, pipeline):
        build = pipeline.stage("Build").actions[0]
        assert build.inputs == ("SourceArtifact",)
        assert build.outputs == ("BuildArtifact",)
        assert pipeline.build_project.policy_statements == ()
        assert pipeline.build_project.environment_variables == {
            "ARTIFACTS_BUCKET": ARTIFACT_BUCKET_REF
        }
        assert pipeline.build_project.build_spec == "trivia-backend/infra/cdk/buildspec.yml"

    def test_prod_stack(self, pipeline):
        prepare, execute = pipeline.stage("Prod").actions
        assert prepare.params["stack_name"] == "TriviaGameBackendProd"
        assert str(prepare.params["template_path"]) == "BuildArtifact::TriviaGameBackendProd.template.yaml"
        assert str(prepare.params["template_configuration"]) == "BuildArtifact::StackConfig.json"
        assert execute.params["stack_name"] == "TriviaGameBackendProd"


class TestBuilderErrors:

    def test_empty_build_spec(self, template_request, shared_config):
        request = template_request.model_copy(update={"build_spec": ""})
        with pytest.raises(ConfigurationError):
            build_pipeline(request, shared_config)

    def test_missing_variant_options(self, container_request, shared_config):
        request = container_request.model_copy(update={"container": None})
        with pytest.raises(ConfigurationError, match="container"):
            build_pipeline(request, shared_config)

    def test_empty_owner(self, template_request, shared_config):
        source = template_request.source.model_copy(update={"owner": " "})
        request = template_request.model_copy(update={"source": source})
        with pytest.raises(ConfigurationError, match="source.owner"):
            build_pipeline(request, shared_config)

    def test_duplicate_environment_label(self, template_request, shared_config):
        request = template_request.model_copy(update={"environments": ["Test", "test"]})
        with pytest.raises(ConfigurationError, match="already used"):
            build_pipeline(request, shared_config)

    def test_label_cannot_shadow_build_stage(self, template_request, shared_config):
        request = template_request.model_copy(update={"environments": ["Build"]})
        with pytest.raises(ConfigurationError):
            build_pipeline(request, shared_config)

    def test_empty_environment_label(self, template_request, shared_config):
        request = template_request.model_copy(update={"environments": ["Test", ""]})
        with pytest.raises(ConfigurationError, match="empty"):
            build_pipeline(request, shared_config)

    def test_no_environments(self, template_request, shared_config):
        request = template_request.model_copy(update={"environments": []})
        with pytest.raises(ConfigurationError):
            build_pipeline(request, shared_config)


def test_custom_environments_keep_order(template_request, shared_config):
    request = template_request.model_copy(update={"environments": ["Beta", "Gamma", "Prod"]})
    pipeline, _, _ = build_pipeline(request, shared_config)
    assert pipeline.stage_names == ["Source", "Build", "Beta", "Gamma", "Prod"]


def test_no_notification_topic_is_a_warning(template_request, shared_config):
    config = shared_config.model_copy(update={"notification_topic": ""})
    pipeline, _, warnings = build_pipeline(template_request, config)
    assert pipeline.notification is None
    assert warnings


def test_summarize_pipeline(container_request, shared_config):
    pipeline, logs, _ = build_pipeline(container_request, shared_config)
    summary = summarize_pipeline(pipeline)

    assert summary.stages_count == 4
    assert summary.actions_count == 5
    assert summary.action_names == ["GitHubSource", "BaseImage", "CodeBuild", "DeployTest", "DeployProd"]
    assert summary.artifacts == ["SourceArtifact", "BaseImage", "BuildArtifact", "ImageDetails"]
    assert logs[-1].startswith("Пайплайн сформирован")


def test_pipeline_cannot_be_mutated_after_build(template_request, shared_config):
    pipeline, _, _ = build_pipeline(template_request, shared_config)

    with pytest.raises(AttributeError):
        pipeline.stages.append(pipeline.stages[0])
    with pytest.raises(AttributeError):
        pipeline.stage("Build").actions[0].inputs.append("BuildArtifact")
    assert pipeline.stage_names == ["Source", "Build", "Test", "Prod"]
