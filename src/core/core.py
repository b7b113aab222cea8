from typing import Optional

from exception import ConfigurationError
from model import PipelineSpec
from .config import SharedConfig, load_shared_config
from .models import BuildResponse, PipelineRequest
from .renders import RENDERS
from .services.builders import pipeline as builder
from .services.git_module import GitRemoteResolver
from .services.git_module.exceptions import GitExceptions


class Pipe2CloudCore:
    def __init__(self, config: Optional[SharedConfig] = None):
        self.config = config or load_shared_config()
        self.git = GitRemoteResolver()
        self.logs: list[str] = []
        self.warnings: list[str] = []
        self.ci_templates: dict[str, str] = {}
        self.pipeline: Optional[PipelineSpec] = None

    def source_from_git(self, request: PipelineRequest, repo_path: str) -> PipelineRequest:
        """
        Подменяет owner/repo/branch в запросе на значения из локального клона.
        """
        coords = self.git.resolve(repo_path)
        self.logs.extend(coords.logs)

        source = request.source.model_copy(
            update={
                "owner": coords.owner,
                "repo": coords.repo,
                "branch": coords.branch or request.source.branch,
            }
        )
        if coords.branch is None:
            self.warnings.append(
                f"Не удалось определить ветку в {coords.repo_path}, используется {source.branch}."
            )
        return request.model_copy(update={"source": source})

    def create_pipeline(
        self,
        request: PipelineRequest,
        render_type: str = "cloudformation",
        fmt: str = "yaml",
        repo_path: Optional[str] = None,
    ) -> BuildResponse:
        try:
            if repo_path is not None:
                request = self.source_from_git(request, repo_path)

            # 1) Строим абстрактный пайплайн
            pipeline, pipeline_logs, pipeline_warnings = builder.build_pipeline(
                request, self.config
            )
            self.logs.extend(pipeline_logs)
            self.warnings.extend(pipeline_warnings)

            # 1.1) Краткое резюме
            pipeline_summary = builder.summarize_pipeline(pipeline)

            # 2) Рендерим
            render = RENDERS.get(render_type)
            if render is None:
                raise ConfigurationError(
                    description=f"Unknown render type {render_type!r}. "
                    f"Available: {', '.join(RENDERS)}"
                )
            try:
                self.ci_templates[render_type] = render(pipeline, fmt)
            except ValueError as e:
                raise ConfigurationError(description=str(e))
            self.pipeline = pipeline

        except GitExceptions as e:
            self.logs.extend(e.logs)
            self.warnings.append(
                "Не удалось прочитать координаты репозитория из локального клона. "
                "Проверьте путь и remote origin."
            )
            self.warnings.append("Пайплайн не сгенерирован.")
            return self._error()
        except ConfigurationError as e:
            self.logs.extend(e.logs)
            self.warnings.append(f"Конфигурация пайплайна некорректна: {e.description}")
            self.warnings.append("Пайплайн не сгенерирован.")
            return self._error()

        return BuildResponse(
            status="ok",
            ci_templates=self.ci_templates,
            warnings=self.warnings,
            logs=self.logs,
            pipeline_summary=pipeline_summary,
        )

    def _error(self) -> BuildResponse:
        self.ci_templates = {}
        self.pipeline = None
        return BuildResponse(
            status="error",
            ci_templates={},
            warnings=self.warnings,
            logs=self.logs,
            pipeline_summary=None,
        )
