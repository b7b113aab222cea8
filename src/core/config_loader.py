import copy
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from exception import ConfigurationError
from .config import SharedConfig
from .models import PipelineRequest
from .presets import PRESETS


class ConfigLoader:
    """Загрузка описаний пайплайнов из YAML-файлов и встроенных пресетов"""

    @staticmethod
    def load_from_yaml(file_path: str, shared: Optional[SharedConfig] = None) -> PipelineRequest:
        """Загрузить описание пайплайна из YAML-файла"""
        try:
            with open(file_path, "r", encoding="utf-8") as file:
                config_dict = yaml.safe_load(file)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(description=f"Cannot read pipeline config {file_path}: {e}")

        if not isinstance(config_dict, dict):
            raise ConfigurationError(description=f"Empty or invalid YAML file: {file_path}")

        return ConfigLoader.load_from_dict(config_dict, shared)

    @staticmethod
    def load_from_dict(
        config_dict: Dict[str, Any], shared: Optional[SharedConfig] = None
    ) -> PipelineRequest:
        """
        Собрать PipelineRequest из словаря.

        Если в описании нет блока source, координаты репозитория берутся
        из общего конфига (PIPE2CLOUD_GITHUB_OWNER / PIPE2CLOUD_GITHUB_REPO).
        """
        processed = copy.deepcopy(config_dict)
        if "source" not in processed:
            shared = shared or SharedConfig()
            processed["source"] = {"owner": shared.github_owner, "repo": shared.github_repo}

        try:
            return PipelineRequest.model_validate(processed)
        except ValidationError as e:
            raise ConfigurationError(description=f"Invalid pipeline config: {e}")

    @staticmethod
    def load_preset(name: str, shared: Optional[SharedConfig] = None) -> PipelineRequest:
        if name not in PRESETS:
            raise ConfigurationError(
                description=f"Unknown preset {name!r}. Available: {', '.join(sorted(PRESETS))}"
            )
        return ConfigLoader.load_from_dict(PRESETS[name], shared)

    @staticmethod
    def load(pipeline: str, shared: Optional[SharedConfig] = None) -> PipelineRequest:
        """Имя пресета или путь до YAML-файла"""
        if pipeline in PRESETS:
            return ConfigLoader.load_preset(pipeline, shared)
        if Path(pipeline).suffix in (".yml", ".yaml"):
            return ConfigLoader.load_from_yaml(pipeline, shared)
        raise ConfigurationError(
            description=f"{pipeline!r} is neither a preset nor a YAML file. "
            f"Presets: {', '.join(sorted(PRESETS))}"
        )
