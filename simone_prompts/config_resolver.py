#!/usr/bin/python
# coding: utf-8

import os
import logging
from typing import Any, Callable, Dict, List, Optional

import yaml
from pydantic import ValidationError

from simone_prompts.context_builder import derive_project_name
from simone_prompts.models import EnvConfig, ProjectConfig, ResolvedContext
from simone_prompts.utils import to_boolean

logger = logging.getLogger(__name__)

METADATA_DIRECTORY = ".simone"
CONFIG_FILE_NAME = "project.yaml"
PROJECT_PATH_REQUIRED = "PROJECT_PATH environment variable is required"


def get_env_config(require_project_path: bool = True) -> EnvConfig:
    """
    Reads process settings from the environment.

    Args:
        require_project_path (bool): Fail when PROJECT_PATH is unset. The CLI
            passes False because --project-path may supply it instead.

    Raises:
        ValueError: If PROJECT_PATH is required and not set, or SIMONE_DEBUG
            is not a boolean.
    """
    project_path = os.environ.get("PROJECT_PATH", None) or None
    if require_project_path and not project_path:
        raise ValueError(PROJECT_PATH_REQUIRED)
    return EnvConfig(
        project_path=project_path,
        debug=to_boolean(os.environ.get("SIMONE_DEBUG", "False")),
        log_file=os.environ.get("SIMONE_LOG_FILE", None),
        builtin_templates=os.environ.get("SIMONE_BUILTIN_TEMPLATES", None),
    )


def _read_file(path: str) -> str:
    with open(path, "r", encoding="utf-8") as config_file:
        return config_file.read()


class ConfigResolver:
    """Loads .simone/project.yaml and derives per-context merged settings."""

    def __init__(
        self, project_path: str, reader: Optional[Callable[[str], str]] = None
    ):
        self.project_path = project_path
        self.config_path = os.path.join(
            project_path, METADATA_DIRECTORY, CONFIG_FILE_NAME
        )
        self._reader = reader or _read_file
        self._config: Optional[ProjectConfig] = None

    def default_config(self) -> ProjectConfig:
        name = derive_project_name(self.project_path) or "unnamed-project"
        return ProjectConfig.model_validate(
            {
                "project": {"name": name, "type": "single"},
                "contexts": [
                    {
                        "name": "main",
                        "path": "./",
                        "stack": {"language": "unknown"},
                        "tooling": {},
                    }
                ],
            }
        )

    def load(self) -> ProjectConfig:
        """
        Load the project configuration, once.

        A missing file is a supported state. A broken file never raises: the
        failure is logged and the built-in default is used instead.

        Returns:
            ProjectConfig: The validated configuration or the default.
        """
        if self._config is not None:
            return self._config

        if not os.path.exists(self.config_path):
            logger.debug(f"No config at {self.config_path}, using defaults")
            self._config = self.default_config()
            return self._config

        try:
            raw = yaml.safe_load(self._reader(self.config_path))
            if not isinstance(raw, dict):
                raise ValueError("Config root must be a mapping")
            self._config = ProjectConfig.model_validate(raw)
        except (yaml.YAMLError, ValidationError, ValueError) as e:
            logger.error(f"Invalid config {self.config_path}: {e}")
            self._config = self.default_config()
        except Exception as e:
            logger.error(f"Failed to read config {self.config_path}: {e}")
            self._config = self.default_config()
        return self._config

    def get_config(self) -> ProjectConfig:
        return self.load()

    def get_resolved_contexts(self) -> List[ResolvedContext]:
        config = self.get_config()
        shared_tooling = {}
        shared_methodology = {}
        if config.shared is not None:
            shared_tooling = config.shared.tooling or {}
            shared_methodology = config.shared.methodology or {}

        resolved = []
        for context in config.contexts:
            fields = context.model_dump(exclude_unset=True)
            fields["resolved_tooling"] = {**shared_tooling, **(context.tooling or {})}
            fields["resolved_methodology"] = {
                **shared_methodology,
                **(context.methodology or {}),
            }
            resolved.append(ResolvedContext(**fields))
        return resolved

    def is_feature_enabled(self, feature_path: str) -> bool:
        """
        True if any context has `enabled: true` at the dotted path.

        The `tooling` and `methodology` roots are looked up in the merged
        view, so a feature enabled only under `shared` counts.
        """
        segments = [segment for segment in feature_path.split(".") if segment]
        if not segments:
            return False
        for context in self.get_resolved_contexts():
            if _lookup_enabled(_feature_view(context), segments):
                return True
        return False


def _feature_view(context: ResolvedContext) -> Dict[str, Any]:
    view = context.model_dump()
    view["tooling"] = context.resolved_tooling
    view["methodology"] = context.resolved_methodology
    return view


def _lookup_enabled(data: Dict[str, Any], segments: List[str]) -> bool:
    current: Any = data
    for segment in segments:
        if not isinstance(current, dict) or segment not in current:
            return False
        current = current[segment]
    return isinstance(current, dict) and current.get("enabled") is True
