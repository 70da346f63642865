from typing import List, Optional, Any, Dict, Literal
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProjectInfo(BaseModel):
    # YAML reads `name: 2024` or `version: 1.0` as numbers
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    name: str = Field(..., description="Project name, mandatory")
    description: Optional[Any] = Field(default=None, description="Free text summary")
    type: Optional[Any] = Field(
        default=None, description="Project layout, e.g. 'single' or 'monorepo'"
    )
    version: Optional[Any] = Field(default=None, description="Project version")


class SharedConfig(BaseModel):
    """Settings applied to every context before context-specific overrides."""

    model_config = ConfigDict(extra="allow")

    tooling: Optional[Dict[str, Any]] = Field(default=None)
    methodology: Optional[Dict[str, Any]] = Field(default=None)


class ContextConfig(BaseModel):
    """A named sub-project with its own path and tool settings."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    name: str = Field(..., description="Unique context name")
    path: Optional[Any] = Field(default=None, description="Path relative to project")
    tooling: Optional[Dict[str, Any]] = Field(default=None)
    methodology: Optional[Dict[str, Any]] = Field(default=None)


class ProjectConfig(BaseModel):
    model_config = ConfigDict(extra="allow")

    project: ProjectInfo
    shared: Optional[SharedConfig] = Field(default=None)
    contexts: List[ContextConfig] = Field(
        ..., description="Declared contexts, in file order"
    )

    def snapshot(self) -> Dict[str, Any]:
        """Plain data holding exactly the keys present in the source config."""
        return self.model_dump(exclude_unset=True)


class ResolvedContext(BaseModel):
    """Read-only view of a context merged over the shared settings."""

    model_config = ConfigDict(extra="allow", frozen=True, coerce_numbers_to_str=True)

    name: str
    path: Optional[Any] = None
    tooling: Optional[Dict[str, Any]] = None
    methodology: Optional[Dict[str, Any]] = None
    resolved_tooling: Dict[str, Any] = Field(default_factory=dict)
    resolved_methodology: Dict[str, Any] = Field(default_factory=dict)


class PromptArgument(BaseModel):
    name: str = Field(..., description="Argument name as referenced by the template")
    description: str = Field(default="", description="Human readable description")
    required: bool = Field(default=False)
    default: Any = Field(
        default=None,
        description="Fallback value; strings may themselves contain template syntax",
    )

    @field_validator("description", mode="before")
    def none_to_empty(cls, v):
        return "" if v is None else v

    @property
    def has_default(self) -> bool:
        return self.default is not None


class PromptDefinition(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = Field(..., description="Prompt name")
    description: str = Field(default="")
    arguments: List[PromptArgument] = Field(default_factory=list)
    partials: List[str] = Field(
        default_factory=list, description="Partial names to preload before rendering"
    )
    template: str = Field(..., description="Template body")

    @field_validator("description", mode="before")
    def none_to_empty(cls, v):
        return "" if v is None else v

    @field_validator("arguments", "partials", mode="before")
    def none_to_list(cls, v):
        if v is None:
            return []
        return v

    @property
    def is_error(self) -> bool:
        return self.name == "error"


class TextContent(BaseModel):
    type: Literal["text"] = "text"
    text: str


class PromptMessage(BaseModel):
    role: Literal["user", "assistant"] = "user"
    content: TextContent


class EnvConfig(BaseModel):
    """Process settings read from the environment."""

    project_path: Optional[str] = Field(
        default=None, description="Root of the project being served"
    )
    debug: bool = Field(default=False)
    log_file: Optional[str] = Field(default=None)
    builtin_templates: Optional[str] = Field(
        default=None, description="Override for the built-in prompt directory"
    )
