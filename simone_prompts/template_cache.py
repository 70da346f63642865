#!/usr/bin/python
# coding: utf-8

"""
Two-tier prompt and partial loading with modification-time validated caches.

Prompts live in `<project>/.simone/prompts/<name>.yaml` and override the
built-in prompts shipped in `simone_prompts/templates/prompts/`. Partials live
in a `partials/` directory under each tier and are included from a template
with `{% include "name" %}` or the shorthand `{{> name}}`.
"""

import re
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

import aiofiles
import aiofiles.os
import yaml
from jinja2 import DictLoader, Environment, Undefined
from jinja2.ext import Extension

from simone_prompts.config_resolver import METADATA_DIRECTORY
from simone_prompts.helpers import register_helpers
from simone_prompts.models import PromptDefinition
from simone_prompts.prompts import (
    PROMPT_PARSE_ERROR_HEADER,
    PROMPT_PARSE_ERROR_MESSAGE,
)
from simone_prompts.utils import get_templates_path

logger = logging.getLogger(__name__)

PROMPTS_DIRECTORY = "prompts"
PARTIALS_DIRECTORY = "partials"
PROMPT_SUFFIXES = (".yaml", ".yml")
PARTIAL_SUFFIXES = (".j2",)
TEMPLATE_MARKERS = ("{{", "{%", "{#")

FRONTMATTER_PATTERN = re.compile(r"^---[ \t]*\n(.*?)\n---[ \t]*\n", re.DOTALL)
PARTIAL_SHORTHAND_PATTERN = re.compile(r"\{\{>\s*([\w./-]+)\s*\}\}")
ENDRAW_PATTERN = re.compile(r"\{%-?\s*endraw\s*-?%\}")

CompiledTemplate = Callable[[Mapping[str, Any]], str]


class PartialShorthandExtension(Extension):
    """Accepts `{{> name}}` as shorthand for `{% include "name" %}`."""

    def preprocess(self, source, name, filename=None):
        return PARTIAL_SHORTHAND_PATTERN.sub(r'{% include "\1" %}', source)


def _blank_none(value: Any) -> Any:
    return "" if value is None else value


def raw_block(text: str) -> str:
    """Wrap text so the engine emits it verbatim."""
    return "{% raw %}" + ENDRAW_PATTERN.sub("", text) + "{% endraw %}"


@dataclass
class CacheEntry:
    """A loaded artifact and the modification time of the file it came from."""

    value: Any
    path: Path
    mtime: float

    def is_fresh(self, path: Path, mtime: float) -> bool:
        return self.path == path and self.mtime == mtime


@dataclass(frozen=True)
class FileSource:
    """One lookup tier: a directory and the file suffixes it may hold."""

    directory: Path
    suffixes: Sequence[str]
    tier: str

    async def locate(self, name: str) -> Optional[Path]:
        for suffix in self.suffixes:
            candidate = self.directory / f"{name}{suffix}"
            if await aiofiles.os.path.isfile(candidate):
                return candidate
        return None

    async def names(self) -> List[str]:
        if not await aiofiles.os.path.isdir(self.directory):
            return []
        try:
            entries = await aiofiles.os.listdir(self.directory)
        except OSError as e:
            logger.warning(f"Cannot list {self.tier} directory {self.directory}: {e}")
            return []
        return sorted(
            {
                Path(entry).stem
                for entry in entries
                if Path(entry).suffix in self.suffixes
            }
        )


def parse_prompt_source(source: str) -> PromptDefinition:
    """
    Parse a prompt file.

    Two layouts are accepted: a YAML document with a `template` key, or a
    front-matter block between `---` lines followed by the template body.

    Raises:
        yaml.YAMLError: Malformed YAML.
        ValueError: Not a mapping, or fails PromptDefinition validation.
    """
    match = FRONTMATTER_PATTERN.match(source)
    if match:
        meta = yaml.safe_load(match.group(1))
        if isinstance(meta, dict) and "template" not in meta:
            return PromptDefinition.model_validate(
                {**meta, "template": source[match.end() :]}
            )
    data = yaml.safe_load(source)
    if not isinstance(data, dict):
        raise ValueError("Prompt file must contain a mapping")
    return PromptDefinition.model_validate(data)


def error_prompt(name: str, error: Exception) -> PromptDefinition:
    message = PROMPT_PARSE_ERROR_MESSAGE.format(name=name, error=error)
    return PromptDefinition(
        name="error",
        description=f"Failed to parse prompt '{name}'",
        template=PROMPT_PARSE_ERROR_HEADER + raw_block(message) + "\n",
    )


def _valid_name(name: str) -> bool:
    return bool(name) and not name.startswith(".") and not re.search(r"[\\/]", name)


class TemplateCache:
    def __init__(self, project_path: str, builtin_directory: Optional[str] = None):
        builtin_prompts = Path(builtin_directory or get_templates_path())
        project_prompts = Path(project_path) / METADATA_DIRECTORY / PROMPTS_DIRECTORY

        self.prompt_sources = [
            FileSource(project_prompts, PROMPT_SUFFIXES, "project"),
            FileSource(builtin_prompts, PROMPT_SUFFIXES, "built-in"),
        ]
        self.partial_sources = [
            FileSource(
                project_prompts / PARTIALS_DIRECTORY, PARTIAL_SUFFIXES, "project"
            ),
            FileSource(
                builtin_prompts / PARTIALS_DIRECTORY, PARTIAL_SUFFIXES, "built-in"
            ),
        ]

        self._prompt_cache: Dict[str, CacheEntry] = {}
        self._partial_cache: Dict[str, CacheEntry] = {}
        self._compiled_cache: Dict[str, CompiledTemplate] = {}
        self._registered_partials: Dict[str, str] = {}

        self.environment = Environment(
            loader=DictLoader(self._registered_partials),
            autoescape=False,
            undefined=Undefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            finalize=_blank_none,
            extensions=[PartialShorthandExtension],
        )
        register_helpers(self.environment)

    async def _read_source(self, path: Path) -> str:
        async with aiofiles.open(path, "r", encoding="utf-8") as source_file:
            return await source_file.read()

    async def _mtime(self, path: Path) -> float:
        stat = await aiofiles.os.stat(path)
        return stat.st_mtime

    async def _locate(self, sources: List[FileSource], name: str) -> Optional[Path]:
        if not _valid_name(name):
            logger.warning(f"Rejected template name: {name!r}")
            return None
        for source in sources:
            path = await source.locate(name)
            if path is not None:
                logger.debug(f"Resolved '{name}' from {source.tier} tier: {path}")
                return path
        return None

    async def _load_cached(
        self,
        cache: Dict[str, CacheEntry],
        sources: List[FileSource],
        name: str,
        parse: Callable[[str], Any],
    ) -> Optional[CacheEntry]:
        path = await self._locate(sources, name)
        if path is None:
            cache.pop(name, None)
            return None
        try:
            mtime = await self._mtime(path)
        except OSError as e:
            logger.warning(f"Could not stat {path}: {e}")
            cache.pop(name, None)
            return None

        cached = cache.get(name)
        if cached is not None and cached.is_fresh(path, mtime):
            return cached

        source = await self._read_source(path)
        entry = CacheEntry(value=parse(source), path=path, mtime=mtime)
        cache[name] = entry
        return entry

    async def load_prompt(
        self, name: str, error_level: int = logging.ERROR
    ) -> Optional[PromptDefinition]:
        """
        Load a prompt definition, project tier first.

        Parse failures are logged at `error_level`.

        Returns:
            PromptDefinition: The parsed prompt, or a sentinel named "error" when
                the winning file cannot be read or parsed.
            None: When neither tier has the prompt.
        """
        try:
            entry = await self._load_cached(
                self._prompt_cache, self.prompt_sources, name, parse_prompt_source
            )
        except (OSError, UnicodeDecodeError, yaml.YAMLError, ValueError) as e:
            logger.log(error_level, f"Failed to parse prompt '{name}': {e}")
            return error_prompt(name, e)
        if entry is None:
            logger.debug(f"Prompt '{name}' not found in any tier")
            return None
        return entry.value

    async def load_partial(self, name: str) -> Optional[str]:
        try:
            entry = await self._load_cached(
                self._partial_cache, self.partial_sources, name, str
            )
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read partial '{name}': {e}")
            return None
        return entry.value if entry is not None else None

    async def load_partials(self) -> Dict[str, str]:
        """Every partial discoverable in either tier, project copies winning."""
        names: List[str] = []
        for source in self.partial_sources:
            for name in await source.names():
                if name not in names:
                    names.append(name)

        partials = {}
        for name in names:
            text = await self.load_partial(name)
            if text is not None:
                partials[name] = text
        return partials

    async def list_prompt_names(self) -> List[str]:
        names: List[str] = []
        for source in self.prompt_sources:
            for name in await source.names():
                if name not in names:
                    names.append(name)
        return names

    def is_template(self, text: Any) -> bool:
        if not isinstance(text, str):
            return False
        return any(marker in text for marker in TEMPLATE_MARKERS)

    async def compile_template(self, template_body: str) -> CompiledTemplate:
        """
        Compile a template body, reusing the artifact for identical text.

        Partials are re-registered first so includes see current files.

        Raises:
            jinja2.TemplateSyntaxError: The body is not a valid template.
        """
        partials = await self.load_partials()
        self._registered_partials.clear()
        self._registered_partials.update(partials)

        compiled = self._compiled_cache.get(template_body)
        if compiled is None:
            compiled = self.environment.from_string(template_body).render
            self._compiled_cache[template_body] = compiled
        return compiled

    async def render(self, template_body: str, context: Mapping[str, Any]) -> str:
        compiled = await self.compile_template(template_body)
        return compiled(context)

    def clear_cache(self) -> None:
        """Drop prompt and partial entries. Compiled templates are kept."""
        self._prompt_cache.clear()
        self._partial_cache.clear()
        logger.debug("Cleared prompt and partial caches")
