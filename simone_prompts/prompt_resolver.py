#!/usr/bin/python
# coding: utf-8

import os
import logging
from typing import Any, Dict, List, Mapping, Optional

import aiofiles
import aiofiles.os

from simone_prompts.config_resolver import ConfigResolver, METADATA_DIRECTORY
from simone_prompts.context_builder import build_template_context
from simone_prompts.models import (
    PromptDefinition,
    PromptMessage,
    TextContent,
)
from simone_prompts.prompts import CONSTITUTION_READ_ERROR, PROMPT_NOT_FOUND_TEMPLATE
from simone_prompts.template_cache import TemplateCache

logger = logging.getLogger(__name__)

CONSTITUTION_FILE_NAME = "constitution.md"


class PromptResolver:
    """
    Turns a prompt name plus caller arguments into the message sent to a model.

    Context layers, later wins key by key:
        base context < project config < argument defaults < constitution < caller
    """

    def __init__(
        self,
        project_path: str,
        template_cache: Optional[TemplateCache] = None,
        config_resolver: Optional[ConfigResolver] = None,
        builtin_directory: Optional[str] = None,
    ):
        self.project_path = project_path
        self.template_cache = template_cache or TemplateCache(
            project_path, builtin_directory=builtin_directory
        )
        self.config_resolver = config_resolver or ConfigResolver(project_path)
        self.constitution_path = os.path.join(
            project_path, METADATA_DIRECTORY, CONSTITUTION_FILE_NAME
        )

    async def resolve(
        self, name: str, arguments: Optional[Mapping[str, Any]] = None
    ) -> List[PromptMessage]:
        """
        Render a prompt into a single user message.

        Missing prompts, broken prompt files and unreadable constitution files
        come back as diagnostic text in the message.

        Raises:
            jinja2.TemplateError: The prompt template itself is defective, either
                at compile time or while rendering.
        """
        arguments = dict(arguments or {})
        base_context = build_template_context(self.project_path)

        prompt = await self.template_cache.load_prompt(name)
        if prompt is None:
            logger.warning(f"Prompt '{name}' not found")
            text = await self.template_cache.render(
                PROMPT_NOT_FOUND_TEMPLATE, {**base_context, "prompt_name": name}
            )
            return [_user_message(text)]

        seed_context = {**base_context, **self._config_snapshot()}
        defaults = await self._resolve_defaults(prompt, arguments, seed_context)
        await self._preload_partials(prompt)

        context = {**seed_context, **defaults}
        constitution = await self._load_constitution()
        if constitution is not None:
            context["constitution"] = constitution
        context.update(arguments)

        text = await self.template_cache.render(prompt.template, context)
        return [_user_message(text)]

    def _config_snapshot(self) -> Dict[str, Any]:
        return self.config_resolver.get_config().snapshot()

    async def _resolve_defaults(
        self,
        prompt: PromptDefinition,
        arguments: Mapping[str, Any],
        seed_context: Mapping[str, Any],
    ) -> Dict[str, Any]:
        defaults = {}
        for argument in prompt.arguments:
            if argument.name in arguments or not argument.has_default:
                continue
            if self.template_cache.is_template(argument.default):
                defaults[argument.name] = await self.template_cache.render(
                    argument.default, seed_context
                )
            else:
                defaults[argument.name] = argument.default
        return defaults

    async def _preload_partials(self, prompt: PromptDefinition) -> None:
        for partial_name in prompt.partials:
            if await self.template_cache.load_partial(partial_name) is None:
                logger.warning(
                    f"Prompt '{prompt.name}' declares missing partial '{partial_name}'"
                )

    async def _load_constitution(self) -> Optional[str]:
        if not await aiofiles.os.path.exists(self.constitution_path):
            return None
        try:
            async with aiofiles.open(
                self.constitution_path, "r", encoding="utf-8"
            ) as constitution_file:
                return await constitution_file.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read {self.constitution_path}: {e}")
            return CONSTITUTION_READ_ERROR.format(error=e)

    async def list_available_prompts(self) -> List[PromptDefinition]:
        """Every prompt that loads cleanly, project tier first."""
        prompts = []
        for name in await self.template_cache.list_prompt_names():
            prompt = await self.template_cache.load_prompt(
                name, error_level=logging.DEBUG
            )
            if prompt is None or prompt.is_error:
                logger.debug(f"Skipping prompt '{name}' in listing")
                continue
            prompts.append(prompt)
        return prompts

    def clear_cache(self) -> None:
        self.template_cache.clear_cache()


def _user_message(text: str) -> PromptMessage:
    return PromptMessage(role="user", content=TextContent(text=text))
