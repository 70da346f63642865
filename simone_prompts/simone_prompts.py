#!/usr/bin/env python
# coding: utf-8

"""
A command-line tool for listing and rendering Simone prompts for a project,
resolving project-local overrides, configuration and argument defaults the
same way the prompt server does.
"""

import sys
import json
import asyncio
import argparse
import logging
from typing import List, Optional

from jinja2 import TemplateError

from simone_prompts.config_resolver import PROJECT_PATH_REQUIRED, get_env_config
from simone_prompts.models import EnvConfig
from simone_prompts.prompt_resolver import PromptResolver
from simone_prompts.utils import parse_argument_pairs


def setup_logging(debug: bool = False, log_file: Optional[str] = None):
    logger = logging.getLogger("simone_prompts")
    logger.setLevel(logging.DEBUG)

    # Clear any existing handlers to avoid duplicate logs
    logger.handlers.clear()

    if log_file:
        # Log to a file when running next to a protocol server
        handler = logging.FileHandler(log_file, mode="a")
        handler.setLevel(logging.DEBUG if debug else logging.ERROR)
    else:
        # Log to stderr so rendered prompts on stdout stay clean
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(logging.DEBUG if debug else logging.INFO)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    return logger


async def list_prompts(resolver: PromptResolver, as_json: bool = False) -> str:
    prompts = await resolver.list_available_prompts()
    if as_json:
        return json.dumps(
            [prompt.model_dump(exclude={"template"}) for prompt in prompts],
            indent=2,
            default=str,
        )
    lines = []
    for prompt in prompts:
        heading = prompt.name
        if prompt.description:
            heading = f"{prompt.name}: {prompt.description}"
        lines.append(heading)
        for argument in prompt.arguments:
            required = "required" if argument.required else "optional"
            lines.append(f"    {argument.name} ({required}) {argument.description}")
    return "\n".join(lines)


async def render_prompt(
    resolver: PromptResolver, name: str, arguments: dict, as_json: bool = False
) -> str:
    messages = await resolver.resolve(name, arguments)
    if as_json:
        return json.dumps([message.model_dump() for message in messages], indent=2)
    return "\n".join(message.content.text for message in messages)


def build_parser(env: Optional[EnvConfig] = None) -> argparse.ArgumentParser:
    """Argument defaults come from the environment settings."""
    env = env or get_env_config(require_project_path=False)
    parser = argparse.ArgumentParser(description="Simone Prompt Utility")
    parser.add_argument(
        "--project-path",
        default=env.project_path,
        help="Project root (default: PROJECT_PATH environment variable)",
    )
    parser.add_argument(
        "--builtin-templates",
        default=env.builtin_templates,
        help="Directory holding the built-in prompts (default: shipped prompts)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=env.debug,
        help="Verbose logging",
    )
    parser.add_argument(
        "--log-file",
        default=env.log_file,
        help="Write logs to this file instead of stderr",
    )
    parser.add_argument(
        "--json", action="store_true", help="Print machine readable output"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("list", help="List available prompts")
    render_parser = subparsers.add_parser("render", help="Render a prompt")
    render_parser.add_argument("name", help="Prompt name")
    render_parser.add_argument(
        "-a",
        "--arg",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Prompt argument, may be repeated",
    )
    return parser


def simone_prompts(argv: Optional[List[str]] = None) -> int:
    """
    Process command-line arguments and run the requested prompt operation.

    Returns:
        int: Process exit status.
    """
    args = build_parser().parse_args(argv)
    logger = setup_logging(debug=args.debug, log_file=args.log_file)

    try:
        if not args.project_path:
            raise ValueError(PROJECT_PATH_REQUIRED)
        resolver = PromptResolver(
            args.project_path, builtin_directory=args.builtin_templates
        )
        if args.command == "list":
            output = asyncio.run(list_prompts(resolver, as_json=args.json))
        else:
            arguments = parse_argument_pairs(args.arg)
            output = asyncio.run(
                render_prompt(resolver, args.name, arguments, as_json=args.json)
            )
    except TemplateError as e:
        logger.error(f"Template error: {e}")
        print(f"Error: prompt template is invalid: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        logger.error(f"Invalid input: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(output)
    return 0


def main():
    """
    Entry point for the command-line tool.
    """
    sys.exit(simone_prompts(sys.argv[1:]))


if __name__ == "__main__":
    main()
