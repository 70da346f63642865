PROMPT_NOT_FOUND_TEMPLATE = """An error happened while resolving the prompt.

Prompt '{{ prompt_name }}' not found.
Looked in {{ PROJECT_PATH }}/.simone/prompts and in the built-in prompts.
"""

PROMPT_PARSE_ERROR_HEADER = "An error happened while loading the prompt.\n\n"

PROMPT_PARSE_ERROR_MESSAGE = "Failed to parse prompt '{name}': {error}"

CONSTITUTION_READ_ERROR = "[Failed to read constitution.md: {error}]"
