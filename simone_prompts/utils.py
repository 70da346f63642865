#!/usr/bin/python
# coding: utf-8

from pathlib import Path
from typing import Union, List, Dict
from importlib.resources import files, as_file


def to_boolean(string: Union[str, bool] = None) -> bool:
    if isinstance(string, bool):
        return string
    if not string:
        return False
    normalized = str(string).strip().lower()
    true_values = {"t", "true", "y", "yes", "1"}
    false_values = {"f", "false", "n", "no", "0"}
    if normalized in true_values:
        return True
    elif normalized in false_values:
        return False
    else:
        raise ValueError(f"Cannot convert '{string}' to boolean")


def retrieve_package_name() -> str:
    """
    Returns the top-level package name of the module that imported this utils.py.
    """
    if __package__:
        top = __package__.partition(".")[0]
        if top and top != "__main__":
            return top

    file_path = Path(__file__).resolve()
    for parent in file_path.parents:
        if (parent / "setup.py").is_file() or (parent / "__init__.py").is_file():
            return parent.name

    return "simone_prompts"


def get_templates_path() -> str:
    """Location of the built-in prompt tier shipped with the package."""
    templates_dir = files(retrieve_package_name()) / "templates" / "prompts"
    with as_file(templates_dir) as path:
        templates_path = str(path)
    return templates_path


def parse_argument_pairs(pairs: List[str] = None) -> Dict[str, str]:
    """
    Turns ["key=value", ...] into a dict. Later pairs win on duplicate keys.
    """
    arguments = {}
    for pair in pairs or []:
        if "=" not in pair:
            raise ValueError(f"Argument '{pair}' must be in key=value form")
        key, value = pair.split("=", 1)
        key = key.strip()
        if not key:
            raise ValueError(f"Argument '{pair}' has an empty key")
        arguments[key] = value
    return arguments
