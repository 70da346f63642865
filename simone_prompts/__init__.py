#!/usr/bin/env python
# coding: utf-8

import importlib
import inspect

# List of modules to import from
MODULES = [
    "simone_prompts.models",
    "simone_prompts.config_resolver",
    "simone_prompts.context_builder",
    "simone_prompts.helpers",
    "simone_prompts.template_cache",
    "simone_prompts.prompt_resolver",
]

# Initialize __all__ to expose all public classes and functions
__all__ = []

# Dynamically import all classes and functions from the specified modules
for module_name in MODULES:
    module = importlib.import_module(module_name)
    for name, obj in inspect.getmembers(module):
        # Include only classes and functions defined in this package
        if (inspect.isclass(obj) or inspect.isfunction(obj)) and not name.startswith(
            "_"
        ):
            if getattr(obj, "__module__", "").startswith("simone_prompts"):
                globals()[name] = obj
                if name not in __all__:
                    __all__.append(name)
