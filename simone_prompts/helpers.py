#!/usr/bin/python
# coding: utf-8

"""
Comparison helpers available inside template conditionals:

    {% if eq(priority, "high") %}...{% elif gte(score, 80) %}...{% endif %}

Missing data never satisfies an ordering: an undefined variable, None or
NaN on either side makes lt/lte/gt/gte false.
"""

import math
import logging
import operator
from numbers import Number
from typing import Any, Callable, Dict

from jinja2 import Environment, Undefined

logger = logging.getLogger(__name__)

REGISTERED_FLAG = "comparison_helpers_registered"


def _is_number(value: Any) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


def _is_missing(value: Any) -> bool:
    if value is None or isinstance(value, Undefined):
        return True
    return isinstance(value, float) and math.isnan(value)


def eq(a: Any, b: Any) -> bool:
    """Strict equality: no coercion between types, so 5 != "5" and 0 != False."""
    if _is_number(a) and _is_number(b):
        return a == b
    if type(a) is not type(b):
        return False
    return a == b


def _ordered(
    compare: Callable[[Any, Any], bool], name: str
) -> Callable[[Any, Any], bool]:
    def helper(a: Any, b: Any) -> bool:
        if _is_missing(a) or _is_missing(b):
            return False
        try:
            return bool(compare(a, b))
        except TypeError:
            # Operands of unrelated types have no order.
            return False

    helper.__name__ = name
    return helper


lt = _ordered(operator.lt, "lt")
lte = _ordered(operator.le, "lte")
gt = _ordered(operator.gt, "gt")
gte = _ordered(operator.ge, "gte")

HELPERS: Dict[str, Callable[[Any, Any], bool]] = {
    "eq": eq,
    "lt": lt,
    "lte": lte,
    "gt": gt,
    "gte": gte,
}


def register_helpers(environment: Environment) -> Environment:
    """Expose the comparison helpers on the engine. Safe to call repeatedly."""
    if getattr(environment, REGISTERED_FLAG, False):
        return environment
    environment.globals.update(HELPERS)
    environment.extend(**{REGISTERED_FLAG: True})
    logger.debug(f"Registered template helpers: {', '.join(sorted(HELPERS))}")
    return environment
