"""Kite Runtime — values, environments and settings used to run Kite programs."""

from kite_runtime.config import get_config, parser_options
from kite_runtime.objects import (
    KiteObject,
    Integer,
    Boolean,
    String,
    Null,
    ReturnValue,
    Function,
    Environment,
    TRUE,
    FALSE,
    NULL,
)
from kite_runtime.exceptions import (
    KiteRuntimeError,
    KiteTypeError,
    KiteNameError,
    KiteZeroDivisionError,
    KiteConfigError,
)

__all__ = [
    "get_config", "parser_options",
    "KiteObject", "Integer", "Boolean", "String", "Null", "ReturnValue",
    "Function", "Environment", "TRUE", "FALSE", "NULL",
    "KiteRuntimeError", "KiteTypeError", "KiteNameError",
    "KiteZeroDivisionError", "KiteConfigError",
]
