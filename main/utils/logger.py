# -*- coding: utf-8 -*-
"""
Centralized Logger Setup for the N-Queens Solver

This module provides the console logging used by every part of the solver:
generation progress, device selection, results and errors.

Why (Purpose and Necessity):
The solver reports a line per generation and a final verdict. Routing those
through loggers instead of print() gives every message a timestamp and the
emitting module, lets the CLI change verbosity in one place, and lets tests
capture the output.

What (Implementation Details):
- Uses Python's logging module with a colorama-coloured formatter
- ERROR/CRITICAL (red), WARNING (yellow), INFO (white), DEBUG (green)
- Output format: [timestamp] [module] [LEVEL] message
- Loggers created here write to stdout and do not propagate, so messages
  are never printed twice
"""

import logging
import sys
from datetime import datetime
from typing import Union

import colorama
from colorama import Fore, Style

colorama.init(autoreset=True)

# Loggers handed out by get_logger(), so their level can be changed later.
_MANAGED_LOGGERS = {}


class ColoredFormatter(logging.Formatter):
    """
    Formatter that colours the level name and message by severity.

    Args:
        use_colors (bool): Whether to emit ANSI colour codes. Defaults to True.
    """

    COLORS = {
        'DEBUG': Fore.GREEN,
        'INFO': Fore.WHITE,
        'WARNING': Fore.YELLOW,
        'ERROR': Fore.RED,
        'CRITICAL': Fore.RED + Style.BRIGHT
    }

    def __init__(self, use_colors: bool = True):
        self.use_colors = use_colors
        super().__init__()

    def format(self, record):
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        # Drop package prefixes for a shorter module column
        module_name = record.name.split('.')[-1]
        level_name = record.levelname
        message = record.getMessage()

        if self.use_colors and level_name in self.COLORS:
            color = self.COLORS[level_name]
            level_name = f"{color}{level_name}{Style.RESET_ALL}"
            message = f"{color}{message}{Style.RESET_ALL}"

        formatted = f"[{timestamp}] [{module_name}] [{level_name}] {message}"
        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)
        return formatted


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level '{level}'")
        return resolved
    return level


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(ColoredFormatter(use_colors=sys.stdout.isatty()))
    return handler


def get_logger(name: str, level: Union[int, str] = logging.INFO) -> logging.Logger:
    """
    Get a configured logger instance for the specified module.

    Args:
        name (str): The name of the logger (typically __name__ from the calling module).
        level (int or str, optional): The logging level. Defaults to logging.INFO.

    Returns:
        logging.Logger: A logger writing coloured lines to stdout.
    """
    logger = logging.getLogger(name)

    # Prevent adding multiple handlers to the same logger
    if logger.handlers:
        return logger

    level = _resolve_level(level)
    logger.setLevel(level)
    logger.addHandler(_console_handler(level))
    logger.propagate = False

    _MANAGED_LOGGERS[name] = logger
    return logger


def set_log_level(level: Union[int, str]) -> None:
    """
    Changes the level of every logger created through get_logger().

    Args:
        level (int or str): A logging level such as logging.DEBUG or "DEBUG".
    """
    level = _resolve_level(level)
    for logger in _MANAGED_LOGGERS.values():
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)
    logging.getLogger().setLevel(level)


def configure_root_logger(level: Union[int, str] = logging.INFO) -> None:
    """
    Configure the root logger so messages from third-party libraries
    share the solver's format.

    Args:
        level (int or str, optional): The logging level for the root logger. Defaults to logging.INFO.
    """
    level = _resolve_level(level)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.addHandler(_console_handler(level))
