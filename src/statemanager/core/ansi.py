# SPDX-FileCopyrightText: 2026 StateManager Developers
# SPDX-License-Identifier: Apache-2.0

"""ANSI color codes and methods."""


# type annotations
from __future__ import annotations
from typing import Callable, Tuple

# standard libs
import os
import re
import sys
import functools
from enum import Enum

# public interface
__all__ = ['NO_COLOR', 'FORCE_COLOR', 'COLOR_STDOUT', 'COLOR_STDERR', 'Ansi', 'format_ansi',
           'bold', 'faint', 'italic', 'green', 'yellow', 'magenta', 'cyan',
           'colorize_usage', ]


# Enable/disable colors if necessary
NO_COLOR = bool(os.getenv('NO_COLOR'))
FORCE_COLOR = bool(os.getenv('FORCE_COLOR'))

COLOR_STDOUT = (sys.stdout.isatty() or FORCE_COLOR) and not NO_COLOR
COLOR_STDERR = (sys.stderr.isatty() or FORCE_COLOR) and not NO_COLOR


class Ansi(Enum):
    """ANSI escape sequences for colors."""
    NULL = ''
    RESET = '\033[0m'
    BOLD = '\033[1m'
    FAINT = '\033[2m'
    ITALIC = '\033[3m'
    RED = '\033[31m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    BLUE = '\033[34m'
    MAGENTA = '\033[35m'
    CYAN = '\033[36m'


def format_ansi(seq: Ansi, text: str) -> str:
    """Apply escape sequence with reset afterward."""
    if NO_COLOR:
        return text
    elif text.endswith(Ansi.RESET.value):
        return f'{seq.value}{text}'
    else:
        return f'{seq.value}{text}{Ansi.RESET.value}'


# shorthand formatting methods
bold = functools.partial(format_ansi, Ansi.BOLD)
faint = functools.partial(format_ansi, Ansi.FAINT)
italic = functools.partial(format_ansi, Ansi.ITALIC)
green = functools.partial(format_ansi, Ansi.GREEN)
yellow = functools.partial(format_ansi, Ansi.YELLOW)
magenta = functools.partial(format_ansi, Ansi.MAGENTA)
cyan = functools.partial(format_ansi, Ansi.CYAN)


def colorize_usage(text: str) -> str:
    """
    Apply ANSI formatting to usage and help text.
    Has no effect if NO_COLOR is set or stdout is not a TTY.
    """
    if not COLOR_STDOUT:  # NOTE: usage is on stdout not stderr
        return text
    formatters: Tuple[Callable[[str], str], ...] = (
        _format_digit,
        _format_quoted_string,
        _format_metavars,
        _format_options,
        _format_headers,
    )
    for formatter in formatters:
        text = formatter(text)
    return text


# Negative look-ahead so that text inside backticks is left alone
NOT_QUOTED = r'(?=([^`]*`[^`]*`)*[^`]*$)'


def _format_headers(text: str) -> str:
    """Bold section headers."""
    names = ['Usage', 'Commands', 'Arguments', 'Options', 'Files']
    return re.sub(r'(?P<name>' + '|'.join(names) + r'):' + NOT_QUOTED, bold(r'\g<name>:'), text)


def _format_options(text: str) -> str:
    """Color option flags."""
    option_pattern = r'(?P<leader>[ /\[,])(?P<option>-[a-zA-Z]|--[a-z]+(-[a-z]+)?)\b'
    return re.sub(option_pattern + NOT_QUOTED, r'\g<leader>' + cyan(r'\g<option>'), text)


def _format_metavars(text: str) -> str:
    """Italicize argument placeholders (e.g., 'NUM' or '<command>')."""
    metavars = ['NUM', 'VAR', 'SECTION', 'NAME']
    markers = ['<command>', '<args>']
    text = re.sub(r'\b(?P<arg>' + '|'.join(metavars) + r')\b' + NOT_QUOTED, italic(r'\g<arg>'), text)
    return re.sub(r'(?P<arg>' + '|'.join(markers) + r')' + NOT_QUOTED, italic(r'\g<arg>'), text)


def _format_quoted_string(text: str) -> str:
    """Color backtick-quoted text."""
    return re.sub(r'`(?P<subtext>[^`]*)`', yellow(r'`\g<subtext>`'), text)


def _format_digit(text: str) -> str:
    """Color numerical digits."""
    return re.sub(r'\b(?P<num>\d+)\b' + NOT_QUOTED, green(r'\g<num>'), text)
