"""Parsing of remote command lines"""

import re
import shlex
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

OptionValue = Union[str, int, float, bool]

_INT_RE = re.compile(r'^-?\d+$')
_FLOAT_RE = re.compile(r'^-?\d*\.\d+$|^-?\d+\.\d*$')


@dataclass
class CommandOption:
    """A positional argument (name is None) or a named option"""
    name: Optional[str]
    value: OptionValue

    @property
    def is_positional(self) -> bool:
        return self.name is None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {"name": self.name, "value": self.value}


@dataclass
class CommandSpec:
    """A parsed command: its name plus ordered options"""
    name: str
    options: List[CommandOption] = field(default_factory=list)

    @property
    def positionals(self) -> List[str]:
        return [str(o.value) for o in self.options if o.is_positional]

    @property
    def flags(self) -> Dict[str, OptionValue]:
        """Named options keyed by their flag (e.g. '--force', '-v')"""
        return {o.name: o.value for o in self.options if not o.is_positional}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {"name": self.name, "options": [o.to_dict() for o in self.options]}


def coerce_value(raw: str) -> OptionValue:
    """
    Convert an option value to int, float or bool where it looks like one

    Args:
        raw: Text after '='

    Returns:
        Typed value, or the text unchanged
    """
    if _INT_RE.match(raw):
        return int(raw)
    if _FLOAT_RE.match(raw):
        return float(raw)

    lowered = raw.lower()
    if lowered == 'true':
        return True
    if lowered == 'false':
        return False

    return raw


def parse_token(token: str) -> CommandOption:
    """Classify a single command line token"""
    if token.startswith('--') and len(token) > 2:
        if '=' in token:
            name, _, raw = token.partition('=')
            return CommandOption(name, coerce_value(raw))
        return CommandOption(token, True)

    if len(token) == 2 and token[0] == '-' and token[1].isalpha():
        return CommandOption(token, True)

    return CommandOption(None, token)


def parse_command(command_line: str) -> CommandSpec:
    """
    Parse "<name> [token]*" into a CommandSpec

    Examples:
        >>> parse_command("queue:work --tries=3 --force -v file.txt").flags
        {'--tries': 3, '--force': True, '-v': True}

    Args:
        command_line: Command text

    Returns:
        CommandSpec

    Raises:
        ValueError: If the command line is empty or badly quoted
    """
    tokens = shlex.split(command_line.strip())
    if not tokens:
        raise ValueError("Empty command")

    name, *rest = tokens
    return CommandSpec(name=name, options=[parse_token(token) for token in rest])


def render_option(option: CommandOption) -> List[str]:
    """Turn an option back into argv tokens"""
    if option.is_positional:
        return [str(option.value)]
    if option.value is True:
        return [option.name]
    if option.value is False:
        return [f"{option.name}=false"]
    return [f"{option.name}={option.value}"]


def to_argv(spec: CommandSpec) -> List[str]:
    """Render a CommandSpec as an argument vector"""
    argv = [spec.name]
    for option in spec.options:
        argv.extend(render_option(option))
    return argv
