"""Tests for remote command line parsing."""

import pytest

from deploy_sync.core.command_parser import (
    CommandOption,
    coerce_value,
    parse_command,
    to_argv,
)


class TestCoerceValue:
    """Tests for option value typing."""

    @pytest.mark.parametrize("raw,expected", [
        ("3", 3),
        ("-2", -2),
        ("1.5", 1.5),
        ("true", True),
        ("FALSE", False),
        ("redis", "redis"),
    ])
    def test_coerce(self, raw, expected):
        """Test numbers and booleans are typed, other text is kept."""
        value = coerce_value(raw)
        assert value == expected
        assert type(value) is type(expected)


class TestParseCommand:
    """Tests for parse_command."""

    def test_name_only(self):
        """Test a command without options."""
        spec = parse_command("config:cache")
        assert spec.name == "config:cache"
        assert spec.options == []

    def test_mixed_tokens(self):
        """Test long options, short flags and positionals."""
        spec = parse_command("queue:work --tries=3 --force -v file.txt")

        assert spec.name == "queue:work"
        assert spec.flags == {"--tries": 3, "--force": True, "-v": True}
        assert spec.positionals == ["file.txt"]

    def test_quoted_values(self):
        """Test quoting keeps spaces inside one token."""
        spec = parse_command('db:seed --class="Users Seeder"')
        assert spec.flags == {"--class": "Users Seeder"}

    def test_short_non_alpha_is_positional(self):
        """Test '-1' is a positional value, not a flag."""
        spec = parse_command("schedule:run -1")
        assert spec.options == [CommandOption(None, "-1")]

    @pytest.mark.parametrize("line", ["", "   "])
    def test_empty_command(self, line):
        """Test an empty command line is rejected."""
        with pytest.raises(ValueError, match="Empty command"):
            parse_command(line)


class TestToArgv:
    """Tests for rendering a parsed command."""

    def test_round_trip(self):
        """Test rendering keeps option order and values."""
        spec = parse_command("migrate --force --step=2 --pretend=false seed")
        assert to_argv(spec) == ["migrate", "--force", "--step=2", "--pretend=false", "seed"]
