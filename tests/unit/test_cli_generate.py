"""
Tests for the npcgen CLI.

Covers:
- Parser: generate defaults and flags, options --type, global flags
- cmd_options output
- cmd_run refuses to start without a bot token
- cmd_generate exit codes for configuration failures and a successful run
"""

import asyncio
import json
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from npcgen.__main__ import cmd_generate, cmd_options, cmd_run, create_parser
from npcgen.config.settings import (
    BotSettings,
    CompendiumSettings,
    GeneratorSettings,
    LLMSettings,
    Settings,
)


def _settings(tmp_path, **overrides) -> Settings:
    defaults = dict(
        _env_file=None,
        bot=BotSettings(token=""),
        llm=LLMSettings(api_key=""),
        generator=GeneratorSettings(output_dir=tmp_path / "actors"),
        compendium=CompendiumSettings(items_pack=None, spells_pack=None),
    )
    defaults.update(overrides)
    return Settings(**defaults)


class TestGenerateCommandArgs:
    """Parser-level tests for the generate subcommand."""

    def test_defaults_are_random(self):
        args = create_parser().parse_args(["generate"])
        assert args.command == "generate"
        for name in ("npc_type", "subtype", "cr", "race", "gender", "alignment"):
            assert getattr(args, name) == "random"
        assert args.name is None
        assert args.context is None
        assert args.seed is None

    def test_all_flags(self):
        args = create_parser().parse_args([
            "generate", "--type", "npc", "--subtype", "ranger", "--cr", "1/4",
            "--race", "half-elf", "--gender", "male", "--alignment", "chaotic-good",
            "--name", "Tarn", "--context", "Scouts the Misty Vale",
            "--output-dir", "out", "--seed", "42",
        ])
        assert args.npc_type == "npc"
        assert args.subtype == "ranger"
        assert args.cr == "1/4"
        assert args.race == "half-elf"
        assert args.context == "Scouts the Misty Vale"
        assert args.output_dir == Path("out")
        assert args.seed == 42

    def test_seed_must_be_integer(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["generate", "--seed", "abc"])

    def test_options_type_choices(self):
        args = create_parser().parse_args(["options", "--type", "commoner"])
        assert args.npc_type == "commoner"
        with pytest.raises(SystemExit):
            create_parser().parse_args(["options", "--type", "monster"])

    def test_global_flags(self):
        args = create_parser().parse_args(["--log-level", "DEBUG", "--env-file", "x.env", "config"])
        assert args.log_level == "DEBUG"
        assert args.env_file == Path("x.env")
        assert args.command == "config"


class TestOptionsCommand:
    def test_lists_every_category(self, capsys):
        args = create_parser().parse_args(["options"])
        assert cmd_options(args) == 0
        out = capsys.readouterr().out
        for label in ("Type", "Challenge Rating", "Race", "Gender", "Alignment"):
            assert label in out
        assert "blacksmith" in out

    def test_type_specific_options(self, capsys):
        args = create_parser().parse_args(["options", "--type", "npc"])
        assert cmd_options(args) == 0
        out = capsys.readouterr().out
        assert "Class: random, barbarian" in out
        assert "Challenge Rating: random, 0" in out


class TestRunCommand:
    def test_missing_token(self, tmp_path):
        assert cmd_run(_settings(tmp_path)) == 1


class TestGenerateCommand:
    def test_missing_api_key_fails(self, tmp_path, capsys):
        args = create_parser().parse_args(["generate", "--seed", "1"])
        assert asyncio.run(cmd_generate(args, _settings(tmp_path))) == 1
        assert "LLM error" in capsys.readouterr().err
        assert list((tmp_path / "actors").glob("*.json")) == []

    def test_invalid_selection_fails(self, tmp_path, capsys):
        args = create_parser().parse_args(["generate", "--race", "beholder"])
        assert asyncio.run(cmd_generate(args, _settings(tmp_path))) == 1
        assert "Invalid selection" in capsys.readouterr().err

    def test_missing_pack_fails(self, tmp_path):
        settings = _settings(
            tmp_path,
            compendium=CompendiumSettings(items_pack=tmp_path / "missing.json", spells_pack=None),
        )
        args = create_parser().parse_args(["generate"])
        assert asyncio.run(cmd_generate(args, settings)) == 1

    def test_unusable_output_dir_fails(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        settings = _settings(tmp_path, generator=GeneratorSettings(output_dir=blocker / "actors"))
        args = create_parser().parse_args(["generate", "--seed", "1"])
        assert asyncio.run(cmd_generate(args, settings)) == 1

    def test_success_hides_alignment_when_configured(self, tmp_path, capsys):
        reply = MagicMock()
        reply.choices = [MagicMock()]
        reply.choices[0].message.content = json.dumps({
            "name": "Hessa Vane",
            "readaloud": "A tall woman counts coins by candlelight.",
            "uniqueMagicalWeapon": {"name": "Tallyknife", "damageBonus": "+1"},
        })
        reply.model = "openai/gpt-4o-mini"
        reply.usage.prompt_tokens = 10
        reply.usage.completion_tokens = 20
        settings = _settings(
            tmp_path,
            llm=LLMSettings(api_key="test-key"),
            generator=GeneratorSettings(output_dir=tmp_path / "actors", hide_alignment=True),
        )
        args = create_parser().parse_args([
            "generate", "--type", "commoner", "--subtype", "merchant",
            "--alignment", "lawful-evil", "--seed", "2",
        ])

        with patch("npcgen.llm.orchestrator.acompletion", new=AsyncMock(return_value=reply)):
            assert asyncio.run(cmd_generate(args, settings)) == 0

        out = capsys.readouterr().out
        assert "=== Hessa Vane ===" in out
        assert "Unknown" in out
        assert "Lawful Evil" not in out
        assert len(list((tmp_path / "actors").glob("*.json"))) == 1
