"""
Tests for the solo-oracle command line.
"""

import json

import pytest

from solo_oracle.main import SoloConfig, create_config_from_args, main, parse_arguments
from solo_oracle.observability.run_log import RunLog
from solo_oracle.tables.content_pack import DEFAULT_PACK_PATH


class TestConfig:
    """Argument parsing into SoloConfig."""

    def test_defaults(self):
        config = create_config_from_args(parse_arguments(["tables"]))
        assert config.content_pack == DEFAULT_PACK_PATH
        assert config.seed is None
        assert config.sequence == 0
        assert config.chaos_factor == 5
        assert config.run_log_path is None

    def test_chaos_clamped(self):
        assert SoloConfig(chaos_factor=12).chaos_factor == 9
        assert SoloConfig(chaos_factor=0).chaos_factor == 1

    def test_str_paths_coerced(self, tmp_path):
        config = SoloConfig(content_pack=str(tmp_path / "p.json"), run_log_path=str(tmp_path / "log.json"))
        assert config.content_pack == tmp_path / "p.json"
        assert config.run_log_path == tmp_path / "log.json"

    def test_command_required(self):
        with pytest.raises(SystemExit):
            parse_arguments([])


class TestCommands:
    """End-to-end command output."""

    def test_tables(self, capsys):
        assert main(["tables"]) == 0
        out = capsys.readouterr().out
        assert "Content pack solo_default v0.1:" in out
        assert "room_contents" in out
        assert "npc_mannerism" in out

    def test_table(self, capsys):
        assert main(["--seed", "12345", "table", "room_contents"]) == 0
        out = capsys.readouterr().out

        assert "[1] room_contents: d10: [5] = 5 -> 5-6" in out
        assert "[2] trap_variants: d6: [4] = 4 -> 4-4" in out
        assert "TRAP alchemical (tampered chest)" in out
        assert "save Acrobatics DC 14" in out
        assert "seed 12345 sequence 2" in out

    def test_table_quiet_room(self, capsys):
        assert main(["--seed", "42", "table", "room_contents"]) == 0
        assert "LOG The room is quiet and empty." in capsys.readouterr().out

    def test_missing_table(self, capsys):
        assert main(["--seed", "1", "table", "nope"]) == 0
        assert "LOG Missing table: nope" in capsys.readouterr().out

    def test_scene(self, capsys):
        assert main(["--seed", "12345", "scene", "We search the crypt"]) == 0
        out = capsys.readouterr().out
        assert "Roll 5 vs chaos 5: Altered" in out
        assert "seed 12345 sequence 1" in out

    def test_scene_interrupt(self, capsys):
        assert main(["--seed", "42", "scene", "Cross the bridge"]) == 0
        assert "Random event: PC Negative: restless / memory" in capsys.readouterr().out

    def test_scene_altered_with_method(self, capsys):
        assert main(["--seed", "12345", "scene", "We search the crypt", "--alter", "meaning-words"]) == 0
        out = capsys.readouterr().out
        assert "Alteration: Meaning Words - Interpret the two words" in out
        assert "Detail: " in out
        assert "seed 12345 sequence 3" in out

    def test_scene_alter_by_label(self, capsys):
        assert main(["--seed", "12345", "scene", "We search the crypt", "--alter", "Next Most Likely"]) == 0
        out = capsys.readouterr().out
        assert "Alteration: Next Most Likely - Go with the next most likely idea" in out
        assert "Detail: " not in out
        assert "seed 12345 sequence 1" in out

    def test_scene_alter_ignored_when_interrupted(self, capsys):
        assert main(["--seed", "42", "scene", "Cross the bridge", "--alter", "meaning-words"]) == 0
        out = capsys.readouterr().out
        assert "Random event: PC Negative: restless / memory" in out
        assert "Alteration" not in out

    def test_scene_unknown_alteration(self, capsys):
        assert main(["scene", "We search the crypt", "--alter", "reroll"]) == 2
        assert "Unknown alteration method" in capsys.readouterr().out

    def test_fate(self, capsys):
        assert main(["--seed", "12345", "fate", "Is it guarded?", "-l", "likely"]) == 0
        assert "Fate (likely, CF 5): 45 vs 70 => YES" in capsys.readouterr().out

    def test_fate_with_roll(self, capsys):
        assert main(["--chaos", "9", "fate", "Is it guarded?", "-l", "50/50", "--roll", "60"]) == 0
        assert "60 vs 70 => YES" in capsys.readouterr().out

    def test_fate_hyphenated_likelihood(self, capsys):
        assert main(["--seed", "12345", "fate", "Is it guarded?", "-l", "very-likely"]) == 0
        assert "Fate (veryLikely, CF 5): 45 vs 85 => YES" in capsys.readouterr().out

    def test_fate_bad_likelihood(self, capsys):
        assert main(["fate", "Is it guarded?", "-l", "probably"]) == 2
        assert "Unknown likelihood" in capsys.readouterr().out

    def test_check_with_roll(self, capsys):
        assert main(["check", "Stealth", "--dc", "15", "--roll", "14", "--modifier", "2"]) == 0
        assert "16: success - Success." in capsys.readouterr().out

    def test_check_rolled_with_advantage(self, capsys):
        assert main(["--seed", "12345", "check", "stealth", "--dc", "15", "--advantage", "advantage"]) == 0
        out = capsys.readouterr().out
        assert "d20 (advantage): [5, 18] -> 18" in out
        assert "seed 12345 sequence 2" in out

    def test_check_unknown_skill(self, capsys):
        assert main(["check", "Juggling", "--roll", "10"]) == 2
        assert "Not a valid check" in capsys.readouterr().out

    def test_missing_pack(self, tmp_path, capsys):
        assert main(["--pack", str(tmp_path / "missing.json"), "tables"]) == 1
        assert "Error: Could not load content pack" in capsys.readouterr().out

    def test_save_log(self, tmp_path):
        path = tmp_path / "session.json"
        assert main(["--seed", "12345", "--save-log", str(path), "table", "room_contents"]) == 0

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["seed"] == 12345
        loaded = RunLog.load(str(path))
        assert [r.total for r in loaded.get_rolls()] == [5, 4]
