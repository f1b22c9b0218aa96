"""
Test Entry Point - ids files, environment config and CLI wiring
"""

import os
import sys
from unittest.mock import patch

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from pydantic import ValidationError

from src.extract.universe_ids import (
    DEFAULT_UNIVERSE_IDS,
    load_universe_ids,
    parse_universe_ids,
)
from src.main import main
from src.orchestration.config import PipelineConfig


def test_parse_json_array():
    assert parse_universe_ids("[3, 1, 3]") == [3, 1, 3]


def test_parse_lines_with_comments():
    text = "# tracked universes\n8649112027\n\n  8641794993  \n# end\n"
    assert parse_universe_ids(text) == [8649112027, 8641794993]


def test_parse_rejects_garbage():
    with pytest.raises(ValueError):
        parse_universe_ids("123\nabc\n")
    with pytest.raises(ValueError):
        parse_universe_ids('[1, "2"]')


def test_default_ids_are_unique_integers():
    assert len(DEFAULT_UNIVERSE_IDS) == len(set(DEFAULT_UNIVERSE_IDS)) == 50
    assert all(isinstance(i, int) for i in DEFAULT_UNIVERSE_IDS)


def test_config_defaults():
    config = PipelineConfig()

    assert config.batch_size == 75
    assert config.request_timeout == 20.0
    assert config.max_attempts == 4
    assert config.throttle_delay == 0.5
    assert config.relay_url is None
    assert config.output_path == "public/games.json"


def test_config_validation():
    with pytest.raises(ValidationError):
        PipelineConfig(batch_size=0)
    with pytest.raises(ValidationError):
        PipelineConfig(max_attempts=0)


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("ROBLOX_RELAY_URL", "https://relay/?url=")
    monkeypatch.setenv("GAMES_BATCH_SIZE", "20")
    monkeypatch.delenv("GAMES_OUTPUT_PATH", raising=False)

    config = PipelineConfig.from_env(output_path=None, batch_size=None)

    assert config.relay_url == "https://relay/?url="
    assert config.batch_size == 20
    assert config.output_path == "public/games.json"

    assert PipelineConfig.from_env(batch_size=5).batch_size == 5


def test_config_from_env_rejects_bad_int(monkeypatch):
    monkeypatch.setenv("GAMES_BATCH_SIZE", "many")

    with pytest.raises(ValueError):
        PipelineConfig.from_env()


def test_cli_run(tmp_path, monkeypatch):
    monkeypatch.delenv("ROBLOX_RELAY_URL", raising=False)
    monkeypatch.delenv("GAMES_BATCH_SIZE", raising=False)
    ids_file = tmp_path / "ids.txt"
    ids_file.write_text("10\n20\n")
    output = tmp_path / "out" / "games.json"

    with patch("src.main.setup_logging"), patch("src.main.GamesPipeline") as mock_pipeline:
        mock_pipeline.return_value.run_and_save.return_value.summary.return_value = {
            "games": 2
        }
        mock_pipeline.return_value.run_and_save.return_value.failed_ids = []

        exit_code = main(
            ["run", "--ids-file", str(ids_file), "--output", str(output), "--batch-size", "1"]
        )

    assert exit_code == 0
    config = mock_pipeline.call_args.kwargs["config"]
    assert config.output_path == str(output)
    assert config.batch_size == 1
    mock_pipeline.return_value.run_and_save.assert_called_once_with([10, 20])


def test_cli_reports_failure(tmp_path):
    with patch("src.main.setup_logging"):
        assert main(["run", "--ids-file", str(tmp_path / "missing.txt")]) == 1


def test_load_universe_ids(tmp_path):
    path = tmp_path / "ids.json"
    path.write_text("[5, 6]")
    assert load_universe_ids(str(path)) == [5, 6]
