import json
import logging

import pytest

from utils import FireflyConfig, load_config, setup_logging


def test_config_defaults():
    assert FireflyConfig.from_dict(None) == FireflyConfig()
    assert FireflyConfig.from_dict({}).count == 35


def test_config_accepts_both_key_styles():
    snake = FireflyConfig.from_dict({"flicker_rate": 2, "wing_speed": 3, "seed": 7})
    camel = FireflyConfig.from_dict({"flickerRate": 2, "wingSpeed": 3})
    assert snake == camel
    assert snake.flicker_rate == 2 and snake.wing_speed == 3


@pytest.mark.parametrize("count,expected", [
    (35, 35), (0, 0), (-3, 0), (12.7, 12), (float("nan"), 0), (float("inf"), 0), ("x", 0), (10_000, 2000),
])
def test_population_target_is_bounded(count, expected):
    assert FireflyConfig(count=count).population_target() == expected


def test_load_config_reads_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"simulation": {"count": 3}}))
    assert load_config(str(path)) == {"simulation": {"count": 3}}


def test_load_config_errors_propagate(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.json"))
    bad = tmp_path / "bad.json"
    bad.write_text("{nope")
    with pytest.raises(json.JSONDecodeError):
        load_config(str(bad))


def test_setup_logging_creates_log_file(tmp_path):
    log_file = tmp_path / "logs" / "run.log"
    root = logging.getLogger()
    saved = list(root.handlers), root.level
    try:
        setup_logging({"logging": {"level": "debug", "log_file": str(log_file)}})
        logging.info("hello")
        assert root.level == logging.DEBUG
        assert log_file.exists()
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved[0]
        root.setLevel(saved[1])


def test_setup_logging_twice_does_not_duplicate_handlers(tmp_path):
    root = logging.getLogger()
    saved = list(root.handlers), root.level
    config = {"logging": {"log_file": str(tmp_path / "swarm.log")}}
    try:
        setup_logging(config)
        setup_logging(config)
        assert len(root.handlers) == 2
        assert root.level == logging.INFO
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved[0]
        root.setLevel(saved[1])
