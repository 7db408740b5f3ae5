"""
Tests for logging setup, connection strings and configuration loading helpers.
"""
import logging

import pytest

from core.utils.config_loader import get_environment_config, load_config, merge_configs
from skeleton_tracking.utils.parse_config_string import parse_config_string
from skeleton_tracking.utils.setup_logging import priority_to_log_level, setup_logging


@pytest.mark.parametrize("priority, level", [
    (0, logging.NOTSET),
    (1, logging.DEBUG),
    (2, logging.INFO),
    (3, logging.WARNING),
    (4, logging.ERROR),
    (5, logging.CRITICAL),
    (254, logging.CRITICAL),
    (255, logging.CRITICAL + 1),
])
def test_priority_to_log_level(priority, level):
    assert priority_to_log_level(priority) == level


@pytest.mark.parametrize("priority", [-1, 256])
def test_priority_out_of_range(priority):
    with pytest.raises(ValueError):
        priority_to_log_level(priority)


def test_setup_logging_levels():
    setup_logging(3)
    assert logging.getLogger().level == logging.WARNING
    setup_logging('debug')
    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger('kafka').level == logging.WARNING
    with pytest.raises(ValueError):
        setup_logging('LOUD')


def test_parse_config_string():
    config = parse_config_string("kafka://localhost:9092, topic=raw_frames_{task_id} ,group_id=g", task_id='cam1')
    assert config == {
        'addr': 'kafka://localhost:9092',
        'protocol': 'kafka',
        'location': 'localhost:9092',
        'topic': 'raw_frames_cam1',
        'group_id': 'g',
    }


def test_parse_config_string_without_protocol():
    config = parse_config_string("walk.mp4")
    assert config['protocol'] == ''
    assert config['location'] == 'walk.mp4'


def test_environment_config():
    environ = {
        'SKELETON_TRACKING_ALPHA_POSE': '0.2',
        'SKELETON_TRACKING_': 'ignored',
        'PATH': '/usr/bin',
    }
    assert get_environment_config(environ=environ) == {'alpha_pose': '0.2'}


def test_merge_configs_is_recursive():
    base = {'skeleton_tracking': {'resolution': '1280x720', 'num_scales': 1}, 'service': {'debug': False}}
    override = {'skeleton_tracking': {'num_scales': 3}}
    merged = merge_configs(base, override)
    assert merged['skeleton_tracking'] == {'resolution': '1280x720', 'num_scales': 3}
    assert merged['service'] == {'debug': False}
    assert base['skeleton_tracking']['num_scales'] == 1


def test_load_config(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("skeleton_tracking:\n  model_pose: MPI\n")
    assert load_config(str(path)) == {'skeleton_tracking': {'model_pose': 'MPI'}}

    empty = tmp_path / "empty.yaml"
    empty.write_text("")
    assert load_config(str(empty)) == {}

    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.yaml"))
