import argparse
import configparser
import json
import logging

import pytest

import ygg_keygen
from genkeys.keys import keypair_from_secret
from genkeys.scoring import Candidate
from helpers import save_keys_json
from ygg_keygen import ArgumentParser, check_key, create_settings_from_args, main

SEED_HEX = "a2c41919e4b7bdc15f2da66941a6c013f60d6685e97d30bf2724c18e6e1d849c"
PUBLIC_HEX = "000005a10b587db1d8ce75cf8d8f4988362069ec411f751a6a15f5b030911ea6"
ADDRESS = "215:97bd:29e0:9389:cc62:8c1c:9c2d:9df2"


@pytest.fixture(autouse=True)
def restore_root_level():
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)


def parse(*argv):
    return ArgumentParser.create_parser().parse_args(list(argv))


@pytest.mark.parametrize("value,expected", [
    ("90", 90),
    ("0", 0),
    ("2:30", 9000),
    ("0:05", 300),
])
def test_parse_timeout(value, expected):
    assert ArgumentParser._parse_timeout(value) == expected


@pytest.mark.parametrize("value", ["abc", "1:2:3", "1.5"])
def test_parse_timeout_invalid(value):
    with pytest.raises(argparse.ArgumentTypeError):
        ArgumentParser._parse_timeout(value)


def test_flags_default_to_none():
    args = parse()
    assert args.threads is None
    assert args.timeout is None
    assert args.verbose is None
    assert args.ipv6_nice is None
    assert args.target_zeros is None


def test_command_line_overrides_config():
    config = configparser.ConfigParser()
    config.read_string("[genkeys]\nthreads = 3\ntimeout = 60\nipv6_nice = true\n")

    settings = create_settings_from_args(parse("-t", "5"), config)

    assert settings.workers == 5
    assert settings.max_duration == 60
    assert settings.ipv6_nice


@pytest.mark.parametrize("secret", [SEED_HEX + PUBLIC_HEX, SEED_HEX])
def test_check_key(capsys, secret):
    assert check_key(secret) == 0

    out = capsys.readouterr().out
    assert f"Pub: {PUBLIC_HEX}" in out
    assert f"IP: {ADDRESS}" in out
    assert "Leading zero bits: 21" in out


@pytest.mark.parametrize("secret", ["zz", "abcd", SEED_HEX + "00" * 32])
def test_check_key_invalid(capsys, secret):
    assert check_key(secret) == 1
    assert capsys.readouterr().out.startswith("Error: ")


def test_main_check_key(capsys):
    assert main(["--check-key", SEED_HEX]) == 0
    assert ADDRESS in capsys.readouterr().out


@pytest.mark.parametrize("argv", [
    ["--threads", "-1"],
    ["--timeout", "-5"],
    ["--target-zeros", "300"],
])
def test_main_rejects_invalid_arguments(argv, capsys):
    assert main(argv) == 1
    assert "Error:" in capsys.readouterr().out


def test_main_rejects_invalid_config(tmp_path, capsys):
    config_file = tmp_path / "config.ini"
    config_file.write_text("[genkeys]\nthreads = -4\n")

    assert main(["--config", str(config_file)]) == 1
    assert "Error:" in capsys.readouterr().out


def test_main_search_saves_json(tmp_path, capsys, monkeypatch):
    monkeypatch.setattr("genkeys.coordinator.POLL_PERIOD", 0.01)
    argv = [
        "--timeout", "1",
        "--threads", "1",
        "--no-progress",
        "--json",
        "--output-dir", str(tmp_path),
        "--config", str(tmp_path / "missing.ini"),
    ]

    assert main(argv) == 0

    out = capsys.readouterr().out
    assert "Priv: " in out
    assert "IP: 2" in out

    saved = list(tmp_path.glob("ygg_*.json"))
    assert len(saved) == 1
    data = json.loads(saved[0].read_text())["data"]
    assert data["Address"] in out


def test_main_output_dir_from_config(tmp_path, monkeypatch):
    monkeypatch.setattr("genkeys.coordinator.POLL_PERIOD", 0.01)
    keys_dir = tmp_path / "keys"
    config_file = tmp_path / "config.ini"
    config_file.write_text(f"[genkeys]\ntimeout = 1\nthreads = 1\noutput_dir = {keys_dir}\n")

    assert main(["--config", str(config_file), "--no-progress", "--json"]) == 0
    assert len(list(keys_dir.glob("ygg_*.json"))) == 1


def test_main_without_key(tmp_path, monkeypatch, capsys):
    class EmptySearch:
        def __init__(self, settings, show_progress=True):
            pass

        def generate(self):
            return ygg_keygen.SearchSnapshot(best=None, generated=0, elapsed=0.0)

    monkeypatch.setattr(ygg_keygen, "YggKeyGenerator", EmptySearch)

    assert main(["--threads", "1", "--no-progress", "--config", str(tmp_path / "missing.ini")]) == 1
    assert "No key was generated" in capsys.readouterr().out


def test_check_key_from_saved_file(tmp_path, capsys):
    candidate = Candidate.from_keys(keypair_from_secret(SEED_HEX))
    filepath = save_keys_json(candidate, str(tmp_path))

    assert main(["--check-key", filepath]) == 0

    out = capsys.readouterr().out
    assert f"Priv: {SEED_HEX}{PUBLIC_HEX}" in out
    assert f"IP: {ADDRESS}" in out


def test_check_key_rejects_tampered_file(tmp_path, capsys):
    filepath = tmp_path / "ygg_000005a1.json"
    filepath.write_text(json.dumps({"data": {"PrivateKey": SEED_HEX, "PublicKey": "ff" * 32}}))

    assert check_key(str(filepath)) == 1
    assert "does not hold a valid key" in capsys.readouterr().out


def test_config_loading_is_logged(tmp_path, caplog):
    config_file = tmp_path / "config.ini"
    config_file.write_text("[genkeys]\nthreads = -1\n")

    assert main(["--config", str(config_file)]) == 1
    assert "Configuration loaded successfully" in caplog.text


def test_verbose_config_enables_debug(tmp_path, monkeypatch):
    config_file = tmp_path / "config.ini"
    config_file.write_text("[genkeys]\nverbose = true\nthreads = 1\n")
    levels = []

    class RecordingSearch:
        def __init__(self, settings, show_progress=True):
            levels.append(logging.getLogger().level)

        def generate(self):
            return ygg_keygen.SearchSnapshot(best=None, generated=0, elapsed=0.0)

    monkeypatch.setattr(ygg_keygen, "YggKeyGenerator", RecordingSearch)
    monkeypatch.setattr(ygg_keygen, "format_system_status", lambda: "status")

    main(["--config", str(config_file), "--no-progress"])
    assert levels == [logging.DEBUG]
