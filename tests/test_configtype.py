"""
Base64 and config-file field types.
"""
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import pytest
from pydantic import BaseModel

from envbind import ConfigFileError, ConversionError, DecodeError, FieldBindError, env_field
from envbind.configtype import Base64, JSONFile, TOMLFile, YAMLFile, expand_env
from envbind.configtype.expand import use_environ


class FileSettings(BaseModel):
    name: str
    version: int = 0


@dataclass
class AppConfig:
    db: YAMLFile[FileSettings] = field(default_factory=YAMLFile)
    extra: Optional[JSONFile[FileSettings]] = None
    secret: Base64 = env_field(env="API_SECRET", default_factory=Base64)


def _write(path: Path, content: str) -> str:
    path.write_text(content, encoding="utf-8")
    return str(path)


# ---------------------------------------------------------------------------
# Base64
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("text,expected", [
    ("SGVsbG8gV29ybGQ=", b"Hello World"),
    ("SGVsbG8=", b"Hello"),
    ("", b""),
])
def test_base64_decode(text, expected):
    b = Base64()
    b.decode_text(text)
    assert b.raw == expected
    assert str(b) == expected.decode()


@pytest.mark.parametrize("text", ["not-base64!", "SGVsbG8gV29ybGQ==", "SGVsbG8"])
def test_base64_rejects_malformed(text):
    with pytest.raises(ConversionError):
        Base64().decode_text(text)


# ---------------------------------------------------------------------------
# expand_env
# ---------------------------------------------------------------------------

def test_expand_env_forms():
    env = {"NAME": "svc", "DIR": "/etc"}
    assert expand_env("$DIR/${NAME}.yaml", env) == "/etc/svc.yaml"
    assert expand_env("x=$MISSING;y=${MISSING}", env) == "x=;y="
    assert expand_env("price $5", env) == "price $5"


def test_expand_env_reads_active_store(monkeypatch):
    monkeypatch.delenv("ENVBIND_STORE_ONLY", raising=False)
    with use_environ({"ENVBIND_STORE_ONLY": "inner"}):
        assert expand_env("${ENVBIND_STORE_ONLY}") == "inner"
    assert expand_env("${ENVBIND_STORE_ONLY}") == ""


# ---------------------------------------------------------------------------
# file wrappers
# ---------------------------------------------------------------------------

def test_json_file_parses_into_model(tmp_path):
    path = _write(tmp_path / "config.json", json.dumps({"name": "test", "version": 1}))
    f = JSONFile[FileSettings]()
    f.decode_text(path)

    assert f.file_path == path
    assert f.data == FileSettings(name="test", version=1)


def test_yaml_file_parses_into_model(tmp_path):
    path = _write(tmp_path / "config.yaml", "name: test\nversion: 2\n")
    f = YAMLFile[FileSettings]()
    f.decode_text(path)
    assert f.data.version == 2


def test_toml_file_parses_into_model(tmp_path):
    path = _write(tmp_path / "config.toml", 'name = "test"\nversion = 3\n')
    f = TOMLFile[FileSettings]()
    f.decode_text(path)
    assert f.data.name == "test"
    assert f.data.version == 3


def test_untyped_file_keeps_raw_data(tmp_path):
    path = _write(tmp_path / "raw.yaml", "a: 1\nb: [x, y]\n")
    f = YAMLFile()
    f.decode_text(path)
    assert f.data == {"a": 1, "b": ["x", "y"]}


def test_contents_and_path_are_env_expanded(tmp_path, monkeypatch):
    monkeypatch.setenv("CFG_DIR", str(tmp_path))
    monkeypatch.setenv("TEST_NAME", "env_test")
    _write(tmp_path / "env_config.json", '{"name": "$TEST_NAME", "version": 1}')

    f = JSONFile[FileSettings]()
    f.decode_text("${CFG_DIR}/env_config.json")
    assert f.file_path == str(tmp_path / "env_config.json")
    assert f.data.name == "env_test"


def test_reload_rereads_the_same_file(tmp_path):
    path = tmp_path / "reload.json"
    _write(path, '{"name": "test", "version": 1}')
    f = JSONFile[FileSettings]()
    f.decode_text(str(path))

    _write(path, '{"name": "reloaded", "version": 2}')
    f.reload()
    assert f.data == FileSettings(name="reloaded", version=2)


def test_reload_and_decode_without_path_are_noops():
    f = TOMLFile[FileSettings]()
    f.reload()
    f.decode_text("")
    assert f.data is None
    assert f.file_path == ""


def test_missing_file(tmp_path):
    missing = str(tmp_path / "non_existent.json")
    with pytest.raises(ConfigFileError) as exc:
        JSONFile[FileSettings]().decode_text(missing)
    assert exc.value.path == missing


def test_undecodable_file_names_path(tmp_path):
    path = tmp_path / "latin1.yaml"
    path.write_bytes(b"name: caf\xe9\n\xff\xfe")
    with pytest.raises(ConfigFileError) as exc:
        YAMLFile[FileSettings]().decode_text(str(path))
    assert exc.value.path == str(path)
    assert isinstance(exc.value.__cause__, UnicodeDecodeError)


@pytest.mark.parametrize("cls,name,content", [
    (JSONFile, "bad.json", '{"name": "test", "version": invalid}'),
    (YAMLFile, "bad.yaml", "name: [unclosed\n"),
    (TOMLFile, "bad.toml", "name = \n"),
])
def test_unparsable_file(tmp_path, cls, name, content):
    path = _write(tmp_path / name, content)
    with pytest.raises(ConfigFileError) as exc:
        cls[FileSettings]().decode_text(path)
    assert exc.value.path == path


def test_payload_must_match_type(tmp_path):
    path = _write(tmp_path / "wrong.json", '{"version": "not a number"}')
    with pytest.raises(ConfigFileError):
        JSONFile[FileSettings]().decode_text(path)


# ---------------------------------------------------------------------------
# through the loader
# ---------------------------------------------------------------------------

def test_loader_fills_file_fields(tmp_path, env, make_loader):
    env.update({
        "DB": _write(tmp_path / "db.yaml", "name: primary\nversion: 5\n"),
        "EXTRA": _write(tmp_path / "extra.json", '{"name": "extra"}'),
        "API_SECRET": "dGVzdC1zZWNyZXQ=",
    })
    cfg = AppConfig()
    make_loader().load(cfg)

    assert cfg.db.data == FileSettings(name="primary", version=5)
    assert cfg.extra is not None and cfg.extra.data.name == "extra"
    assert str(cfg.secret) == "test-secret"


def test_loader_leaves_file_fields_alone_when_unset(make_loader):
    cfg = AppConfig()
    assert make_loader().load(cfg) is False
    assert cfg.db.data is None
    assert cfg.extra is None


def test_loader_wraps_file_errors_with_key(tmp_path, env, make_loader):
    env["DB"] = str(tmp_path / "absent.yaml")
    with pytest.raises(FieldBindError) as exc:
        make_loader().load(AppConfig())

    assert exc.value.key == "DB"
    assert isinstance(exc.value.__cause__, DecodeError)
    assert isinstance(exc.value.__cause__.__cause__, ConfigFileError)


def test_loader_store_drives_file_expansion(tmp_path, env, make_loader, monkeypatch):
    for name in ("CFG_DIR", "SERVICE_NAME"):
        monkeypatch.delenv(name, raising=False)
    path = _write(tmp_path / "db.yaml", "name: $SERVICE_NAME\nversion: 3\n")
    env.update({"CFG_DIR": str(tmp_path), "SERVICE_NAME": "billing", "DB": "${CFG_DIR}/db.yaml"})
    cfg = AppConfig()
    make_loader().load(cfg)

    assert cfg.db.file_path == path
    assert cfg.db.data == FileSettings(name="billing", version=3)

    env["SERVICE_NAME"] = "ledger"
    cfg.db.reload()
    assert cfg.db.data.name == "ledger"
