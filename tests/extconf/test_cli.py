"""Tests for the extconf command line."""

import json
import logging

import pytest

from extconf.cli.main import build_parser, main
from extconf.logger import ROOT_LOGGER


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    yield
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def run(extension_root, cache, capsys):
    """Run the CLI against the test extension root, returning parsed stdout."""

    def _run(*argv):
        main(["-e", str(extension_root), "--cache-path", str(cache.path), *argv])
        return json.loads(capsys.readouterr().out)

    return _run


class TestParser:
    def test_verb_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_global_options(self):
        args = build_parser().parse_args(["-e", "exts", "--debug", "show", "alpha"])
        assert args.extension_path == "exts"
        assert args.debug is True
        assert args.name == "alpha"


class TestVerbs:
    """Test each verb end to end."""

    def test_scan(self, run, cache):
        result = run("scan")

        assert result["extensions"] == ["alpha", "beta"]
        assert result["changes"] == {"alpha": "graph", "beta": "graph"}
        assert result["from_cache"] is False
        assert result["saved"] is True
        assert cache.exists()

    def test_second_scan_uses_cache(self, run):
        run("scan")
        result = run("scan")
        assert result["from_cache"] is True

    def test_forced_scan(self, run):
        run("scan")
        result = run("scan", "--force")
        assert result["from_cache"] is True
        assert result["changes"] == {}

    def test_list(self, run, extension_root, write_ext):
        write_ext(extension_root, "gamma", 'owconfig:enabled "false"^^xsd:boolean')

        assert run("list") == {"alpha": True, "beta": True, "gamma": False}
        assert run("list", "--active") == {"alpha": True, "beta": True}

    def test_show(self, run, extension_root):
        config = run("show", "alpha")
        assert config["name"] == "Alpha"
        assert config["enabled"] is True
        assert config["path"].endswith("alpha/")

    def test_private(self, run):
        assert run("private", "beta") == {"greeting": "hello"}

    def test_show_unknown(self, extension_root, cache, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["-e", str(extension_root), "--cache-path", str(cache.path), "show", "missing"])
        assert exc_info.value.code == 1
        assert "missing" in capsys.readouterr().err

    def test_private_unknown(self, extension_root, cache, capsys):
        with pytest.raises(SystemExit):
            main(["-e", str(extension_root), "--cache-path", str(cache.path), "private", "missing"])
        assert "not registered" in capsys.readouterr().err

    def test_missing_root(self, tmp_path, cache, capsys):
        with pytest.raises(SystemExit):
            main(["-e", str(tmp_path / "nowhere"), "--cache-path", str(cache.path), "scan"])
        assert "cannot read extension root" in capsys.readouterr().err

    def test_corrupt_cache(self, extension_root, cache, capsys):
        cache.path.parent.mkdir(parents=True)
        cache.path.write_text("{broken")
        with pytest.raises(SystemExit):
            main(["-e", str(extension_root), "--cache-path", str(cache.path), "scan"])
        assert "Invalid JSON" in capsys.readouterr().err

    def test_settings_file(self, tmp_path, extension_root, cache, capsys):
        settings = tmp_path / "extconf.yaml"
        settings.write_text(
            f"extension_path: {extension_root}\ncache_path: {cache.path}\n"
        )
        main(["--config", str(settings), "list"])
        assert json.loads(capsys.readouterr().out) == {"alpha": True, "beta": True}

    def test_missing_settings_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit):
            main(["--config", str(tmp_path / "missing.yaml"), "list"])
        assert "not found" in capsys.readouterr().err
