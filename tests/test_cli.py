"""Tests for the plugingen CLI."""

import io

import pytest
from rich.console import Console

from plugingen import cli

ECONOMY = '''\
from plugingen.events import Chat, PlayerJoin
from plugingen.markers import handler, plugin, subscriptions


@plugin(id="rustic-economy", name="Rustic Economy", version="0.1.0", api="1.0.0")
@handler
@subscriptions(Chat, PlayerJoin)
class RusticEconomy:
    pass
'''

BROKEN = '''\
@plugin(id="broken", name="Broken", version="1.0.0", api="1.0.0", foo="bar")
class Broken:
    pass
'''


@pytest.fixture
def output(monkeypatch):
    """Replace the CLI console with a wide recording one and return a reader."""
    console = Console(file=io.StringIO(), record=True, width=200, highlight=False, soft_wrap=True)
    monkeypatch.setattr(cli, "console", console)
    return lambda: console.export_text(clear=False)


@pytest.fixture
def plugins_dir(tmp_path):
    directory = tmp_path / "plugins"
    directory.mkdir()
    (directory / "economy.py").write_text(ECONOMY, encoding="utf-8")
    return directory


class TestCheck:
    """Tests for the check command."""

    def test_passes(self, plugins_dir, output):
        assert cli.main(["check", str(plugins_dir)]) == 0

        assert "All checks passed. 1 declaration(s) in 1 module(s)." in output()
        assert not (plugins_dir / "economy_gen.py").exists()

    def test_reports_diagnostics(self, plugins_dir, output):
        broken = plugins_dir / "broken.py"
        broken.write_text(BROKEN, encoding="utf-8")

        assert cli.main(["check", str(plugins_dir)]) == 1

        text = output()
        assert f"{broken}:1:" in text
        assert "error[UnknownKey]: Unknown key 'foo'" in text
        assert "Found 1 issue(s)." in text

    def test_missing_path(self, tmp_path, output):
        assert cli.main(["check", str(tmp_path / "missing")]) == 1

        assert "does not exist" in output()


class TestGenerate:
    """Tests for the generate command."""

    def test_writes_module(self, plugins_dir, output):
        assert cli.main(["generate", str(plugins_dir)]) == 0

        generated = plugins_dir / "economy_gen.py"
        assert generated.exists()
        text = generated.read_text(encoding="utf-8")
        assert "class RusticEconomy(_source.RusticEconomy, _runtime.Plugin, _runtime.PluginSubscriptions):" in text
        assert f"Wrote {generated} (RusticEconomy)" in output()
        assert "1 declaration(s) generated, 0 failed." in output()

    def test_dry_run(self, plugins_dir, output):
        assert cli.main(["generate", "--dry-run", str(plugins_dir)]) == 0

        assert not (plugins_dir / "economy_gen.py").exists()
        assert "Would write" in output()

    def test_options(self, tmp_path, plugins_dir, output):
        out_dir = tmp_path / "out"

        code = cli.main(
            [
                "generate",
                str(plugins_dir / "economy.py"),
                "--out-dir", str(out_dir),
                "--suffix", "_impl",
                "--source-root", str(tmp_path),
                "--runtime-module", "host.api",
            ]
        )

        assert code == 0
        text = (out_dir / "plugins" / "economy_impl.py").read_text(encoding="utf-8")
        assert "import host.api as _runtime" in text
        assert "import plugins.economy as _source" in text

    def test_partial_failure(self, plugins_dir, output):
        (plugins_dir / "broken.py").write_text(BROKEN, encoding="utf-8")

        assert cli.main(["generate", str(plugins_dir)]) == 1

        assert (plugins_dir / "economy_gen.py").exists()
        assert not (plugins_dir / "broken_gen.py").exists()
        assert "1 declaration(s) generated, 1 failed." in output()

    def test_removes_stale_module(self, plugins_dir, output):
        assert cli.main(["generate", str(plugins_dir)]) == 0
        generated = plugins_dir / "economy_gen.py"
        assert generated.exists()

        (plugins_dir / "economy.py").write_text(ECONOMY.replace('"0.1.0"', "1"), encoding="utf-8")

        assert cli.main(["generate", str(plugins_dir)]) == 1

        assert not generated.exists()
        assert f"Removed stale {generated}" in output()
        assert "0 declaration(s) generated, 1 failed." in output()


class TestInfo:
    """Tests for the info command."""

    def test_table(self, plugins_dir, output):
        assert cli.main(["info", str(plugins_dir)]) == 0

        text = output()
        assert "economy.RusticEconomy" in text
        assert "rustic-economy" in text
        assert "Chat, PlayerJoin" in text
        assert "done" in text

    def test_no_declarations(self, tmp_path, output):
        (tmp_path / "util.py").write_text("def helper():\n    return 1\n", encoding="utf-8")

        assert cli.main(["info", str(tmp_path)]) == 0

        assert "No annotated declarations found." in output()


def test_no_command(capsys):
    assert cli.main([]) == 1
    assert "usage" in capsys.readouterr().out
