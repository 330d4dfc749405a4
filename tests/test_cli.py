"""
Front-end argument parsing and exit status tests.
"""

import io
import logging
from unittest.mock import MagicMock, patch

import pytest

from dca.cli import configure_logging, main, parse_arguments


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    """Isolated working directory and settings file; never touches a real daemon."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DCA_SETTINGS", str(tmp_path / "settings.toml"))
    for name in ("DOCKER_COMPOSE_FILE", "DCA_ASSUME_YES", "DCA_LOG_LEVEL", "NO_COLOR"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


class TestParseArguments:
    def test_verb_args_untouched(self):
        args = parse_arguments(["dc", "up", "-pl", "--force", "-f", "x.yml"])

        assert args.verb == "dc"
        assert args.args == ["up", "-pl", "--force", "-f", "x.yml"]

    def test_frontend_options(self):
        args = parse_arguments(["-y", "--no-color", "--log-level", "debug", "d", "ps"])

        assert args.yes is True
        assert args.no_color is True
        assert args.log_level == "DEBUG"
        assert args.verb == "d"
        assert args.args == ["ps"]

    def test_options_after_verb_belong_to_verb(self):
        args = parse_arguments(["d", "rm", "-y"])

        assert args.yes is False
        assert args.args == ["rm", "-y"]

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("DCA_LOG_LEVEL", raising=False)

        args = parse_arguments(["dstatus"])

        assert args.yes is False
        assert args.no_color is False
        assert args.log_level is None
        assert args.args == []

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            parse_arguments(["--version"])

        assert exc_info.value.code == 0
        assert capsys.readouterr().out.startswith("dca ")


class TestConfigureLogging:
    @pytest.fixture(autouse=True)
    def restore_level(self):
        yield
        configure_logging("WARNING", {})

    def test_option_wins_over_environment(self):
        assert configure_logging("debug", {"DCA_LOG_LEVEL": "ERROR"}) == "DEBUG"
        assert logging.getLogger().level == logging.DEBUG

    def test_environment_default(self):
        assert configure_logging(None, {"DCA_LOG_LEVEL": "info"}) == "INFO"
        assert logging.getLogger().level == logging.INFO

    def test_unknown_environment_level(self, capsys):
        assert configure_logging(None, {"DCA_LOG_LEVEL": "loud"}) == "WARNING"

        assert "[WARNING] Ignoring DCA_LOG_LEVEL=LOUD" in capsys.readouterr().err


class TestMain:
    def test_unknown_verb(self, cli_env, capsys):
        assert main(["--no-color", "nope"]) == 1
        assert "❌ Unknown command: nope" in capsys.readouterr().err

    def test_no_compose_file(self, cli_env, capsys):
        with patch("subprocess.Popen") as mock_popen, patch("subprocess.run") as mock_run:
            assert main(["--no-color", "dc", "up"]) == 1

        mock_popen.assert_not_called()
        mock_run.assert_not_called()
        assert "No compose file found" in capsys.readouterr().err

    def test_missing_override(self, cli_env, capsys):
        (cli_env / "docker-compose.yml").write_text("services: {}\n")

        with patch("subprocess.Popen") as mock_popen:
            assert main(["--no-color", "dc", "down", "-f", "gone.yml"]) == 1

        mock_popen.assert_not_called()
        assert "gone.yml" in capsys.readouterr().err

    def test_declined_exits_zero(self, cli_env, capsys, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("no\n"))

        with patch("subprocess.Popen") as mock_popen:
            assert main(["--no-color", "d", "prune"]) == 0

        mock_popen.assert_not_called()
        assert "Operation cancelled" in capsys.readouterr().out

    def test_assume_yes_from_environment(self, cli_env, monkeypatch):
        monkeypatch.setenv("DCA_ASSUME_YES", "1")
        proc = MagicMock()
        proc.wait.return_value = 0

        with patch("subprocess.Popen", return_value=proc) as mock_popen:
            assert main(["--no-color", "d", "prune"]) == 0

        assert mock_popen.call_args.args[0] == ["docker", "system", "prune", "-f"]

    def test_runtime_exit_status_propagated(self, cli_env, capsys):
        proc = MagicMock()
        proc.wait.return_value = 3

        with patch("subprocess.Popen", return_value=proc):
            assert main(["--no-color", "d", "ps"]) == 3

        assert "❌ Command failed with exit code 3: docker ps" in capsys.readouterr().err

    def test_missing_docker_binary(self, cli_env, capsys):
        with patch("subprocess.Popen", side_effect=FileNotFoundError):
            assert main(["--no-color", "d", "ps"]) == 127

        assert "docker: command not found" in capsys.readouterr().err

    def test_interrupt(self, cli_env):
        proc = MagicMock()
        proc.wait.side_effect = KeyboardInterrupt
        proc.poll.return_value = 0

        with patch("subprocess.Popen", return_value=proc):
            assert main(["--no-color", "d", "logs", "web"]) == 130

    def test_shell_init(self, cli_env, capsys):
        assert main(["shell-init"]) == 0

        assert "_dca_complete" in capsys.readouterr().out

    def test_shell_init_broken_template(self, cli_env, capsys, monkeypatch):
        template = cli_env / "broken.j2"
        template.write_text("{% for verb in verbs %}{{ verb }}")
        monkeypatch.setattr("dca.shell_init.TEMPLATE_PATH", template)

        assert main(["--no-color", "shell-init"]) == 1

        err = capsys.readouterr().err
        assert "❌ Failed to render template" in err
        assert "Traceback" not in err

    def test_complete(self, cli_env, capsys):
        assert main(["complete", "dc", "defa"]) == 0

        assert capsys.readouterr().out.splitlines() == ["default"]

    def test_complete_after_double_dash(self, cli_env, capsys):
        assert main(["complete", "--", "dc", "up", "--for"]) == 0

        assert capsys.readouterr().out.splitlines() == ["--force"]


class TestSettingsVerb:
    def test_path(self, cli_env, capsys):
        assert main(["settings", "path"]) == 0

        assert capsys.readouterr().out.strip() == str(cli_env / "settings.toml")

    def test_init_then_refuse_overwrite(self, cli_env, capsys):
        assert main(["--no-color", "settings", "init"]) == 0
        assert (cli_env / "settings.toml").exists()

        assert main(["--no-color", "settings", "init"]) == 1
        assert "already exists" in capsys.readouterr().err

    def test_show_defaults(self, cli_env, capsys):
        assert main(["settings"]) == 0

        out = capsys.readouterr().out
        assert "(not present, defaults)" in out
        assert 'formatter = "docker-color-output"' in out

    def test_invalid_settings_file(self, cli_env, capsys):
        (cli_env / "settings.toml").write_text("[logs]\ntail = -1\n")

        assert main(["d", "ps"]) == 1
        assert "logs.tail" in capsys.readouterr().err

    def test_unknown_action(self, cli_env, capsys):
        assert main(["--no-color", "settings", "purge"]) == 1
        assert "Usage: dca settings" in capsys.readouterr().err
