"""
Compose manifest resolution and default-file setting tests.
"""

import pytest

from dca.compose_file import (
    compose_context,
    list_compose_files,
    read_default_setting,
    remove_default,
    resolve_compose_file,
    set_default,
)
from dca.errors import NoComposeFileError


class TestResolveComposeFile:
    def test_conventional_file_only(self, tmp_path):
        (tmp_path / "docker-compose.yml").write_text("services: {}\n")

        assert resolve_compose_file(tmp_path, env={}) == tmp_path / "docker-compose.yml"

    def test_yml_preferred_over_yaml(self, tmp_path):
        (tmp_path / "docker-compose.yaml").write_text("services: {}\n")
        (tmp_path / "docker-compose.yml").write_text("services: {}\n")

        assert resolve_compose_file(tmp_path, env={}).name == "docker-compose.yml"

    def test_yaml_variant(self, tmp_path):
        (tmp_path / "docker-compose.yaml").write_text("services: {}\n")

        assert resolve_compose_file(tmp_path, env={}).name == "docker-compose.yaml"

    def test_override_wins(self, tmp_path):
        (tmp_path / "docker-compose.yml").write_text("services: {}\n")
        (tmp_path / "prod.yml").write_text("services: {}\n")

        assert resolve_compose_file(tmp_path, "prod.yml", env={}) == tmp_path / "prod.yml"

    def test_missing_override_never_falls_back(self, tmp_path):
        (tmp_path / "docker-compose.yml").write_text("services: {}\n")

        with pytest.raises(FileNotFoundError, match="missing.yml"):
            resolve_compose_file(tmp_path, "missing.yml", env={})

    def test_environment_override(self, tmp_path):
        (tmp_path / "docker-compose.yml").write_text("services: {}\n")
        (tmp_path / "staging.yml").write_text("services: {}\n")

        resolved = resolve_compose_file(tmp_path, env={"DOCKER_COMPOSE_FILE": "staging.yml"})

        assert resolved == tmp_path / "staging.yml"

    def test_missing_environment_override(self, tmp_path):
        (tmp_path / "docker-compose.yml").write_text("services: {}\n")

        with pytest.raises(FileNotFoundError, match="DOCKER_COMPOSE_FILE"):
            resolve_compose_file(tmp_path, env={"DOCKER_COMPOSE_FILE": "gone.yml"})

    def test_command_line_beats_environment(self, tmp_path):
        (tmp_path / "a.yml").write_text("services: {}\n")
        (tmp_path / "b.yml").write_text("services: {}\n")

        resolved = resolve_compose_file(tmp_path, "a.yml", env={"DOCKER_COMPOSE_FILE": "b.yml"})

        assert resolved.name == "a.yml"

    def test_default_setting_used_last(self, tmp_path):
        (tmp_path / "app.yml").write_text("services: {}\n")
        (tmp_path / ".env").write_text("DOCKER_COMPOSE_FILE=app.yml\n")

        assert resolve_compose_file(tmp_path, env={}) == tmp_path / "app.yml"

    def test_conventional_file_beats_default(self, tmp_path):
        (tmp_path / "docker-compose.yml").write_text("services: {}\n")
        (tmp_path / "app.yml").write_text("services: {}\n")
        (tmp_path / ".env").write_text("DOCKER_COMPOSE_FILE=app.yml\n")

        assert resolve_compose_file(tmp_path, env={}).name == "docker-compose.yml"

    def test_stale_default_is_not_found(self, tmp_path):
        (tmp_path / ".env").write_text("DOCKER_COMPOSE_FILE=deleted.yml\n")

        with pytest.raises(NoComposeFileError, match="deleted.yml"):
            resolve_compose_file(tmp_path, env={})

    def test_nothing_found(self, tmp_path):
        with pytest.raises(NoComposeFileError) as exc_info:
            resolve_compose_file(tmp_path, env={})

        message = str(exc_info.value)
        assert "docker-compose.yml" in message
        assert "docker-compose.yaml" in message
        assert "-f" in message


class TestDefaultSetting:
    def test_set_twice_leaves_one_line(self, tmp_path):
        (tmp_path / "app.yml").write_text("services: {}\n")

        set_default(tmp_path, "app.yml")
        set_default(tmp_path, "app.yml")

        lines = (tmp_path / ".env").read_text().splitlines()
        assert lines == ["DOCKER_COMPOSE_FILE=app.yml"]

    def test_set_keeps_other_lines(self, tmp_path):
        (tmp_path / "app.yml").write_text("services: {}\n")
        (tmp_path / "other.yml").write_text("services: {}\n")
        (tmp_path / ".env").write_text("PROJECT=demo\nDOCKER_COMPOSE_FILE=other.yml\nTAG=1\n")

        set_default(tmp_path, "app.yml")

        lines = (tmp_path / ".env").read_text().splitlines()
        assert lines == ["PROJECT=demo", "TAG=1", "DOCKER_COMPOSE_FILE=app.yml"]
        assert read_default_setting(tmp_path) == "app.yml"

    def test_set_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="File nope.yml does not exist"):
            set_default(tmp_path, "nope.yml")

        assert not (tmp_path / ".env").exists()

    def test_remove_without_default_is_noop(self, tmp_path):
        assert remove_default(tmp_path) is False
        assert not (tmp_path / ".env").exists()

    def test_remove_existing(self, tmp_path):
        (tmp_path / ".env").write_text("PROJECT=demo\nDOCKER_COMPOSE_FILE=app.yml\n")

        assert remove_default(tmp_path) is True
        assert (tmp_path / ".env").read_text() == "PROJECT=demo\n"
        assert read_default_setting(tmp_path) is None


class TestComposeFileListing:
    def test_conventional_names_first(self, tmp_path):
        for name in ("zeta.yml", "compose.yaml", "docker-compose.yml", "alpha.yaml", "notes.txt"):
            (tmp_path / name).write_text("")

        assert list_compose_files(tmp_path) == ["docker-compose.yml", "compose.yaml", "alpha.yaml", "zeta.yml"]

    def test_context_records_failure(self, tmp_path):
        context = compose_context(tmp_path, env={})

        assert context.resolved_file is None
        assert "No compose file found" in context.error
        assert context.default_file_setting is None
