"""
Completion back-end tests.
"""

from dca.completion import CompletionProvider
from dca.errors import RuntimeInvocationError

SERVICES = ["web", "worker", "db"]


def provider(registry, session):
    return CompletionProvider(registry, session)


class TestVerbs:
    def test_no_words(self, registry, make_session):
        names = provider(registry, make_session()).complete([])

        assert names[:2] == ["d", "dc"]
        assert "dcpr" in names

    def test_partial_verb_includes_aliases(self, registry, make_session):
        assert provider(registry, make_session()).complete(["dcl"]) == ["dclt", "dcleanup", "dcl"]

    def test_unknown_verb(self, registry, make_session):
        assert provider(registry, make_session()).complete(["ls", ""]) == []


class TestSubcommands:
    def test_group_vocabulary(self, registry, make_session):
        assert provider(registry, make_session()).complete(["dc", "u"]) == ["up", "u", "ul"]

    def test_docker_vocabulary_has_aliases(self, registry, make_session):
        candidates = provider(registry, make_session()).complete(["d", "pr"])

        assert candidates == ["prune", "pr", "prunea", "prf", "pruneima", "pri", "prunevol", "prv",
                              "prunenet", "prn"]

    def test_unknown_subcommand(self, registry, make_session):
        assert provider(registry, make_session()).complete(["dc", "config", ""]) == []


class TestFlags:
    def test_all_flags_offered(self, registry, make_session):
        candidates = provider(registry, make_session()).complete(["dc", "up", "-"])

        assert candidates == ["-p", "--pull", "-b", "--build", "-l", "--logs", "--force", "-f"]

    def test_used_flags_dropped(self, registry, make_session):
        candidates = provider(registry, make_session()).complete(["dc", "up", "-pl", "-f", "a.yml", "-"])

        assert candidates == ["-b", "--build", "--force"]

    def test_long_prefix(self, registry, make_session):
        assert provider(registry, make_session()).complete(["dcup", "--f"]) == ["--force"]

    def test_files_after_file_flag(self, registry, compose_project, make_session):
        (compose_project / "prod.yml").write_text("")

        candidates = provider(registry, make_session()).complete(["dc", "down", "-f", ""])

        assert candidates == ["docker-compose.yml", "prod.yml"]


class TestTargets:
    def test_services(self, registry, compose_project, make_session):
        candidates = provider(registry, make_session(services=SERVICES)).complete(["dc", "up", "w"])

        assert candidates == ["web", "worker"]

    def test_positional_after_file_value(self, registry, compose_project, make_session):
        (compose_project / "prod.yml").write_text("")
        session = make_session(services=SERVICES)

        assert provider(registry, session).complete(["dc", "up", "-f", "prod.yml", "d"]) == ["db"]
        assert session.runtime.discoveries == [("services", "prod.yml", False)]

    def test_shell_alias_expanded(self, registry, compose_project, make_session):
        candidates = provider(registry, make_session(services=SERVICES)).complete(["dcl", ""])

        assert candidates == SERVICES

    def test_containers(self, registry, make_session):
        session = make_session(containers=["web-1", "db-1"])

        assert provider(registry, session).complete(["d", "x", ""]) == ["web-1", "db-1"]
        assert provider(registry, session).complete(["dx", "d"]) == ["db-1"]

    def test_single_target_stops_after_first(self, registry, make_session):
        session = make_session(containers=["web-1", "db-1"])

        assert provider(registry, session).complete(["d", "x", "web-1", ""]) == []
        assert provider(registry, session).complete(["dq", "web", ""]) == []

    def test_multi_target_continues(self, registry, make_session):
        session = make_session(containers=["web-1", "db-1"])

        assert provider(registry, session).complete(["d", "stop", "web-1", ""]) == ["web-1", "db-1"]

    def test_no_target_kind(self, registry, make_session):
        assert provider(registry, make_session(containers=["web-1"])).complete(["d", "images", ""]) == []

    def test_default_keywords(self, registry, compose_project, make_session):
        candidates = provider(registry, make_session()).complete(["dc", "default", ""])

        assert candidates == ["docker-compose.yml", "remove", "rm"]
        assert provider(registry, make_session()).complete(["dc", "default", "rm", ""]) == []


class TestDiscoveryFailures:
    def test_no_manifest_yields_nothing(self, registry, make_session):
        session = make_session(services=SERVICES)

        assert provider(registry, session).complete(["dc", "up", ""]) == []
        assert session.runtime.discoveries == []

    def test_runtime_error_yields_nothing(self, registry, make_session):
        session = make_session(discovery_error=RuntimeInvocationError(["docker", "ps"], 1, "daemon down"))

        assert provider(registry, session).complete(["d", "logs", ""]) == []
