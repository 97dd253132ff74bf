"""Tests for cg-gen-events version resolution, installation and CGE parsing."""

import json
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import requests

from codegame.cggenevents import (
    REPOSITORY_URL,
    cg_gen_events,
    get_event_names,
    install_cg_gen_events,
    latest_cge_version,
    parse_cge_version,
)
from codegame.external.cache import GithubCache
from codegame.external.exceptions import (
    DecodeError,
    InstallError,
    InvalidSchemaError,
    TagNotFoundError,
    ToolExecutionError,
    VersionResolutionError,
)

TAGS = [{"name": "v0.4.2"}, {"name": "v0.4.1"}, {"name": "v0.3.0"}]


@pytest.fixture
def cache(dirs, fake_session):
    return GithubCache(dirs=dirs, session=fake_session)


@pytest.fixture
def installer():
    mock = MagicMock()
    mock.install.side_effect = lambda program, binary, repo, version, install_dir: (
        f"{binary}-{version}"
    )
    return mock


@pytest.mark.short
class TestParseCGEVersion:
    def test_simple(self):
        assert parse_cge_version("name test\nversion 0.4\n") == "0.4"

    def test_leading_version(self):
        assert parse_cge_version("version 0.3\nname test") == "0.3"

    def test_line_and_nested_block_comments(self):
        cge = "// comment\n/* nested /* still nested */ still */ version 0.4"
        assert parse_cge_version(cge) == "0.4"

    def test_comment_with_fake_version(self):
        cge = "/* version 9.9 */\n// version 8.8\nname game\nversion 0.4"
        assert parse_cge_version(cge) == "0.4"

    def test_block_comment_with_slashes_and_stars(self):
        cge = "/* see https://code-game.org/docs * for details */ version 0.4"
        with pytest.raises(InvalidSchemaError):
            parse_cge_version(cge)

    def test_line_comment_inside_block_comment(self):
        # the "//" of the URL comments out the closing "*/"
        with pytest.raises(InvalidSchemaError):
            parse_cge_version("/* see http://x */ version 0.4")

    def test_line_comment_inside_block_comment_ends_at_newline(self):
        cge = "/* see https://code-game.org/docs */\n*/ version 0.4"
        assert parse_cge_version(cge) == "0.4"

    def test_whitespace_variants(self):
        assert parse_cge_version("\r\n\t  version\t0.4\r\n") == "0.4"

    def test_multibyte_characters_in_comment(self):
        assert parse_cge_version("/* ünïcødé ✓ 🎮 */ version 0.4") == "0.4"

    def test_missing_version(self):
        with pytest.raises(InvalidSchemaError, match="no version field"):
            parse_cge_version("name test\nevent foo {}")

    def test_version_is_last_word(self):
        with pytest.raises(InvalidSchemaError):
            parse_cge_version("name test version")

    def test_empty_input(self):
        with pytest.raises(InvalidSchemaError):
            parse_cge_version("")

    def test_unterminated_block_comment(self):
        with pytest.raises(InvalidSchemaError):
            parse_cge_version("/* version 0.4")

    def test_unterminated_nested_block_comment(self):
        with pytest.raises(InvalidSchemaError):
            parse_cge_version("/* outer /* inner */ version 0.4")

    def test_line_comment_at_end_of_input(self):
        with pytest.raises(InvalidSchemaError):
            parse_cge_version("// version 0.4")

    def test_trailing_slash(self):
        with pytest.raises(InvalidSchemaError):
            parse_cge_version("   /")


@pytest.mark.short
class TestLatestCGEVersion:
    def test_two_components(self, cache, fake_session, make_json_response):
        fake_session.queue(make_json_response(TAGS))

        assert latest_cge_version(cache) == "0.4"
        assert fake_session.calls[0]["url"].endswith(
            "/repos/code-game-project/cg-gen-events/tags"
        )

    def test_wraps_errors(self, cache, fake_session):
        fake_session.queue(requests.ConnectionError("offline"))

        with pytest.raises(
            VersionResolutionError, match="Couldn't determine the latest CGE version"
        ):
            latest_cge_version(cache)

    def test_no_tags(self, cache, fake_session, make_json_response):
        fake_session.queue(make_json_response([]))

        with pytest.raises(VersionResolutionError):
            latest_cge_version(cache)


@pytest.mark.short
class TestInstallCGGenEvents:
    def test_installs_matching_release(self, dirs, cache, fake_session, installer, make_json_response):
        fake_session.queue(make_json_response(TAGS))

        name = install_cg_gen_events("0.4", dirs=dirs, cache=cache, installer=installer)

        assert name == "cg-gen-events-0.4.2"
        installer.install.assert_called_once_with(
            "cg-gen-events",
            "cg-gen-events",
            REPOSITORY_URL,
            "0.4.2",
            dirs.cg_gen_events_dir,
        )

    def test_unknown_version(self, dirs, cache, fake_session, installer, make_json_response):
        fake_session.queue(make_json_response(TAGS))

        with pytest.raises(TagNotFoundError):
            install_cg_gen_events("0.9", dirs=dirs, cache=cache, installer=installer)
        installer.install.assert_not_called()

    def test_install_errors_propagate(self, dirs, cache, fake_session, make_json_response):
        fake_session.queue(make_json_response(TAGS))
        failing = MagicMock()
        failing.install.side_effect = InstallError("cg-gen-events", "0.3.0", "boom")

        with pytest.raises(InstallError, match="boom"):
            install_cg_gen_events("0.3", dirs=dirs, cache=cache, installer=failing)


@pytest.mark.short
class TestRunCGGenEvents:
    def test_runs_installed_executable(self, dirs, cache, fake_session, installer, make_json_response):
        fake_session.queue(make_json_response(TAGS))
        completed = subprocess.CompletedProcess(args=[], returncode=0, stdout="", stderr="")

        with patch("codegame.cggenevents.subprocess.run", return_value=completed) as run:
            cg_gen_events("0.4", "/tmp/out", "events.cge", "go", dirs, cache, installer)

        command = run.call_args.args[0]
        assert command == [
            str(dirs.cg_gen_events_dir / "cg-gen-events-0.4.2"),
            "events.cge",
            "-l",
            "go",
            "-o",
            "/tmp/out",
        ]

    def test_non_zero_exit(self, dirs, cache, fake_session, installer, make_json_response):
        fake_session.queue(make_json_response(TAGS))
        failed = subprocess.CompletedProcess(args=[], returncode=1, stdout="", stderr="bad cge")

        with patch("codegame.cggenevents.subprocess.run", return_value=failed):
            with pytest.raises(ToolExecutionError, match="bad cge"):
                cg_gen_events("0.4", "/tmp/out", "events.cge", "go", dirs, cache, installer)

    def test_get_event_names(self, tmp_path, dirs, cache, fake_session, installer, make_json_response):
        fake_session.queue(make_json_response(TAGS))
        document = {
            "events": [{"name": "joined"}, {"name": "moved"}],
            "commands": [{"name": "move"}],
        }

        def fake_run(command, **kwargs):
            output_dir = Path(command[command.index("-o") + 1])
            (output_dir / "events.json").write_text(json.dumps(document))
            return subprocess.CompletedProcess(args=command, returncode=0, stdout="", stderr="")

        with patch("codegame.cggenevents.tempfile.gettempdir", return_value=str(tmp_path)), patch(
            "codegame.cggenevents.subprocess.run", side_effect=fake_run
        ):
            events, commands = get_event_names(
                "https://game.example.com", "0.4", dirs, cache, installer
            )

        assert events == ["joined", "moved"]
        assert commands == ["move"]
        assert not (tmp_path / "events.json").exists()

    @pytest.mark.parametrize("content", ["[]", '{"events": [{"id": 1}]}', "not json"])
    def test_get_event_names_unexpected_document(
        self, tmp_path, dirs, cache, fake_session, installer, make_json_response, content
    ):
        fake_session.queue(make_json_response(TAGS))

        def fake_run(command, **kwargs):
            output_dir = Path(command[command.index("-o") + 1])
            (output_dir / "events.json").write_text(content)
            return subprocess.CompletedProcess(args=command, returncode=0, stdout="", stderr="")

        with patch("codegame.cggenevents.tempfile.gettempdir", return_value=str(tmp_path)), patch(
            "codegame.cggenevents.subprocess.run", side_effect=fake_run
        ):
            with pytest.raises(DecodeError):
                get_event_names("https://game.example.com", "0.4", dirs, cache, installer)

        assert not (tmp_path / "events.json").exists()
