"""Tests for the sensitivity classifier."""

from __future__ import annotations

import pytest

from nodenuke.core.classifier import is_sensitive_dir, normalize_path


@pytest.fixture
def home(monkeypatch):
    monkeypatch.setenv("HOME", "/home/alice")
    monkeypatch.delenv("USERPROFILE", raising=False)
    return "/home/alice"


class TestNormalizePath:
    def test_unifies_separators_and_case(self):
        assert normalize_path("\\Users\\Bob\\Proj") == "/users/bob/proj"

    def test_strips_drive_letter(self):
        assert normalize_path("C:\\Users\\Bob\\node_modules") == "/users/bob/node_modules"

    def test_keeps_drive_like_prefix_without_separator(self):
        assert normalize_path("c:relative") == "c:relative"

    def test_keeps_network_prefix(self):
        assert normalize_path("\\\\Server\\Share\\x") == "//server/share/x"


class TestHomeDirectory:
    @pytest.mark.parametrize(
        "path",
        [
            "/home/alice/.config/app/node_modules",
            "/home/alice/.local/share/app/node_modules",
            "/home/alice/.cache/tool/node_modules",
            "/home/alice/.vscode/extensions/ext/node_modules",
            "/home/alice/.nvm/versions/node/v20/lib/node_modules",
        ],
    )
    def test_dotted_locations_are_sensitive(self, home, path):
        assert is_sensitive_dir(path) is True

    @pytest.mark.parametrize(
        "path",
        [
            "/home/alice/.npm/_cacache",
            "/home/alice/.npm/_npx/abc/node_modules",
            "/home/alice/.pnpm/store/node_modules",
        ],
    )
    def test_package_manager_caches_are_safe(self, home, path):
        assert is_sensitive_dir(path) is False

    def test_config_app_is_sensitive(self, home):
        assert is_sensitive_dir("/home/alice/.config/app/node_modules")

    def test_regular_project_is_safe(self, home):
        assert is_sensitive_dir("/home/alice/projects/web/node_modules") is False

    def test_comparison_ignores_case(self, home):
        assert is_sensitive_dir("/HOME/Alice/.Config/App/node_modules") is True

    def test_local_share_check_is_before_whitelist(self, home):
        assert is_sensitive_dir("/home/alice/.cache/.npm/node_modules") is True

    def test_sibling_of_home_is_not_inside_home(self, home):
        assert is_sensitive_dir("/home/alice2/.config/node_modules") is False

    def test_root_as_home_keeps_separator(self, monkeypatch):
        monkeypatch.setenv("HOME", "/")
        monkeypatch.delenv("USERPROFILE", raising=False)
        assert is_sensitive_dir("/.hidden/proj/node_modules") is False

    def test_no_home_falls_through(self, monkeypatch):
        monkeypatch.delenv("HOME", raising=False)
        monkeypatch.delenv("USERPROFILE", raising=False)
        assert is_sensitive_dir("/home/alice/.config/app/node_modules") is False

    def test_userprofile_used_without_home(self, monkeypatch):
        monkeypatch.delenv("HOME", raising=False)
        monkeypatch.setenv("USERPROFILE", "/users/bob")
        assert is_sensitive_dir("/users/bob/.vscode/ext/node_modules") is True

    def test_relative_path_resolved_against_cwd(self, fake_home, monkeypatch):
        monkeypatch.chdir(fake_home)
        assert is_sensitive_dir(".vscode/ext/node_modules") is True
        assert is_sensitive_dir("projects/app/node_modules") is False


class TestApplicationBundles:
    def test_inside_app_bundle(self, home):
        path = "/Applications/Slack.app/Contents/Resources/app/node_modules"
        assert is_sensitive_dir(path) is True

    def test_bundle_in_subfolder_is_not_matched(self, home):
        path = "/Applications/tools/Foo.app/Contents/node_modules"
        assert is_sensitive_dir(path) is False

    def test_applications_without_bundle(self, home):
        assert is_sensitive_dir("/Applications/scripts/node_modules") is False


class TestNetworkPaths:
    def test_hidden_segment_on_share(self, home):
        assert is_sensitive_dir("//server/share/.hidden/node_modules") is True

    def test_backslash_share(self, home):
        assert is_sensitive_dir("\\\\Server\\Share\\.git\\node_modules") is True

    def test_plain_share_path(self, home):
        assert is_sensitive_dir("//server/share/proj/node_modules") is False

    def test_dotted_share_name_is_skipped(self, home):
        assert is_sensitive_dir("//server/.share/proj/node_modules") is False


class TestAppData:
    def test_roaming_is_always_sensitive(self, home):
        assert is_sensitive_dir("/Users/Bob/AppData/Roaming/npm/node_modules") is True

    def test_local_is_sensitive(self, home):
        assert is_sensitive_dir("/Users/Bob/AppData/Local/Programs/app/node_modules") is True

    @pytest.mark.parametrize("cache", [".cache", ".npm", ".pnpm"])
    def test_local_cache_segment_is_safe(self, home, cache):
        assert is_sensitive_dir(f"/Users/Bob/AppData/Local/{cache}/node_modules") is False

    def test_local_cache_as_last_segment(self, home):
        assert is_sensitive_dir("/Users/Bob/AppData/Local/pnpm/.pnpm") is False


class TestPurity:
    def test_same_answer_twice(self, home):
        for path in (
            "/home/alice/.config/app/node_modules",
            "/home/alice/work/node_modules",
            "//server/share/.x/node_modules",
        ):
            assert is_sensitive_dir(path) == is_sensitive_dir(path)

    def test_accepts_path_objects(self, home):
        from pathlib import Path

        assert is_sensitive_dir(Path("/home/alice/.config/a/node_modules")) is True
