"""Integration tests for CLI commands."""

import json

import yaml
from helpers import make_episode
from typer.testing import CliRunner

from dom314 import __version__
from dom314.cli import app
from dom314.config.manager import ConfigManager
from dom314.state.store import Group, StateStore

runner = CliRunner()

FEED_A = "https://a.example.com/feed.xml"
FEED_B = "https://b.example.com/feed.xml"


class TestCLIVersion:
    """Tests for version command."""

    def test_version_command(self) -> None:
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "dom314" in result.stdout
        assert __version__ in result.stdout


class TestCLISubscriptions:
    """Tests for subscribe, unsubscribe and subscriptions."""

    def test_subscribe(self, cli_backends, cli_store: StateStore) -> None:
        result = runner.invoke(app, ["subscribe", "beloved", FEED_A, "--backend", "fake"])

        assert result.exit_code == 0
        assert "Subscribed" in result.stdout
        assert cli_store.list_subscriptions(Group.BELOVED) == [(FEED_A, "fake")]

    def test_subscribe_twice_is_idempotent(self, cli_backends, cli_store: StateStore) -> None:
        runner.invoke(app, ["subscribe", "beloved", FEED_A, "-b", "fake"])
        result = runner.invoke(app, ["subscribe", "beloved", FEED_A, "-b", "fake"])

        assert result.exit_code == 0
        assert cli_store.list_subscriptions(Group.BELOVED) == [(FEED_A, "fake")]

    def test_subscribe_unknown_backend(self, cli_backends, cli_store: StateStore) -> None:
        result = runner.invoke(app, ["subscribe", "beloved", FEED_A, "--backend", "xyz"])

        assert result.exit_code == 1
        assert "Unknown backend" in result.stdout
        assert not cli_store.is_subscribed(Group.BELOVED, FEED_A)

    def test_subscribe_unknown_group(self, cli_backends) -> None:
        result = runner.invoke(app, ["subscribe", "favorites", FEED_A, "-b", "fake"])

        assert result.exit_code == 1
        assert "Unknown group" in result.stdout

    def test_unsubscribe(self, cli_backends, cli_store: StateStore) -> None:
        cli_store.set_subscription(Group.TIMEKILLING, FEED_A, "fake", True)

        result = runner.invoke(app, ["unsubscribe", "timekilling", FEED_A])

        assert result.exit_code == 0
        assert "Unsubscribed" in result.stdout
        assert not cli_store.is_subscribed(Group.TIMEKILLING, FEED_A)

    def test_unsubscribe_not_subscribed(self, cli_backends) -> None:
        result = runner.invoke(app, ["unsubscribe", "timekilling", FEED_A])

        assert result.exit_code == 0
        assert "Not subscribed" in result.stdout

    def test_list_subscriptions(self, cli_backends, cli_store: StateStore) -> None:
        cli_store.set_subscription(Group.BELOVED, FEED_A, "fake", True)
        cli_store.set_subscription(Group.TIMEKILLING, FEED_B, "fake", True)

        result = runner.invoke(app, ["subscriptions", "beloved"])

        assert result.exit_code == 0
        assert FEED_A in result.stdout
        assert FEED_B not in result.stdout
        assert "Total: 1 feed(s)" in result.stdout

    def test_list_empty(self, cli_backends) -> None:
        result = runner.invoke(app, ["subscriptions", "beloved"])

        assert result.exit_code == 0
        assert "No subscriptions in 'beloved'" in result.stdout


class TestCLIGroup:
    """Tests for group command."""

    def test_group_newest_first(self, cli_backends, cli_store: StateStore) -> None:
        fetching, _ = cli_backends
        fetching.feeds = {
            FEED_A: [make_episode("https://a.example.com/old-one.mp3", seconds=0)],
            FEED_B: [make_episode("https://b.example.com/new-one.mp3", seconds=60)],
        }
        cli_store.set_subscription(Group.BELOVED, FEED_A, "fake", True)
        cli_store.set_subscription(Group.BELOVED, FEED_B, "fake", True)

        result = runner.invoke(app, ["group", "beloved"])

        assert result.exit_code == 0
        assert result.stdout.index("new-one.mp3") < result.stdout.index("old-one.mp3")
        assert "2 episode(s) from 2 feed(s)" in result.stdout

    def test_group_hides_listened(self, cli_backends, cli_store: StateStore) -> None:
        fetching, _ = cli_backends
        fetching.feeds = {
            FEED_A: [
                make_episode("https://a.example.com/heard.mp3", seconds=0),
                make_episode("https://a.example.com/fresh.mp3", seconds=60),
            ]
        }
        cli_store.set_subscription(Group.BELOVED, FEED_A, "fake", True)
        cli_store.set_listened("https://a.example.com/heard.mp3", True)

        hidden = runner.invoke(app, ["group", "beloved"])
        shown = runner.invoke(app, ["group", "beloved", "--all"])

        assert "heard.mp3" not in hidden.stdout
        assert "fresh.mp3" in hidden.stdout
        assert "heard.mp3" in shown.stdout

    def test_group_json(self, cli_backends, cli_store: StateStore) -> None:
        fetching, _ = cli_backends
        fetching.feeds = {
            FEED_A: [
                make_episode("https://a.example.com/1.mp3", seconds=0),
                make_episode("https://a.example.com/2.mp3", seconds=0),
            ]
        }
        cli_store.set_subscription(Group.BELOVED, FEED_A, "fake", True)

        result = runner.invoke(app, ["group", "beloved", "--json", "--order", "oldest"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["group"] == "beloved"
        assert data["feeds"] == 1
        assert [ep["audio_url"] for ep in data["episodes"]] == [
            "https://a.example.com/1.mp3",
            "https://a.example.com/2.mp3",
        ]
        assert data["episodes"][0]["published_at"] < data["episodes"][1]["published_at"]

    def test_group_strict_failure(self, cli_backends, cli_store: StateStore) -> None:
        fetching, _ = cli_backends
        fetching.feeds = {FEED_A: [make_episode("https://a.example.com/1.mp3")]}
        cli_store.set_subscription(Group.BELOVED, FEED_A, "fake", True)
        cli_store.set_subscription(Group.BELOVED, FEED_B, "fake", True)

        result = runner.invoke(app, ["group", "beloved"])

        assert result.exit_code == 1
        assert "Could not load group 'beloved'" in result.stdout
        assert FEED_B in result.stdout

    def test_group_strict_failure_json(self, cli_backends, cli_store: StateStore) -> None:
        fetching, _ = cli_backends
        fetching.feeds = {FEED_A: [make_episode("https://a.example.com/1.mp3")]}
        cli_store.set_subscription(Group.BELOVED, FEED_A, "fake", True)
        cli_store.set_subscription(Group.BELOVED, FEED_B, "fake", True)

        result = runner.invoke(app, ["group", "beloved", "--json"])

        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["group"] == "beloved"
        assert FEED_B in data["error"]
        assert [f["feed_url"] for f in data["failed"]] == [FEED_B]
        assert data["failed"][0]["backend"] == "fake"

    def test_group_partial_failure(self, cli_backends, cli_store: StateStore) -> None:
        fetching, _ = cli_backends
        fetching.feeds = {FEED_A: [make_episode("https://a.example.com/1.mp3")]}
        cli_store.set_subscription(Group.BELOVED, FEED_A, "fake", True)
        cli_store.set_subscription(Group.BELOVED, FEED_B, "fake", True)

        result = runner.invoke(app, ["group", "beloved", "--partial"])

        assert result.exit_code == 0
        assert "1.mp3" in result.stdout
        assert FEED_B in result.stdout

    def test_partial_policy_from_config(self, cli_backends, cli_store: StateStore) -> None:
        ConfigManager().set_value("failure_policy", "partial")
        cli_store.set_subscription(Group.BELOVED, FEED_B, "fake", True)

        result = runner.invoke(app, ["group", "beloved"])

        assert result.exit_code == 0
        assert "0 episode(s) from 1 feed(s)" in result.stdout

    def test_empty_group(self, cli_backends) -> None:
        result = runner.invoke(app, ["group", "timekilling"])

        assert result.exit_code == 0
        assert "No subscriptions in 'timekilling'" in result.stdout

    def test_unknown_group(self, cli_backends) -> None:
        result = runner.invoke(app, ["group", "favorites"])

        assert result.exit_code == 1
        assert "Unknown group" in result.stdout


class TestCLIPodcast:
    """Tests for podcast command."""

    def test_podcast_oldest_first(self, cli_backends, cli_store: StateStore) -> None:
        fetching, _ = cli_backends
        fetching.feeds = {
            FEED_A: [
                make_episode("https://a.example.com/new-one.mp3", seconds=60),
                make_episode("https://a.example.com/old-one.mp3", seconds=0),
            ]
        }
        cli_store.set_subscription(Group.TIMEKILLING, FEED_A, "fake", True)

        result = runner.invoke(app, ["podcast", FEED_A, "--backend", "fake"])

        assert result.exit_code == 0
        assert result.stdout.index("old-one.mp3") < result.stdout.index("new-one.mp3")
        assert "Groups: timekilling" in result.stdout

    def test_podcast_fetch_error(self, cli_backends) -> None:
        result = runner.invoke(app, ["podcast", FEED_A, "--backend", "fake"])

        assert result.exit_code == 1
        assert "Error" in result.stdout

    def test_podcast_unknown_backend(self, cli_backends) -> None:
        result = runner.invoke(app, ["podcast", FEED_A, "--backend", "xyz"])

        assert result.exit_code == 1
        assert "Unknown backend: 'xyz'" in result.stdout


class TestCLIDiscover:
    """Tests for discover and backends commands."""

    def test_lists_discovery_backends(self, cli_backends) -> None:
        result = runner.invoke(app, ["discover"])

        assert result.exit_code == 0
        assert "fake-discovery" in result.stdout
        assert "Fake catalog" in result.stdout

    def test_discovery(self, cli_backends) -> None:
        result = runner.invoke(app, ["discover", "fake-discovery"])

        assert result.exit_code == 0
        assert "abcdef" in result.stdout
        assert "xyz" in result.stdout

    def test_search(self, cli_backends) -> None:
        result = runner.invoke(app, ["discover", "fake-discovery", "--search", "abc", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [p["title"] for p in data["podcasts"]] == ["abcdef"]

    def test_search_no_results(self, cli_backends) -> None:
        result = runner.invoke(app, ["discover", "fake-discovery", "-s", "nothing"])

        assert result.exit_code == 0
        assert "No podcasts found" in result.stdout

    def test_unknown_discovery_backend(self, cli_backends) -> None:
        result = runner.invoke(app, ["discover", "xyz"])

        assert result.exit_code == 1
        assert "Unknown backend" in result.stdout

    def test_backends(self, cli_backends) -> None:
        result = runner.invoke(app, ["backends"])

        assert result.exit_code == 0
        assert "fake" in result.stdout
        assert "fetching" in result.stdout
        assert "discovery" in result.stdout

    def test_backend_disabled_in_config(self, cli_backends) -> None:
        ConfigManager().set_value("backends.fake.enabled", "false")

        result = runner.invoke(app, ["backends"])

        assert result.exit_code == 0
        fake_row = next(line for line in result.stdout.splitlines() if "fake " in line)
        assert "disabled" in fake_row
        assert "loaded" not in fake_row

    def test_builtin_backends(self) -> None:
        result = runner.invoke(app, ["backends"])

        assert result.exit_code == 0
        assert "rss" in result.stdout
        assert "picks" in result.stdout


class TestCLIListened:
    """Tests for mark and play commands."""

    def test_mark_and_unmark(self, cli_backends, cli_store: StateStore) -> None:
        url = "https://a.example.com/1.mp3"

        result = runner.invoke(app, ["mark", url])
        assert result.exit_code == 0
        assert cli_store.is_listened(url)

        result = runner.invoke(app, ["mark", url, "--unlistened"])
        assert result.exit_code == 0
        assert "unlistened" in result.stdout
        assert not cli_store.is_listened(url)

    def test_play_marks_listened(self, cli_backends, cli_store: StateStore, monkeypatch) -> None:
        commands: list[list[str]] = []
        monkeypatch.setattr(
            "dom314.player.subprocess.run", lambda command, check: commands.append(command)
        )
        url = "https://a.example.com/1.mp3"

        result = runner.invoke(app, ["play", url])

        assert result.exit_code == 0
        assert commands == [["mpv", url]]
        assert cli_store.is_listened(url)

    def test_play_missing_player(self, cli_backends, cli_store: StateStore) -> None:
        ConfigManager().set_value("player.command", "definitely-not-a-player-binary")
        url = "https://a.example.com/1.mp3"

        result = runner.invoke(app, ["play", url])

        assert result.exit_code == 1
        assert "Could not start player" in result.stdout
        assert not cli_store.is_listened(url)


class TestCLIConfig:
    """Tests for config command."""

    def test_config_show(self) -> None:
        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "dom314 Configuration" in result.stdout
        assert "strict" in result.stdout

    def test_config_set(self) -> None:
        result = runner.invoke(app, ["config", "set", "max_concurrent_feeds", "3"])

        assert result.exit_code == 0
        data = yaml.safe_load(ConfigManager().config_file.read_text())
        assert data["max_concurrent_feeds"] == 3

    def test_config_set_invalid(self) -> None:
        result = runner.invoke(app, ["config", "set", "failure_policy", "sometimes"])

        assert result.exit_code == 1
        assert "Error" in result.stdout

    def test_config_set_missing_value(self) -> None:
        result = runner.invoke(app, ["config", "set", "log_level"])

        assert result.exit_code == 1
        assert "Usage" in result.stdout

    def test_config_unknown_action(self) -> None:
        result = runner.invoke(app, ["config", "reset"])

        assert result.exit_code == 1
        assert "Unknown action" in result.stdout

    def test_invalid_config_file(self, isolated_dirs) -> None:
        config_dir = isolated_dirs / "config"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("log_level: [broken")

        result = runner.invoke(app, ["subscriptions", "beloved"])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.stdout
