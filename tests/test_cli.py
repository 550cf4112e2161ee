"""Tests for the tidydir command-line interface."""
import argparse
from pathlib import Path

import pytest
import yaml

from tidydir.cli import (
    CLIError,
    build_config_from_args,
    find_config_file,
    main,
    parse_arguments,
    setup_logging,
)
from tidydir.core.constants import ExitCode
from tidydir.infrastructure.config_manager import Settings
from tidydir.infrastructure.logger import LogLevel, get_logger


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, temp_dir):
    """Keep the user's real configuration out of the tests."""
    for name in ("TIDYDIR_CONFIG_FILE", "TIDYDIR_AUTOMOVE_FORCE_DRY_RUN", "TIDYDIR_SETTINGS_COLOR"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(temp_dir / "xdg"))


class TestParseArguments:
    """Tests for argument parsing."""

    def test_check(self):
        """check takes an optional target and --list."""
        args = parse_arguments(["check"])
        assert args.command == "check"
        assert args.target is None
        assert args.list is False
        assert args.dry is False

    def test_automove_aliases(self, temp_dir):
        """au and aumove are aliases of auto-move."""
        for name in ("auto-move", "au", "aumove"):
            args = parse_arguments([name, "--dry", "-l", str(temp_dir)])
            assert args.command == "auto-move"
            assert args.dry is True
            assert args.list is True
            assert args.target == str(temp_dir)

    def test_global_options(self, config_file):
        """Global options come before the command."""
        args = parse_arguments(["-c", str(config_file), "--verbose", "--no-color", "check"])
        assert args.config == str(config_file)
        assert args.verbose is True
        assert args.no_color is True

    def test_command_required(self):
        """A command is required."""
        with pytest.raises(SystemExit):
            parse_arguments([])

    def test_version(self, capsys):
        """--version prints the version."""
        with pytest.raises(SystemExit) as exc_info:
            parse_arguments(["--version"])
        assert exc_info.value.code == 0
        assert "tidydir 1.0.0" in capsys.readouterr().out

    def test_missing_target(self, temp_dir):
        """The target must exist."""
        with pytest.raises(CLIError, match="does not exist"):
            parse_arguments(["check", str(temp_dir / "nope")])

    def test_target_not_directory(self, temp_dir):
        """The target must be a directory."""
        (temp_dir / "f").write_text("")
        with pytest.raises(CLIError, match="not a directory"):
            parse_arguments(["check", str(temp_dir / "f")])

    def test_missing_config(self, temp_dir):
        """An explicit config file must exist."""
        with pytest.raises(CLIError, match="Configuration file does not exist"):
            parse_arguments(["-c", str(temp_dir / "nope.yaml"), "check"])


class TestFindConfigFile:
    """Tests for config file discovery."""

    def test_explicit(self, config_file):
        """--config wins."""
        args = argparse.Namespace(config=str(config_file))
        assert find_config_file(args, environ={"TIDYDIR_CONFIG_FILE": "/other.yaml"}) == config_file

    def test_environment(self, config_file):
        """$TIDYDIR_CONFIG_FILE is used next."""
        args = argparse.Namespace(config=None)
        assert find_config_file(args, environ={"TIDYDIR_CONFIG_FILE": str(config_file)}) == config_file

    def test_environment_missing_file(self, temp_dir):
        """A dangling $TIDYDIR_CONFIG_FILE is an error."""
        args = argparse.Namespace(config=None)
        with pytest.raises(CLIError):
            find_config_file(args, environ={"TIDYDIR_CONFIG_FILE": str(temp_dir / "x.yaml")})

    def test_bootstrap(self, temp_dir, capsys):
        """The default file is created on first use, with a notice."""
        args = argparse.Namespace(config=None)
        environ = {"XDG_CONFIG_HOME": str(temp_dir / "cfg")}

        path = find_config_file(args, environ=environ)

        assert path == temp_dir / "cfg" / "tidydir" / "tidydir.yaml"
        assert yaml.safe_load(path.read_text())["automove"]["force-dry-run"] is True
        assert "Default configuration file was created" in capsys.readouterr().err

        find_config_file(args, environ=environ)
        assert capsys.readouterr().err == ""


class TestBuildConfig:
    """Tests for the CLI configuration layer."""

    def test_empty(self):
        """No flags give an empty layer."""
        assert build_config_from_args(argparse.Namespace(no_color=False, verbose=False)) == {}

    def test_flags(self):
        """Flags map onto settings."""
        config = build_config_from_args(argparse.Namespace(no_color=True, verbose=True))
        assert config == {"settings": {"color": False, "log-level": "DEBUG"}}


class TestSetupLogging:
    """Tests for logging setup."""

    def test_level_and_global(self):
        """The configured level is applied and the logger is shared."""
        logger = setup_logging(Settings(log_level="INFO"))
        assert logger.get_level() == LogLevel.INFO
        assert get_logger() is logger

    def test_log_file(self, temp_dir):
        """A log file handler is added when configured."""
        log_file = temp_dir / "logs" / "tidydir.log"
        logger = setup_logging(Settings(log_level="INFO", log_file=str(log_file)))
        logger.info("hello")
        for handler in logger.logger.handlers:
            handler.flush()
        assert "hello" in log_file.read_text()


class TestMain:
    """End-to-end tests through main()."""

    def test_check(self, config_file, home_dir, capsys):
        """check reports misplaced entries and succeeds."""
        code = main(["-c", str(config_file), "check"])
        out = capsys.readouterr().out

        assert code == ExitCode.SUCCESS
        assert f"{home_dir} X 2 misplaced entries" in out
        assert "Files (2): Album/booklet.pdf, cover.jpg" in out

    def test_check_list(self, config_file, home_dir, capsys):
        """check --list prints absolute paths only."""
        code = main(["-c", str(config_file), "check", "--list"])
        lines = capsys.readouterr().out.splitlines()

        assert code == ExitCode.SUCCESS
        assert sorted(lines) == sorted(
            [
                str(home_dir / "tmp"),
                str(home_dir / "stray.txt"),
                str(home_dir / "Music" / "cover.jpg"),
                str(home_dir / "Music" / "Album" / "booklet.pdf"),
            ]
        )

    def test_check_target(self, config_file, home_dir, capsys):
        """A target restricts the rules."""
        main(["-c", str(config_file), "check", "-l", str(home_dir / "Music")])
        lines = capsys.readouterr().out.splitlines()
        assert all(line.startswith(str(home_dir / "Music")) for line in lines)
        assert len(lines) == 2

    def test_automove(self, config_file, home_dir, capsys):
        """auto-move moves matching entries."""
        code = main(["-c", str(config_file), "auto-move", "--list"])
        lines = capsys.readouterr().out.splitlines()

        assert code == ExitCode.SUCCESS
        assert lines == [
            f"{home_dir / 'Downloads' / 'song.mp3'} {home_dir / 'Music' / 'song.mp3'}",
            f"{home_dir / 'Downloads' / 'clip.mkv'} {home_dir / 'Videos' / 'clip.mkv'}",
        ]
        assert (home_dir / "Music" / "song.mp3").exists()
        assert (home_dir / "Videos" / "clip.mkv").exists()
        assert not (home_dir / "Downloads" / "song.mp3").exists()

    def test_automove_dry(self, config_file, home_dir, capsys):
        """auto-move --dry changes nothing."""
        code = main(["-c", str(config_file), "auto-move", "--dry"])
        captured = capsys.readouterr()

        assert code == ExitCode.SUCCESS
        assert "dry mode" in captured.err
        assert "Music - 1 entry to move" in captured.out
        assert (home_dir / "Downloads" / "song.mp3").exists()
        assert not (home_dir / "Videos").exists()

    def test_forced_dry_run_from_environment(self, config_file, home_dir, capsys, monkeypatch):
        """force-dry-run cannot be bypassed from the command line."""
        monkeypatch.setenv("TIDYDIR_AUTOMOVE_FORCE_DRY_RUN", "true")

        code = main(["-c", str(config_file), "auto-move"])
        captured = capsys.readouterr()

        assert code == ExitCode.SUCCESS
        assert "force-dry-run" in captured.err
        assert (home_dir / "Downloads" / "song.mp3").exists()

    def test_conflict_exit_code(self, config_file, home_dir, capsys):
        """A skipped conflict gives the partial exit code."""
        (home_dir / "Music" / "song.mp3").write_text("already here")

        code = main(["-c", str(config_file), "auto-move"])

        assert code == ExitCode.PARTIAL
        assert (home_dir / "Music" / "song.mp3").read_text() == "already here"
        assert "would overwrite" in capsys.readouterr().out

    def test_invalid_config(self, write_config, capsys):
        """Configuration errors are fatal."""
        path = write_config({"dirs": {"/a": {"allowed-files": [{"pattern": "(["}]}}}, name="bad.yaml")

        code = main(["-c", str(path), "check"])

        assert code == ExitCode.FATAL
        assert capsys.readouterr().err.startswith("Error:")

    def test_check_without_directories(self, write_config, sample_config, capsys):
        """check with no directory rules stops with an error."""
        sample_config["dirs"] = {}
        path = write_config(sample_config, name="nodirs.yaml")

        code = main(["-c", str(path), "check"])
        captured = capsys.readouterr()

        assert code == ExitCode.FATAL
        assert captured.out == ""
        assert "(!) No directories were configured to be checked." in captured.err

    def test_check_target_outside_rules(self, config_file, temp_dir, capsys):
        """A target that no directory rule lies under stops with an error."""
        (temp_dir / "elsewhere").mkdir()

        code = main(["-c", str(config_file), "check", str(temp_dir / "elsewhere")])

        assert code == ExitCode.FATAL
        assert "No directories were configured" in capsys.readouterr().err

    def test_automove_without_rules(self, write_config, sample_config, home_dir, capsys):
        """auto-move with no move rules stops with an error."""
        sample_config["automove"]["rules"] = []
        path = write_config(sample_config, name="norules.yaml")

        code = main(["-c", str(path), "auto-move"])

        assert code == ExitCode.FATAL
        assert "(!) No auto-move rules were configured to be run." in capsys.readouterr().err

    def test_cli_error(self, temp_dir, capsys):
        """CLI errors are fatal."""
        code = main(["check", str(temp_dir / "nope")])
        assert code == ExitCode.FATAL
        assert "Target does not exist" in capsys.readouterr().err

    def test_bootstraps_default_config(self, temp_dir, capsys, monkeypatch):
        """Without any config the default file is written and used."""
        monkeypatch.setenv("HOME", str(temp_dir))

        code = main(["check", "--list"])

        assert (temp_dir / "xdg" / "tidydir" / "tidydir.yaml").exists()
        assert "Default configuration file was created" in capsys.readouterr().err
        # Videos, Music and Downloads are missing from the fresh home
        assert code == ExitCode.PARTIAL
