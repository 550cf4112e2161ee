"""Shared pytest fixtures for tidydir tests."""
import os
import stat
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, Generator

import pytest
import yaml

from tidydir.infrastructure.logger import Logger, LogLevel, set_global_logger


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        # Resolve so paths compare equal to realpath'd targets (macOS /private)
        yield Path(os.path.realpath(tmpdir))


@pytest.fixture
def home_dir(temp_dir: Path) -> Path:
    """Create a messy home directory.

    home/
      Documents/
      Downloads/ (song.mp3, clip.mkv, notes.txt, Old Stuff/)
      Music/ (a.mp3, cover.jpg, Album/ (b.flac, booklet.pdf))
      .bashrc
      stray.txt
      tmp/
    """
    home = temp_dir / "home"
    home.mkdir()

    (home / "Documents").mkdir()
    downloads = home / "Downloads"
    downloads.mkdir()
    (downloads / "song.mp3").write_text("mp3")
    (downloads / "clip.mkv").write_text("mkv")
    (downloads / "notes.txt").write_text("notes")
    (downloads / "Old Stuff").mkdir()

    music = home / "Music"
    music.mkdir()
    (music / "a.mp3").write_text("mp3")
    (music / "cover.jpg").write_text("jpg")
    (music / "Album").mkdir()
    (music / "Album" / "b.flac").write_text("flac")
    (music / "Album" / "booklet.pdf").write_text("pdf")

    (home / ".bashrc").write_text("# bashrc")
    (home / "stray.txt").write_text("stray")
    (home / "tmp").mkdir()

    return home


@pytest.fixture
def sample_config(home_dir: Path) -> Dict[str, Any]:
    """Provide a sample tidydir configuration for ``home_dir``."""
    return {
        "settings": {
            "color": False,
            "use-unicode": False,
        },
        "dirs": {
            str(home_dir): {
                "allowed-dirs": [{"name": "Documents"}, {"name": "Downloads"}, {"name": "Music"}],
                "allowed-files": [{"pattern": r"^\."}],
            },
            str(home_dir / "Music"): {
                "recursive": True,
                "allowed-files": [{"ext": "mp3"}, {"ext": "flac"}],
            },
        },
        "automove": {
            "force-dry-run": False,
            "rules": [
                {
                    "name": "Music",
                    "parent": str(home_dir / "Downloads"),
                    "match": [{"ext": "mp3"}],
                    "to": str(home_dir / "Music"),
                },
                {
                    "name": "Videos",
                    "parent": str(home_dir / "Downloads"),
                    "match": [{"ext": "mkv"}, {"ext": "mp4"}],
                    "to": str(home_dir / "Videos"),
                },
            ],
        },
    }


@pytest.fixture
def write_config(temp_dir: Path) -> Callable[[Dict[str, Any]], Path]:
    """Return a function writing a config dict to a YAML file."""

    def write(config: Dict[str, Any], name: str = "tidydir.yaml") -> Path:
        config_path = temp_dir / name
        with open(config_path, "w") as f:
            yaml.safe_dump(config, f, sort_keys=False)
        return config_path

    return write


@pytest.fixture
def config_file(write_config, sample_config: Dict[str, Any]) -> Path:
    """Create a configuration file."""
    return write_config(sample_config)


@pytest.fixture
def make_script(temp_dir: Path) -> Callable[[str, str], Path]:
    """Return a function creating an executable shell script."""

    def make(name: str, body: str) -> Path:
        script = temp_dir / name
        script.write_text("#!/bin/sh\n" + body + "\n")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    return make


@pytest.fixture
def quiet_logger() -> Logger:
    """Logger that only reports errors."""
    return Logger("tidydir.tests", level=LogLevel.ERROR)


@pytest.fixture(autouse=True)
def reset_global_logger():
    """Reset the shared logger between tests."""
    yield
    set_global_logger(None)
