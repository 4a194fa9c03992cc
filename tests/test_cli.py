"""Tests for the command-line entry point."""

from islandgen.cli import main


class TestMain:
    """Tests for main."""

    def test_bundled_config(self) -> None:
        """Generating from a bundled config succeeds."""
        assert main(["--config", "small", "--seed", "7"]) == 0

    def test_config_path(self, tmp_path) -> None:
        """A TOML path is accepted in place of a name."""
        path = tmp_path / "tiny.toml"
        path.write_text("[grid]\nresolution = 16\n[vegetation]\nresolution = 8\n")
        assert main(["--config", str(path)]) == 0

    def test_unknown_config(self, capsys) -> None:
        """A missing config exits with status 2."""
        assert main(["--config", "no-such-config"]) == 2
        assert "not found" in capsys.readouterr().err

    def test_invalid_resolution(self) -> None:
        """An invalid override exits with status 2."""
        assert main(["--config", "small", "--resolution", "0"]) == 2

    def test_world_size_overrides(self, capsys) -> None:
        """Width and length flags resize the tile without changing the sample count."""
        assert main(["--config", "small", "--width", "32", "--length", "48"]) == 0
        assert "32x48 terrain (65x65 samples)" in capsys.readouterr().out

    def test_invalid_width(self) -> None:
        """A non-positive width exits with status 2."""
        assert main(["--config", "small", "--width", "0"]) == 2
