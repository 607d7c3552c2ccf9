import pytest

from snowtree import main as main_mod


def test_parser_defaults():
    args = main_mod.build_parser().parse_args([])
    assert args.config is None
    assert args.url is None
    assert args.log_level == "INFO"


def test_parser_options():
    args = main_mod.build_parser().parse_args(
        ["--url", "?count=3", "--snow", "10", "--seed", "4", "--log-level", "DEBUG"]
    )
    assert (args.url, args.snow, args.seed, args.log_level) == ("?count=3", 10, 4, "DEBUG")


def test_bad_config_path_exits_with_error(tmp_path):
    assert main_mod.main(["--config", str(tmp_path / "missing.yaml")]) == 2


def test_help_does_not_need_a_display(capsys):
    with pytest.raises(SystemExit):
        main_mod.main(["--help"])
    assert "snowtree" in capsys.readouterr().out
