import io

from pantry_ledger import config as pl_config
from pantry_ledger.app import build_parser, main


def test_parser_flags():
    args = build_parser().parse_args(["--demo", "--random-seed", "4", "--log-level", "debug"])
    assert args.demo is True
    assert args.random_seed == 4
    assert args.log_level == "debug"


def test_main_runs_a_demo_session(monkeypatch, capsys):
    for name in ("PANTRY_LEDGER_CONFIG", "PANTRY_LEDGER_DEMO", "PANTRY_LEDGER_CURRENCY"):
        monkeypatch.delenv(name, raising=False)
    pl_config.load_config.cache_clear()
    monkeypatch.setattr("sys.stdin", io.StringIO("list storages\nexit\n"))

    assert main(["--demo", "--random-seed", "4"]) == 0

    out = capsys.readouterr().out
    assert "# Cold Room" in out
    assert "# Office Fridge" in out
    assert "Thank you for using the app, goodbye!" in out


def test_main_logs_registry_issues(monkeypatch, caplog):
    from services import commands_registry

    monkeypatch.delenv("PANTRY_LEDGER_CONFIG", raising=False)
    pl_config.load_config.cache_clear()
    monkeypatch.delitem(commands_registry.COMMANDS, "clear")
    monkeypatch.setattr("sys.stdin", io.StringIO("exit\n"))

    with caplog.at_level("ERROR", logger="pantry_ledger.app"):
        assert main([]) == 0

    assert "Command registry issue: Missing help entry: clear" in caplog.text
