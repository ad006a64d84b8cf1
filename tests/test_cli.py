"""
Tests for the command line entry point.
"""

import random

import pytest

from swap_cycler import cli
from swap_cycler.bot import build_context
from swap_cycler.config import BotConfig
from swap_cycler.utils import BalanceReadError

from conftest import FakeWallet, SleepRecorder, balances_by_address


VALID_KEY = "0x" + "ab" * 32


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Isolated cwd with no .env and no config file."""
    monkeypatch.chdir(tmp_path)
    for name in ("PRIVATE_KEY", "RPC_URL"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return tmp_path


def fake_context(wallet, **overrides):
    config = BotConfig(log_file=None, min_cycles=1, max_cycles=1, **overrides)
    return build_context(config, wallet=wallet, rng=random.Random(0), sleep=SleepRecorder())


class TestMain:

    def test_no_command_prints_help(self, workdir):
        assert cli.main([]) == 0

    def test_init_writes_template(self, workdir):
        path = workdir / "bot.yaml"

        assert cli.main(["--config", str(path), "init"]) == 0
        assert path.exists()
        assert "router_address" in path.read_text()

        # Refuses to overwrite
        assert cli.main(["--config", str(path), "init"]) == 1

    def test_missing_env_exits_1(self, workdir):
        code = cli.main(["--config", str(workdir / "bot.yaml"),
                         "--env-file", str(workdir / "none.env"), "run"])
        assert code == 1

    def test_bad_config_exits_1(self, workdir, monkeypatch):
        monkeypatch.setenv("PRIVATE_KEY", VALID_KEY)
        monkeypatch.setenv("RPC_URL", "http://localhost:8545")
        path = workdir / "bot.yaml"
        path.write_text("min_cycles: 0\n")

        assert cli.main(["--config", str(path), "swaps"]) == 1

    @pytest.mark.parametrize("yaml_text", [
        "log_level: verbose\n",
        "min_cycles: \"5\"\n",
        "tokens:\n  - {symbol: ETH, is_native: true}\n  - {address: '0x" + "1" * 40 + "'}\n",
        "tokens:\n  - {symbol: ETH, is_native: true}\n  - {symbol: WETH, address: '0x"
        + "1" * 40 + "'}\n  - {symbol: FOO}\n",
    ])
    def test_bad_yaml_values_exit_1(self, workdir, monkeypatch, yaml_text):
        """Bad tunables give a configuration error, not a traceback."""
        monkeypatch.setenv("PRIVATE_KEY", VALID_KEY)
        monkeypatch.setenv("RPC_URL", "http://localhost:8545")
        path = workdir / "bot.yaml"
        path.write_text(yaml_text)

        assert cli.main(["--config", str(path), "swaps"]) == 1

    @pytest.mark.parametrize("batches", ["0", "-3", "two"])
    def test_batches_must_be_positive(self, workdir, batches):
        with pytest.raises(SystemExit) as exc:
            cli.main(["run", "--batches", batches])
        assert exc.value.code == 2

    def test_swaps_uses_built_context(self, workdir, monkeypatch, registry):
        monkeypatch.setenv("PRIVATE_KEY", VALID_KEY)
        monkeypatch.setenv("RPC_URL", "http://localhost:8545")
        wallet = FakeWallet(native_balance=10**15,
                            token_balances=balances_by_address(registry, USDT=10))
        seen = {}

        def fake_build(config, credentials):
            seen["credentials"] = credentials
            seen["dry_run"] = config.dry_run
            return fake_context(wallet)

        monkeypatch.setattr(cli, "build_context", fake_build)
        monkeypatch.setattr(cli, "setup_logging", lambda *a, **kw: None)

        code = cli.main(["--config", str(workdir / "bot.yaml"),
                         "--env-file", str(workdir / "none.env"), "swaps"])

        assert code == 0
        assert seen["credentials"].private_key == VALID_KEY
        assert wallet.events == []

    def test_run_dry_run_flag(self, workdir, monkeypatch):
        monkeypatch.setenv("PRIVATE_KEY", VALID_KEY)
        monkeypatch.setenv("RPC_URL", "http://localhost:8545")
        seen = {}

        def fake_build(config, credentials):
            seen["dry_run"] = config.dry_run
            return fake_context(FakeWallet(native_balance=10**15), dry_run=config.dry_run)

        monkeypatch.setattr(cli, "build_context", fake_build)
        monkeypatch.setattr(cli, "setup_logging", lambda *a, **kw: None)

        code = cli.main(["--config", str(workdir / "bot.yaml"),
                         "--env-file", str(workdir / "none.env"),
                         "run", "--dry-run", "--batches", "1"])

        assert code == 0
        assert seen["dry_run"] is True


class TestCommands:

    def test_run_bounded_returns_0(self):
        wallet = FakeWallet(native_balance=10**15)
        context = fake_context(wallet)

        assert cli.run_command(context, max_batches=1) == 0
        assert context.scheduler.batch_count == 1
        assert [e for e in wallet.events if e[0] == "transact"] == [
            ("transact", "swapExactETHForTokens")]

    def test_run_loop_error_returns_1(self):
        wallet = FakeWallet(native_balance=10**15)
        context = fake_context(wallet)

        def explode():
            raise RuntimeError("corrupt state")

        context.generator.get_possible_swaps = explode

        assert cli.run_command(context, max_batches=1) == 1

    def test_run_interrupted_returns_130(self):
        context = fake_context(FakeWallet(native_balance=10**15))

        async def interrupted(max_batches=None):
            raise KeyboardInterrupt

        context.scheduler.run_forever = interrupted

        assert cli.run_command(context) == 130

    def test_balance(self, registry):
        wallet = FakeWallet(native_balance=10**15,
                            token_balances=balances_by_address(registry, USDC=1_000_000))
        assert cli.balance_command(fake_context(wallet)) == 0

    def test_balance_read_failure(self):
        wallet = FakeWallet(read_errors=[BalanceReadError("down")])
        assert cli.balance_command(fake_context(wallet)) == 1

    def test_swaps_empty(self):
        assert cli.swaps_command(fake_context(FakeWallet())) == 0
