"""Tests for the command line interface."""

import pytest

from otp_keychain import cli
from otp_keychain.config import ProviderRegistry
from otp_keychain.errors import ClipboardError, StoreAccessError

from .conftest import RFC_SECRET


@pytest.fixture
def env(monkeypatch, store, config_path):
    """Run the CLI against the in-memory store, a temp config and a fixed clock."""
    copied = []
    monkeypatch.setattr(cli, "KeyringSecretStore", lambda service: store)
    monkeypatch.setattr(cli, "copy_to_clipboard", copied.append)
    monkeypatch.setattr("otp_keychain.manager.time.time", lambda: 59)

    def run(*argv):
        return cli.main(["--config", str(config_path), *argv])

    run.copied = copied
    return run


def _locked(*args):
    raise StoreAccessError("keyring is locked")


class TestParser:
    """Tests for argument parsing."""

    def test_command_required(self):
        """Test that a subcommand is required."""
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])

    def test_add_requires_secret_and_provider(self):
        """Test that add needs both --secret and --provider."""
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["add", "--provider", "github"])

    def test_add_short_flags(self):
        """Test that -s and -p work and digits defaults to 6."""
        args = cli.build_parser().parse_args(["add", "-s", RFC_SECRET, "-p", "github"])
        assert args.secret == RFC_SECRET
        assert args.provider == "github"
        assert args.digits == 6


class TestCommands:
    """Tests for each subcommand."""

    def test_add_and_list(self, env, capsys):
        """Test that list prints added providers one per line."""
        assert env("add", "--secret", RFC_SECRET, "--provider", "github") == 0
        assert env("add", "-s", "JBSWY3DPEHPK3PXP", "-p", "aws") == 0
        capsys.readouterr()

        assert env("list") == 0
        assert capsys.readouterr().out == "github\naws\n"

    def test_add_message(self, env, capsys):
        """Test the message printed by add."""
        env("add", "-s", RFC_SECRET, "-p", "github")
        assert "Adding provider 'github' in keychain" in capsys.readouterr().out

    def test_gen(self, env, capsys):
        """Test that gen prints code and remaining seconds and copies the code."""
        env("add", "-s", RFC_SECRET, "-p", "rfc", "--digits", "8")
        capsys.readouterr()

        assert env("gen", "rfc") == 0
        assert capsys.readouterr().out == "94287082 ( 1 sec)\n"
        assert env.copied == ["94287082"]

    def test_gen_no_copy(self, env, capsys):
        """Test that --no-copy skips the clipboard."""
        env("add", "-s", RFC_SECRET, "-p", "rfc")
        assert env("gen", "rfc", "--no-copy") == 0
        assert env.copied == []

    def test_gen_unknown_provider(self, env, capsys):
        """Test that gen for an unknown provider exits 1 with an error."""
        assert env("gen", "nope") == 1
        err = capsys.readouterr().err
        assert "Error:" in err
        assert "not found in config" in err

    def test_gen_clipboard_failure(self, env, capsys, monkeypatch):
        """Test that the code is printed even if copying fails."""
        def broken(text):
            raise ClipboardError("could not copy to clipboard")
        monkeypatch.setattr(cli, "copy_to_clipboard", broken)
        env("add", "-s", RFC_SECRET, "-p", "rfc")
        capsys.readouterr()

        assert env("gen", "rfc") == 1
        captured = capsys.readouterr()
        assert "(" in captured.out
        assert "clipboard" in captured.err

    def test_duplicate_add(self, env, capsys, store):
        """Test that a duplicate add exits 1 and keeps the first secret."""
        env("add", "-s", RFC_SECRET, "-p", "svc")
        assert env("add", "-s", "JBSWY3DPEHPK3PXP", "-p", "svc") == 1
        assert "already exists" in capsys.readouterr().err
        assert store.get("svc") == RFC_SECRET

    def test_add_invalid_secret(self, env, capsys):
        """Test that add with a malformed secret exits 1."""
        assert env("add", "-s", "bad secret!", "-p", "svc") == 1
        assert "invalid base32" in capsys.readouterr().err

    def test_add_keychain_failure(self, env, capsys, store, config_path, monkeypatch):
        """Test that a keyring error during add exits 1 and writes no config."""
        monkeypatch.setattr(store, "set", _locked)
        assert env("add", "-s", RFC_SECRET, "-p", "svc") == 1
        assert "Error: keyring is locked" in capsys.readouterr().err
        assert not config_path.exists()

    def test_remove(self, env, capsys, store):
        """Test that remove deletes the provider from list output."""
        env("add", "-s", RFC_SECRET, "-p", "svc")
        assert env("remove", "svc") == 0
        assert not store.has("svc")
        capsys.readouterr()
        assert env("list") == 0
        assert capsys.readouterr().out == ""

    def test_remove_unknown(self, env):
        """Test that removing an unknown provider exits 1."""
        assert env("remove", "svc") == 1

    def test_remove_keychain_failure(self, env, capsys, store, config_path, monkeypatch):
        """Test that a keyring error during remove exits 1 and keeps the config."""
        env("add", "-s", RFC_SECRET, "-p", "svc")
        monkeypatch.setattr(store, "delete", _locked)
        assert env("remove", "svc") == 1
        assert "Error: keyring is locked" in capsys.readouterr().err
        assert "svc" in ProviderRegistry.load(config_path)

    def test_export(self, env, capsys):
        """Test that export prints provider and secret pairs."""
        env("add", "-s", RFC_SECRET, "-p", "github")
        env("add", "-s", "JBSWY3DPEHPK3PXP", "-p", "aws")
        capsys.readouterr()

        assert env("export") == 0
        assert capsys.readouterr().out == f"github: {RFC_SECRET}\naws: JBSWY3DPEHPK3PXP\n"

    def test_check(self, env, capsys, store):
        """Test that check exits 1 once a secret goes missing."""
        env("add", "-s", RFC_SECRET, "-p", "github")
        assert env("check") == 0
        store.delete("github")
        assert env("check") == 1
        assert "github: secret missing" in capsys.readouterr().out

    def test_malformed_config(self, env, capsys, config_path):
        """Test that an unreadable config exits 1 with an error."""
        config_path.parent.mkdir(parents=True)
        config_path.write_text("not json")
        assert env("list") == 1
        assert "could not read config" in capsys.readouterr().err
