"""CLI command tests."""

from pathlib import Path

from sqlalchemy import create_engine, inspect
from typer.testing import CliRunner

from user_records.app.runtime.config.config_data import ConfigData
from user_records.app.runtime.context import with_context
from user_records.cli import app

runner = CliRunner()


class TestCli:
    def test_help_lists_commands(self):
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "serve" in result.output
        assert "init-db" in result.output

    def test_init_db_creates_users_table(self, test_config: ConfigData, tmp_path: Path):
        db_path = tmp_path / "users.db"
        test_config.database.url = f"sqlite:///{db_path}"

        with with_context(test_config):
            result = runner.invoke(app, ["init-db"])

        assert result.exit_code == 0, result.output
        engine = create_engine(f"sqlite:///{db_path}")
        try:
            assert "users" in inspect(engine).get_table_names()
        finally:
            engine.dispose()

    def test_serve_rejects_unknown_backend(self):
        result = runner.invoke(app, ["serve", "--backend", "redis"])

        assert result.exit_code != 0
