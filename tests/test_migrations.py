from __future__ import annotations

import pathlib
import warnings

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]


def _alembic_config(database_url: str) -> Config:
    cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    cfg.set_main_option("sqlalchemy.url", database_url)
    # Keep pytest's log capture intact
    cfg.attributes["configure_logger"] = False
    return cfg


def test_upgrade_creates_schema_and_downgrade_removes_it(tmp_path):
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    cfg = _alembic_config(url)

    command.upgrade(cfg, "head")

    engine = create_engine(url)
    inspector = inspect(engine)
    assert {"users", "categories", "expenses", "budgets"} <= set(inspector.get_table_names())

    budget_columns = {c["name"] for c in inspector.get_columns("budgets")}
    assert {"budget_amount", "budget_year", "budget_month", "user_id", "category_id"} <= budget_columns
    unique = inspector.get_unique_constraints("budgets")
    assert any(
        set(u["column_names"]) == {"user_id", "category_id", "budget_year", "budget_month"} for u in unique
    )
    email_index = [i for i in inspector.get_indexes("users") if i["column_names"] == ["email"]]
    assert email_index and email_index[0]["unique"]
    with engine.connect() as conn:
        index_names = {
            row[0] for row in conn.exec_driver_sql("SELECT name FROM sqlite_master WHERE type = 'index'")
        }
    assert "uq_users_email_lower" in index_names

    command.downgrade(cfg, "base")

    inspector = inspect(engine)
    assert "users" not in inspector.get_table_names()
    engine.dispose()


def test_alembic_config_sets_path_separator(tmp_path):
    cfg = _alembic_config(f"sqlite:///{tmp_path / 'quiet.db'}")
    assert cfg.get_main_option("path_separator") == "os"

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        command.upgrade(cfg, "head")
    assert not [w for w in caught if "path_separator" in str(w.message)]
