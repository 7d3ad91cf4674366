"""Alembic migrations build the same schema as the models."""

from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from wsafe.db.base import Base
from wsafe.models import AppPreferences, Contact  # noqa: F401 - register tables

ALEMBIC_DIR = Path(__file__).resolve().parents[1] / "alembic"


def _config(url: str) -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", str(ALEMBIC_DIR))
    cfg.set_main_option("sqlalchemy.url", url)
    return cfg


def test_upgrade_matches_models_and_downgrade_drops(tmp_path):
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    cfg = _config(url)

    command.upgrade(cfg, "head")

    engine = create_engine(url)
    inspector = inspect(engine)
    for table in Base.metadata.sorted_tables:
        columns = {c["name"] for c in inspector.get_columns(table.name)}
        assert columns == {c.name for c in table.columns}

    command.downgrade(cfg, "base")

    assert set(inspect(engine).get_table_names()) == {"alembic_version"}
    engine.dispose()
