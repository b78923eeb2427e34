import argparse
import os
import sqlite3

from alembic import command
from alembic.config import Config

ALEMBIC_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'alembic'))


def test_upgrade_and_downgrade_records_table(tmp_path):
    db = tmp_path / 'duet.db'
    cfg = Config()
    cfg.set_main_option('script_location', ALEMBIC_DIR)
    cfg.cmd_opts = argparse.Namespace(x=[f'url=sqlite+aiosqlite:///{db}'])

    command.upgrade(cfg, 'head')
    with sqlite3.connect(db) as conn:
        cols = {row[1] for row in conn.execute('PRAGMA table_info(records)')}
    assert cols == {'id', 'kind', 'sender', 'receiver', 'content', 'extra', 'read', 'created_at'}

    command.downgrade(cfg, 'base')
    with sqlite3.connect(db) as conn:
        tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    assert 'records' not in tables
