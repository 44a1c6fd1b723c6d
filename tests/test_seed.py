"""
Tests for the development seed script.
"""
from unittest.mock import MagicMock

import seed_db
from bizdir.core.config import settings


def test_report_counts_after_seeding(seeded_db):
    """Test the counts reflect the sample data."""
    assert seed_db.report_counts(seeded_db) == {"accounts": 2, "businesses": 3, "photos": 0}


def test_refuses_to_wipe_remote_database(monkeypatch):
    """Test a non-SQLite database is left alone without --force."""
    monkeypatch.setattr(settings, "database_url", "postgresql://user:pw@db.internal/bizdir")
    init_db = MagicMock()
    monkeypatch.setattr(seed_db, "init_db", init_db)
    assert seed_db.main([]) == 1
    init_db.assert_not_called()
