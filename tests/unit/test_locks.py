"""Tests for per-engine locks."""

from shared.locks import EngineLocks


def test_same_engine_gets_same_lock():
    locks = EngineLocks()

    assert locks.lock_for("postgres") is locks.lock_for("postgres")
    assert locks.lock_for("Postgres") is locks.lock_for("postgres")


def test_engines_get_independent_locks():
    locks = EngineLocks()
    pg = locks.lock_for("postgres")
    mysql = locks.lock_for("mysql")

    assert pg is not mysql
    with pg:
        assert mysql.acquire(blocking=False) is True
        mysql.release()


def test_registries_are_independent():
    assert EngineLocks().lock_for("postgres") is not EngineLocks().lock_for("postgres")


def test_engines_lists_created_locks():
    locks = EngineLocks()
    locks.lock_for("mysql")
    locks.lock_for("postgres")

    assert locks.engines() == ["mysql", "postgres"]
