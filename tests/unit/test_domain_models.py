"""Tests for domain models."""

from dataclasses import FrozenInstanceError
from datetime import datetime

import pytest

from domain.exceptions import ConfigurationError, DumpFailed, BackupError, DeadlineExceeded
from domain.models import BackupRequest, ServiceBinding, default_filename


class TestBackupRequest:
    """Test BackupRequest model."""

    def test_object_path(self, backup_request):
        assert backup_request.object_path == "svc/instance1/backup.sql.gz"

    def test_is_immutable(self, backup_request):
        with pytest.raises(FrozenInstanceError):
            backup_request.host = "other"

    @pytest.mark.parametrize("field", ["host", "namespace", "instance_name", "filename"])
    def test_required_fields(self, field):
        values = dict(
            host="h", port="1", username="u", password="p",
            namespace="n", instance_name="i", filename="f",
        )
        values[field] = ""

        with pytest.raises(ValueError):
            BackupRequest(**values)

    def test_from_binding(self):
        binding = ServiceBinding(
            label="postgres",
            name="orders-db",
            credentials={
                "host": "10.0.0.5",
                "port": 5432,
                "database": "orders",
                "username": "u1",
                "password": "p1",
            },
        )

        request = BackupRequest.from_binding(binding, filename="nightly.gz")

        assert request.host == "10.0.0.5"
        assert request.port == "5432"
        assert request.database == "orders"
        assert request.object_path == "postgres/orders-db/nightly.gz"

    def test_from_binding_fallback_keys(self):
        binding = ServiceBinding(
            label="mariadb",
            name="shop",
            credentials={"hostname": "h", "user": "u", "database_name": "shop"},
        )

        request = BackupRequest.from_binding(binding, filename="f.gz")

        assert request.host == "h"
        assert request.username == "u"
        assert request.database == "shop"
        assert request.password == ""

    def test_from_binding_without_database_dumps_instance(self):
        binding = ServiceBinding(label="postgres", name="pg", credentials={"host": "h"})

        request = BackupRequest.from_binding(binding, filename="f.gz")

        assert request.database is None

    def test_from_binding_generates_filename(self):
        binding = ServiceBinding(label="postgres", name="pg", credentials={"host": "h"})

        request = BackupRequest.from_binding(binding, now=datetime(2024, 3, 1, 12, 30, 45))

        assert request.filename == "pg_20240301123045.gz"

    def test_from_binding_without_host_raises(self):
        binding = ServiceBinding(label="postgres", name="pg")

        with pytest.raises(ConfigurationError, match="no host"):
            BackupRequest.from_binding(binding)


def test_default_filename():
    assert default_filename("db", datetime(2023, 1, 2, 3, 4, 5)) == "db_20230102030405.gz"


def test_dump_failed_carries_stderr():
    error = DumpFailed("postgres dump: exit status 1", stderr="boom", returncode=1)

    assert isinstance(error, BackupError)
    assert error.stderr == "boom"
    assert error.returncode == 1


def test_deadline_exceeded_is_not_dump_failed():
    assert not issubclass(DeadlineExceeded, DumpFailed)
