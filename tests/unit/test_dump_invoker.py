"""Tests for dump invokers and dump processes."""

import os
import sys
import time

import pytest

from domain.exceptions import InvocationError
from domain.models import BackupRequest
from infrastructure.dump import PostgresDumpInvoker, MySQLDumpInvoker
from shared.context import Context


@pytest.fixture
def instance_request(backup_request):
    """Request without a database name (whole instance dump)."""
    return BackupRequest(
        host=backup_request.host,
        port=backup_request.port,
        username=backup_request.username,
        password=backup_request.password,
        namespace=backup_request.namespace,
        instance_name=backup_request.instance_name,
        filename=backup_request.filename,
    )


class TestPostgresDumpInvoker:
    """Test pg_dump / pg_dumpall command construction."""

    def test_single_database_command(self, backup_request):
        command = PostgresDumpInvoker().build_command(backup_request)

        assert command == ["pg_dump", "orders", "-C", "-c", "--no-password"]

    def test_whole_instance_command(self, instance_request):
        command = PostgresDumpInvoker().build_command(instance_request)

        assert command == ["pg_dumpall", "-c", "--no-password"]

    def test_connection_env(self, backup_request):
        env = PostgresDumpInvoker().build_env(backup_request)

        assert env == {
            "PGUSER": "backman",
            "PGPASSWORD": "s3cret",
            "PGHOST": "db.internal",
            "PGPORT": "5432",
        }

    def test_empty_values_are_not_exported(self):
        request = BackupRequest(
            host="db.internal",
            port="",
            username="backman",
            password="",
            namespace="svc",
            instance_name="i",
            filename="f.gz",
        )

        env = PostgresDumpInvoker().build_env(request)

        assert "PGPORT" not in env
        assert "PGPASSWORD" not in env

    def test_engine_name(self):
        assert PostgresDumpInvoker.engine == "postgres"


class TestMySQLDumpInvoker:
    """Test mysqldump command construction."""

    def test_single_database_command(self, backup_request):
        command = MySQLDumpInvoker().build_command(backup_request)

        assert command[:7] == ["mysqldump", "--host", "db.internal", "--port", "5432", "--user", "backman"]
        assert command[-2:] == ["--databases", "orders"]
        assert "--single-transaction" in command

    def test_all_databases_command(self, instance_request):
        command = MySQLDumpInvoker().build_command(instance_request)

        assert command[-1] == "--all-databases"
        assert "--databases" not in command

    def test_password_never_on_command_line(self, backup_request):
        invoker = MySQLDumpInvoker()

        assert "s3cret" not in invoker.build_command(backup_request)
        assert invoker.build_env(backup_request) == {"MYSQL_PWD": "s3cret"}


class TestDumpProcess:
    """Test starting real child processes through the base invoker."""

    def test_missing_binary_raises_invocation_error(self, script_invoker, backup_request):
        invoker = script_invoker(command=["/nonexistent/pg_dump"])

        with pytest.raises(InvocationError, match="could not start"):
            invoker.start(Context.background(), backup_request)

    def test_stdout_and_stderr_are_separated(self, script_invoker, backup_request):
        script = (
            "import sys\n"
            "sys.stdout.write('data')\n"
            "sys.stderr.write('warning: something\\n')\n"
        )
        process = script_invoker(script).start(Context.background(), backup_request)
        try:
            output = process.stdout.read()
            returncode = process.wait()
        finally:
            process.close()

        assert output == b"data"
        assert returncode == 0
        assert process.stderr_text() == "warning: something\n"

    def test_env_is_scoped_to_child(self, script_invoker, backup_request, monkeypatch):
        monkeypatch.delenv("PGUSER", raising=False)
        monkeypatch.delenv("PGPASSWORD", raising=False)
        script = "import os, sys; sys.stdout.write(os.environ['PGUSER'] + ':' + os.environ['PGPASSWORD'])"

        process = script_invoker(script).start(Context.background(), backup_request)
        try:
            output = process.stdout.read()
            process.wait()
        finally:
            process.close()

        assert output == b"backman:s3cret"
        assert "PGUSER" not in os.environ
        assert "PGPASSWORD" not in os.environ

    def test_nonzero_exit_code(self, script_invoker, backup_request):
        process = script_invoker("import sys; sys.exit(3)").start(Context.background(), backup_request)
        try:
            assert process.wait() == 3
        finally:
            process.close()

    def test_context_deadline_kills_process(self, script_invoker, backup_request):
        context = Context.background().with_timeout(0.2)
        process = script_invoker("import time; time.sleep(30)").start(context, backup_request)

        start = time.monotonic()
        try:
            returncode = process.wait()
        finally:
            process.close()

        assert returncode != 0
        assert time.monotonic() - start < 10

    def test_already_cancelled_context_kills_process(self, script_invoker, backup_request):
        context = Context.background().with_cancel()
        context.cancel()

        process = script_invoker("import time; time.sleep(30)").start(context, backup_request)
        try:
            assert process.wait() != 0
        finally:
            process.close()

    def test_close_reaps_running_process(self, script_invoker, backup_request):
        process = script_invoker("import time; time.sleep(30)").start(Context.background(), backup_request)

        process.close()

        assert process.returncode is not None
        assert process.stdout.closed

    def test_large_stderr_does_not_block(self, script_invoker, backup_request):
        script = "import sys; sys.stderr.write('x' * 1000000); sys.stdout.write('ok')"
        process = script_invoker(script).start(Context.background(), backup_request)
        try:
            output = process.stdout.read()
            process.wait()
        finally:
            process.close()

        assert output == b"ok"
        assert len(process.stderr_text()) == 1000000


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX only")
def test_postgres_invoker_reports_missing_pg_dump(backup_request, monkeypatch):
    monkeypatch.setenv("PATH", "/nonexistent")

    with pytest.raises(InvocationError):
        PostgresDumpInvoker().start(Context.background(), backup_request)
