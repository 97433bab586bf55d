"""PostgreSQL dump invoker."""

from typing import Dict, List

from domain.models import BackupRequest
from .base import DumpInvoker


class PostgresDumpInvoker(DumpInvoker):
    """
    Runs pg_dump for a single database, pg_dumpall for a whole instance.

    Both always emit clean (DROP) statements and never prompt for a password.
    """

    engine = "postgres"

    def build_command(self, request: BackupRequest) -> List[str]:
        if request.database:
            command = ["pg_dump", request.database, "-C"]
        else:
            command = ["pg_dumpall"]
        command += ["-c", "--no-password"]
        return command

    def build_env(self, request: BackupRequest) -> Dict[str, str]:
        env = {
            "PGUSER": request.username,
            "PGPASSWORD": request.password,
            "PGHOST": request.host,
            "PGPORT": request.port,
        }
        return {key: value for key, value in env.items() if value}
