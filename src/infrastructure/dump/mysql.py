"""MySQL dump invoker."""

from typing import Dict, List

from domain.models import BackupRequest
from .base import DumpInvoker


class MySQLDumpInvoker(DumpInvoker):
    """Runs mysqldump for one database, or all databases without a name."""

    engine = "mysql"

    def build_command(self, request: BackupRequest) -> List[str]:
        command = ["mysqldump", "--host", request.host]
        if request.port:
            command += ["--port", request.port]
        if request.username:
            command += ["--user", request.username]
        command += [
            "--single-transaction",
            "--routines",
            "--triggers",
            "--add-drop-database",
        ]
        if request.database:
            command += ["--databases", request.database]
        else:
            command.append("--all-databases")
        return command

    def build_env(self, request: BackupRequest) -> Dict[str, str]:
        # mysqldump reads the password from MYSQL_PWD, keeping it off the command line
        if request.password:
            return {"MYSQL_PWD": request.password}
        return {}
