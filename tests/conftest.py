import sys
import os
import threading

import pytest

# Ensure src/ is on sys.path so the layer packages are importable
SRC = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src'))
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from domain.exceptions import UploadFailed
from domain.models import BackupRequest
from infrastructure.dump.base import DumpInvoker


class ScriptInvoker(DumpInvoker):
    """Dump invoker running a Python snippet instead of a real dump tool."""

    def __init__(self, script="", engine="postgres", command=None):
        super().__init__()
        self.engine = engine
        self.script = script
        self.command = command

    def build_command(self, request):
        if self.command is not None:
            return list(self.command)
        return [sys.executable, '-c', self.script]

    def build_env(self, request):
        return {"PGUSER": request.username, "PGPASSWORD": request.password}


class RecordingUploader:
    """In-memory IStreamUploader that reads the stream like a real client."""

    def __init__(self, error=None):
        self.error = error
        self.uploads = {}
        self.size_hints = []
        self.contexts = []
        self._lock = threading.Lock()

    def upload(self, context, object_path, stream, size_hint=-1):
        with self._lock:
            self.contexts.append(context)
            self.size_hints.append(size_hint)
        data = bytearray()
        while True:
            if context.done():
                raise UploadFailed(f"Upload of {object_path} cancelled: {context.err()}")
            chunk = stream.read(64 * 1024)
            if not chunk:
                break
            data.extend(chunk)
        if context.done():
            raise UploadFailed(f"Upload of {object_path} cancelled: {context.err()}")
        if self.error is not None:
            raise self.error
        with self._lock:
            self.uploads[object_path] = bytes(data)


@pytest.fixture
def backup_request():
    return BackupRequest(
        host="db.internal",
        port="5432",
        username="backman",
        password="s3cret",
        namespace="svc",
        instance_name="instance1",
        filename="backup.sql.gz",
        database="orders",
    )


@pytest.fixture
def script_invoker():
    """Factory for ScriptInvoker instances."""
    return ScriptInvoker


@pytest.fixture
def recording_uploader():
    return RecordingUploader()
