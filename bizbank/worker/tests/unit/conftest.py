import os
import tempfile

# worker main import 전에 설정되어야 함
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "bizbank-test-logs"))
