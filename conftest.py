import os
import tempfile

# must be set before utils.logger is imported by any test module
os.environ.setdefault("RPI_MONITOR_LOG_DIR", os.path.join(tempfile.gettempdir(), "rpi-monitor-test-logs"))
