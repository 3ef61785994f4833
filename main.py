"""RPI Monitor 入口

    python main.py                      # 后台采样，直到 Ctrl+C
    python main.py --once               # 采样一次并打印
    python main.py --serve              # 启动 HTTP 控制接口
    python main.py --signalk-url URL    # 同时把 delta 发送到 Signal K 服务器
"""
import argparse
import logging
import sys
import time

from config import ConfigurationError, load_configuration
from monitors import FanoutSink, LoggingSink, MonitorService, Sampler
from monitors.reporter import SignalKReporter
from utils.logger import clear_old_logs, getLogger, set_global_log_level


logger = getLogger("main")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Raspberry Pi vitals sampler")
    parser.add_argument("--config", help="JSON file with plugin options")
    parser.add_argument("--once", action="store_true", help="take one sample of every metric and exit")
    parser.add_argument("--serve", action="store_true", help="run the HTTP control server")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=34519)
    parser.add_argument("--signalk-url", help="POST Signal K deltas to this URL")
    parser.add_argument("--signalk-token", help="bearer token for --signalk-url")
    parser.add_argument("--log-level", type=str.upper, choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--keep-logs", type=int, default=7, help="delete log files older than this many days")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    if args.log_level:
        set_global_log_level(logging.getLevelName(args.log_level.upper()))
    clear_old_logs(days=args.keep_logs)

    try:
        config = load_configuration(args.config)
    except ConfigurationError as e:
        logger.error("Invalid configuration: %s", e)
        return 2

    extra = [SignalKReporter(args.signalk_url, token=args.signalk_token)] if args.signalk_url else []

    if args.serve:
        from server.app import add_sink, run_server, service
        for sink in extra:
            add_sink(sink)
        service.start(config)
        run_server(args.host, args.port)
        return 0

    sink = FanoutSink([LoggingSink(), *extra])
    if args.once:
        sampler = Sampler(config, sink)
        sampler.register_metadata()
        results = sampler.tick()
        return 0 if all(r.ok for r in results) else 1

    service = MonitorService(sink)
    service.start(config)
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping")
    finally:
        service.stop(join=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
