"""HTTP 控制接口：暴露插件信息、启动/停止采样以及最新的指标值"""
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import Body, FastAPI
from fastapi.responses import JSONResponse
import uvicorn

from config import ConfigurationError, PLUGIN_DESCRIPTION, PLUGIN_ID, PLUGIN_NAME, PLUGIN_SCHEMA
from monitors import FanoutSink, LatestValueSink, MetricSink, MonitorService
from utils.logger import getLogger


logger = getLogger("server.app")

latest_values = LatestValueSink()
sinks = FanoutSink([latest_values])
service = MonitorService(sink=sinks)


def add_sink(sink: MetricSink):
    """Also deliver samples to ``sink`` (e.g. a SignalKReporter)."""
    sinks.add(sink)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    service.stop(join=False)


app = FastAPI(title=PLUGIN_NAME, lifespan=lifespan)


@app.get("/plugin")
async def plugin_info():
    return {
        'id': PLUGIN_ID,
        'name': PLUGIN_NAME,
        'description': PLUGIN_DESCRIPTION,
        'schema': PLUGIN_SCHEMA,
    }


@app.post("/plugin/start")
def start_plugin(options: Optional[Dict[str, Any]] = Body(default=None)):
    """Start sampling with the given plugin options; missing options use schema defaults."""
    try:
        started = service.start(options or {})
    except ConfigurationError as e:
        logger.warning("Rejected plugin options: %s", e)
        return JSONResponse(status_code=400, content={'error': str(e)})
    return {'started': started, **service.status()}


@app.post("/plugin/stop")
def stop_plugin():
    service.stop()
    return service.status()


@app.get("/plugin/status")
async def plugin_status():
    return service.status()


@app.get("/signalk/values")
async def signalk_values():
    """Latest value and units for every published path."""
    return latest_values.snapshot()


def run_server(host: str = '127.0.0.1', port: int = 34519):
    logger.info("Starting control server on %s:%s", host, port)
    uvicorn.run(app, host=host, port=port, log_level='info')
