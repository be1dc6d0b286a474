from __future__ import annotations
import logging
from aiohttp import web

log = logging.getLogger(__name__)

async def handle_root(request: web.Request) -> web.Response:
    return web.Response(text="running")

def build_app() -> web.Application:
    app = web.Application()
    app.router.add_get("/", handle_root)
    return app

async def start_health_server(port: int, host: str = "0.0.0.0") -> web.AppRunner:
    """Keep-alive endpoint for hosts that expect an open HTTP port."""
    runner = web.AppRunner(build_app())
    await runner.setup()
    await web.TCPSite(runner, host, port).start()
    log.info("Health server listening on port %d", port)
    return runner
