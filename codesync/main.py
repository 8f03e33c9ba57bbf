import asyncio
import json
import logging
import os

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from codesync.collab_manager import CollabManager
from codesync.config import SETTINGS, Settings
from codesync.events import SocketEvent
from codesync.router import EventRouter

logging.basicConfig(
    level=SETTINGS.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(settings: Settings = SETTINGS) -> FastAPI:
    app = FastAPI(title="codesync")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    hub = CollabManager()
    router = EventRouter(hub)
    app.state.hub = hub
    app.state.router = router

    # Serve the built client bundle if one is shipped next to the server
    if os.path.isdir(settings.static_dir):
        app.mount("/static", StaticFiles(directory=settings.static_dir), name="static")

    @app.get("/")
    def index():
        page = os.path.join(settings.static_dir, "index.html")
        if os.path.isfile(page):
            return FileResponse(page)
        return {"message": "codesync server running"}

    @app.get("/health")
    def health():
        return {"ok": True, "connections": len(hub), "rooms": len(router.policies)}

    #-------- Real-time rooms via WebSockets --------

    @app.websocket("/ws")
    async def ws_endpoint(ws: WebSocket):
        await ws.accept()
        conn = hub.connect(ws)
        logger.info("connection %s opened", conn.id)
        hub.send(conn.id, SocketEvent.CONNECTED, {"socketId": conn.id})
        writer = asyncio.create_task(hub.pump(conn))
        try:
            while True:
                message = await ws.receive()
                if message["type"] == "websocket.disconnect":
                    break
                raw = message.get("text")
                if raw is None:
                    logger.warning("dropping binary frame from %s", conn.id)
                    continue
                try:
                    data = json.loads(raw)
                except ValueError:
                    logger.warning("dropping non-JSON frame from %s", conn.id)
                    continue
                router.dispatch(conn.id, data)
        except WebSocketDisconnect:
            pass
        finally:
            router.disconnect(conn.id)
            hub.disconnect(conn.id)
            writer.cancel()
            logger.info("connection %s closed", conn.id)

    return app


app = create_app()


def main():
    import uvicorn

    uvicorn.run(
        app,
        host=SETTINGS.host,
        port=SETTINGS.port,
        log_level=SETTINGS.log_level.lower(),
        ws_max_size=SETTINGS.ws_max_size,
        ws_ping_timeout=SETTINGS.ws_ping_timeout,
    )


if __name__ == "__main__":
    main()
