import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from ..core.view_manager import manager

router = APIRouter()
logger = logging.getLogger(__name__)


def _dump(view) -> dict:
    # mode='json' turns datetimes and enums into plain JSON values
    return view.snapshot().model_dump(mode='json', by_alias=True)


@router.websocket('/ws')
async def ws_endpoint(ws: WebSocket):
    await ws.accept()
    subscriptions: dict = {}
    changed: asyncio.Queue = asyncio.Queue()
    send_lock = asyncio.Lock()

    async def send(payload: dict):
        async with send_lock:
            await ws.send_json(payload)

    async def push():
        # every state change of a subscribed view goes out as an update
        while True:
            name = await changed.get()
            view = manager.get(name)
            if view is None or name not in subscriptions:
                continue
            await send({'type': 'update', 'view': name, 'data': _dump(view)})

    def drop(name):
        if not isinstance(name, str):
            return
        listener = subscriptions.pop(name, None)
        view = manager.get(name)
        if listener is not None and view is not None:
            view.controller.unsubscribe(listener)

    pusher = asyncio.create_task(push())
    try:
        while True:
            msg = await ws.receive_json()
            if not isinstance(msg, dict):
                await send({'type': 'error', 'error': 'message must be a JSON object'})
                continue
            action = msg.get('action')

            if action == 'subscribe':
                name = msg.get('view')
                if not isinstance(name, str):
                    await send({'type': 'error', 'error': 'view must be a string'})
                    continue

                view = manager.get(name)
                if view is None:
                    await send({'type': 'error', 'error': f'unknown view {name}'})
                    continue
                if name not in subscriptions:
                    listener = lambda _ctl, name=name: changed.put_nowait(name)
                    subscriptions[name] = listener
                    view.controller.subscribe(listener)
                await send({'type': 'subscribed', 'view': name})

            elif action == 'unsubscribe':
                drop(msg.get('view'))
                await send({'type': 'unsubscribed', 'view': msg.get('view')})

            elif action == 'poll':
                out = {}
                for name in list(subscriptions):
                    view = manager.get(name)
                    if view is None:
                        subscriptions.pop(name, None)
                        continue
                    out[name] = _dump(view)
                await send({'type': 'poll-result', 'data': out})

            else:
                await send({'type': 'error', 'error': 'unknown action'})
    except WebSocketDisconnect:
        logger.debug("WebSocket client left with %d subscription(s)", len(subscriptions))
    finally:
        pusher.cancel()
        for name in list(subscriptions):
            drop(name)
