"""
WebSocket router - Real-time record store change notifications.

Store subscribers run on whichever thread made the change, so each
connection hands notifications to its event loop through a queue.
"""

import asyncio
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from api.schemas.record_schema import StoreChangeMessage
from services.record_store import RecordStore, StoreChange

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(tags=['websocket'])


async def _wait_for_disconnect(websocket: WebSocket):
    """Consume client messages until the client goes away."""
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        return


@router.websocket('/ws/records')
async def websocket_record_changes(websocket: WebSocket):
    """
    WebSocket endpoint streaming record store changes.

    Sends one JSON message per committed store mutation. Clients re-read
    ``GET /api/records`` when notified.

    **Connection:**
    ```javascript
    const ws = new WebSocket('ws://localhost:8000/ws/records');

    ws.onmessage = (event) => {
        const data = JSON.parse(event.data);
        if (data.event === 'store_changed') {
            refreshGrid();
        }
    };
    ```

    **Message Format:**
    ```json
    {
        "event": "store_changed",
        "kind": "replaced",
        "record_count": 240,
        "row_number": null
    }
    ```
    """
    store: RecordStore = websocket.app.state.store

    await websocket.accept()
    logger.info("WebSocket connection established for record changes")

    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()

    def on_change(change: StoreChange):
        loop.call_soon_threadsafe(queue.put_nowait, change)

    unsubscribe = store.subscribe(on_change)
    receiver = asyncio.create_task(_wait_for_disconnect(websocket))

    try:
        await websocket.send_json({
            'event': 'connected',
            'record_count': store.count(),
            'message': 'Connected to record change stream'
        })

        while True:
            getter = asyncio.create_task(queue.get())
            done, _ = await asyncio.wait({getter, receiver}, return_when=asyncio.FIRST_COMPLETED)

            if receiver in done:
                getter.cancel()
                logger.info("WebSocket client disconnected from record changes")
                break

            change: StoreChange = getter.result()
            message = StoreChangeMessage(
                kind=change.kind.value,
                record_count=change.record_count,
                row_number=change.row_number
            )
            await websocket.send_json(message.model_dump())

    except WebSocketDisconnect:
        logger.info("WebSocket client disconnected from record changes")

    except Exception as e:
        logger.error(f"WebSocket error on record changes: {e}", exc_info=True)
        try:
            await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
        except RuntimeError as close_error:
            logger.debug(f"WebSocket already closed: {close_error}")

    finally:
        unsubscribe()
        receiver.cancel()
