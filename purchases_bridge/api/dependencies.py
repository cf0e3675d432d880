"""
API Dependencies - Resolve the plugin and event hub built at startup.
"""

from fastapi import HTTPException, Request, WebSocket, status

from purchases_bridge.config import settings
from purchases_bridge.services.events import EventHub
from purchases_bridge.services.plugin import PurchasesPlugin


def require_channel(channel: str) -> str:
    """Reject channel names other than the configured one."""
    if channel != settings.channel_name:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown channel: {channel}",
        )
    return channel


def get_plugin(request: Request) -> PurchasesPlugin:
    return request.app.state.plugin  # type: ignore[no-any-return]


def get_event_hub(websocket: WebSocket) -> EventHub:
    return websocket.app.state.events  # type: ignore[no-any-return]
