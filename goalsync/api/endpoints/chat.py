import asyncio
import logging
from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session

from goalsync.services import auth_service, chat_service
from goalsync.models import user as user_model
from goalsync.schemas import message_schemas
from goalsync.api.dependencies import get_db

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=List[message_schemas.MessageRead])
async def get_messages_endpoint(
    team_id: str,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return chat_service.get_messages(db=db, team_id=team_id, current_user=current_user)


@router.post("/", response_model=message_schemas.MessageRead, status_code=status.HTTP_201_CREATED)
async def send_message_endpoint(
    team_id: str,
    message_in: message_schemas.MessageCreate,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return chat_service.send_message(db=db, team_id=team_id, text=message_in.text, current_user=current_user)


@router.patch("/{message_id}", response_model=message_schemas.MessageRead)
async def edit_message_endpoint(
    team_id: str,
    message_id: str,
    message_in: message_schemas.MessageUpdate,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return chat_service.edit_message(
        db=db, team_id=team_id, message_id=message_id, text=message_in.text, current_user=current_user
    )


@router.delete("/{message_id}", response_model=Dict[str, str])
async def delete_message_endpoint(
    team_id: str,
    message_id: str,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    chat_service.delete_message(db=db, team_id=team_id, message_id=message_id, current_user=current_user)
    return {"message": "Message deleted successfully"}


@router.post("/{message_id}/read", response_model=message_schemas.MessageRead)
async def mark_message_as_read_endpoint(
    team_id: str,
    message_id: str,
    db: Session = Depends(get_db),
    current_user: user_model.User = Depends(auth_service.get_current_user),
):
    return chat_service.mark_message_as_read(db=db, team_id=team_id, message_id=message_id, current_user=current_user)


def _snapshot(db: Session, team_id: str) -> dict:
    # Drop cached rows so changes committed by other sessions are visible
    db.expire_all()
    messages = chat_service.load_message_window(db, team_id)
    return {
        "type": "messages",
        "messages": [message_schemas.MessageRead.model_validate(m).model_dump(mode="json") for m in messages],
    }


async def _forward_changes(websocket: WebSocket, db: Session, team_id: str, queue: asyncio.Queue) -> None:
    while True:
        await queue.get()
        await websocket.send_json(_snapshot(db, team_id))


@router.websocket("/ws")
async def chat_websocket_endpoint(
    websocket: WebSocket,
    team_id: str,
    token: str,
    db: Session = Depends(get_db),
):
    """
    Live team chat. Sends the current message window on connect and again
    after every change to the team's chat. Incoming frames are ignored.
    """
    try:
        current_user = auth_service.user_from_token(db, token)
        chat_service.get_messages(db=db, team_id=team_id, current_user=current_user)
    except HTTPException as exc:
        logger.warning("Chat subscription to team %s refused: %s", team_id, exc.detail)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    queue = chat_service.chat_feed.subscribe(team_id)
    forwarder = None
    try:
        await websocket.send_json(_snapshot(db, team_id))
        forwarder = asyncio.create_task(_forward_changes(websocket, db, team_id, queue))
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug("User %s left the chat of team %s", current_user.id, team_id)
    finally:
        if forwarder is not None:
            forwarder.cancel()
        chat_service.chat_feed.unsubscribe(team_id, queue)
