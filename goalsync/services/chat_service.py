import asyncio
import logging
import threading
from collections import defaultdict
from typing import Any, Dict, List, Optional, Set, Tuple

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from goalsync.core.config import settings
from goalsync.core.database import utcnow
from goalsync.models import message as message_model
from goalsync.models import user as user_model
from goalsync.services import team_service

logger = logging.getLogger(__name__)


class ChatFeed:
    """
    In-process fan-out of "team chat changed" signals to WebSocket subscribers.

    Each subscriber owns a queue holding at most one pending signal. The
    subscriber reloads the message window whenever it wakes up, so collapsing
    several changes into one signal loses nothing.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._subscribers: Dict[str, Set[Tuple[asyncio.AbstractEventLoop, asyncio.Queue]]] = defaultdict(set)

    def subscribe(self, team_id: str) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=1)
        with self._lock:
            self._subscribers[team_id].add((asyncio.get_running_loop(), queue))
        return queue

    def unsubscribe(self, team_id: str, queue: asyncio.Queue) -> None:
        with self._lock:
            subscribers = self._subscribers.get(team_id)
            if not subscribers:
                return
            for entry in [e for e in subscribers if e[1] is queue]:
                subscribers.discard(entry)
            if not subscribers:
                del self._subscribers[team_id]

    def subscriber_count(self, team_id: str) -> int:
        with self._lock:
            return len(self._subscribers.get(team_id, ()))

    def publish(self, team_id: str) -> None:
        # Callable from the event loop or from a worker thread
        with self._lock:
            subscribers = list(self._subscribers.get(team_id, ()))
        for loop, queue in subscribers:
            try:
                loop.call_soon_threadsafe(_signal, queue)
            except RuntimeError:
                # Loop already closed, the subscriber is going away
                logger.debug("Dropping chat signal for closed loop on team %s", team_id)


def _signal(queue: asyncio.Queue) -> None:
    if queue.empty():
        queue.put_nowait(None)


chat_feed = ChatFeed()


def _get_member_team(db: Session, team_id: str, current_user: user_model.User):
    team = team_service.get_team_or_404(db, team_id)
    team_service.ensure_team_member(team, current_user, "You are not a member of this team")
    return team


def _get_own_message(db: Session, team_id: str, message_id: str, current_user: user_model.User) -> message_model.Message:
    db_message = db.query(message_model.Message).filter(
        message_model.Message.id == message_id,
        message_model.Message.team_id == team_id,
    ).first()
    if not db_message:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")
    if db_message.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You can only modify your own messages")
    return db_message


def post_message(
    db: Session,
    team_id: str,
    author: user_model.User,
    text: str,
    message_type: str = "message",
    payload: Optional[Dict[str, Any]] = None,
) -> message_model.Message:
    """Store a chat message and wake up the team's subscribers. No membership check."""
    db_message = message_model.Message(
        team_id=team_id,
        user_id=author.id,
        user_name=author.name,
        text=text,
        type=message_type,
        payload=payload,
        edited=False,
        read_by=[author.id],
        timestamp=utcnow(),
    )
    db.add(db_message)
    db.commit()
    db.refresh(db_message)
    chat_feed.publish(team_id)
    return db_message


def send_message(db: Session, team_id: str, text: str, current_user: user_model.User) -> message_model.Message:
    _get_member_team(db, team_id, current_user)

    text = text.strip()
    if not text:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Message text cannot be empty")

    return post_message(db, team_id, current_user, text)


def edit_message(
    db: Session, team_id: str, message_id: str, text: str, current_user: user_model.User
) -> message_model.Message:
    db_message = _get_own_message(db, team_id, message_id, current_user)

    text = text.strip()
    if not text:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Message text cannot be empty")

    db_message.text = text
    db_message.edited = True
    db_message.updated_at = utcnow()
    db.commit()
    db.refresh(db_message)
    chat_feed.publish(team_id)
    return db_message


def delete_message(db: Session, team_id: str, message_id: str, current_user: user_model.User) -> bool:
    db_message = _get_own_message(db, team_id, message_id, current_user)
    db.delete(db_message)
    db.commit()
    chat_feed.publish(team_id)
    return True


def load_message_window(db: Session, team_id: str) -> List[message_model.Message]:
    """Latest messages of the team, oldest first."""
    latest = db.query(message_model.Message)\
        .filter(message_model.Message.team_id == team_id)\
        .order_by(message_model.Message.timestamp.desc())\
        .limit(settings.CHAT_HISTORY_LIMIT)\
        .all()
    return list(reversed(latest))


def get_messages(db: Session, team_id: str, current_user: user_model.User) -> List[message_model.Message]:
    _get_member_team(db, team_id, current_user)
    return load_message_window(db, team_id)


def mark_message_as_read(db: Session, team_id: str, message_id: str, current_user: user_model.User) -> message_model.Message:
    _get_member_team(db, team_id, current_user)

    db_message = db.query(message_model.Message).filter(
        message_model.Message.id == message_id,
        message_model.Message.team_id == team_id,
    ).first()
    if not db_message:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")

    if current_user.id not in (db_message.read_by or []):
        db_message.read_by = list(db_message.read_by or []) + [current_user.id]
        db.commit()
        db.refresh(db_message)
        chat_feed.publish(team_id)
    return db_message
