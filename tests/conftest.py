import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import goalsync.models  # noqa: F401
from goalsync.core.database import Base
from goalsync.models import event as event_model
from goalsync.models import user as user_model
from goalsync.schemas import team_schemas
from goalsync.services import team_service


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    def _make_user(name: str, user_type: str = "player", email: str = None) -> user_model.User:
        user = user_model.User(
            email=email or f"{name.lower().replace(' ', '.')}@example.com",
            name=name,
            password_hash="not-a-real-hash",
            type=user_type,
            status="active",
            push_tokens=[],
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make_user


@pytest.fixture
def trainer(make_user):
    return make_user("Coach Carter", user_type="trainer")


@pytest.fixture
def team(db, trainer):
    return team_service.create_team(db, team_schemas.TeamCreate(name="Falcons"), trainer)


@pytest.fixture
def make_player(db, make_user):
    def _make_player(name: str, team=None, number: str = None, position: str = None) -> user_model.User:
        player = make_user(name)
        if team is not None:
            team_service.join_team(db, team.id, player)
            player.number = number
            player.position = position
            db.commit()
            db.refresh(player)
        return player
    return _make_player


@pytest.fixture
def make_event(db):
    """Insert an event directly, bypassing the chat side effects of create_event."""
    def _make_event(team, title: str = "League Game", event_type: str = "match", start=None,
                    duration_hours: int = 2, **fields) -> event_model.Event:
        start = start or datetime.datetime(2026, 3, 7, 15, 0)
        event = event_model.Event(
            team_id=team.id,
            title=title,
            type=event_type,
            start_time=start,
            end_time=start + datetime.timedelta(hours=duration_hours),
            location="City Park",
            opponent=fields.pop("opponent", "Rovers" if event_type == "match" else None),
            is_home_game=fields.pop("is_home_game", True if event_type == "match" else None),
            status=fields.pop("status", "scheduled"),
            roster=fields.pop("roster", []),
            attendees=fields.pop("attendees", []),
            absentees=fields.pop("absentees", []),
            score_submitted=fields.pop("score_submitted", False),
            created_by=team.trainer_id,
            **fields,
        )
        db.add(event)
        db.commit()
        db.refresh(event)
        return event
    return _make_event
