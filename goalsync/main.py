import logging

from fastapi import FastAPI

from goalsync.api.endpoints import announcements as announcement_endpoints
from goalsync.api.endpoints import auth as auth_endpoints
from goalsync.api.endpoints import chat as chat_endpoints
from goalsync.api.endpoints import events as event_endpoints
from goalsync.api.endpoints import invitations as invitation_endpoints
from goalsync.api.endpoints import notifications as notification_endpoints
from goalsync.api.endpoints import stats as stats_endpoints
from goalsync.api.endpoints import teams as team_endpoints
from goalsync.api.endpoints import users as user_endpoints
from goalsync.core.config import configure_logging, settings
from goalsync.core.database import init_db

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="GoalSync API")

# Include routers
app.include_router(auth_endpoints.router, prefix="/auth", tags=["Authentication"])
app.include_router(user_endpoints.router, prefix="/users", tags=["Users"])
app.include_router(team_endpoints.router, prefix="/teams", tags=["Teams"])
app.include_router(chat_endpoints.router, prefix="/teams/{team_id}/chat", tags=["Chat"])
app.include_router(invitation_endpoints.router, prefix="/invitations", tags=["Invitations"])
app.include_router(event_endpoints.router, prefix="/events", tags=["Events"])
app.include_router(stats_endpoints.router, prefix="/stats", tags=["Statistics"])
app.include_router(announcement_endpoints.router, prefix="/announcements", tags=["Announcements"])
app.include_router(notification_endpoints.router, prefix="/notifications", tags=["Notifications"])


@app.on_event("startup")
async def startup_event():
    init_db()
    logger.info("GoalSync API started (%s)", settings.ENVIRONMENT)


@app.get("/")
async def root():
    return {"message": "GoalSync API"}
