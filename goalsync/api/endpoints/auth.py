from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from goalsync.services import auth_service
from goalsync.schemas import auth_schemas
from goalsync.api.dependencies import get_db

router = APIRouter()


@router.post("/register", response_model=auth_schemas.AuthResponse, status_code=status.HTTP_201_CREATED)
async def register_endpoint(
    registration: auth_schemas.RegisterRequest,
    db: Session = Depends(get_db),
):
    user = auth_service.register_user(db=db, registration=registration)
    return {"access_token": auth_service.issue_token(user), "token_type": "bearer", "user": user}


@router.post("/login", response_model=auth_schemas.AuthResponse)
async def login_endpoint(
    request: auth_schemas.LoginRequest,
    db: Session = Depends(get_db),
):
    user = auth_service.authenticate_user(db=db, email=request.email, password=request.password)
    return {"access_token": auth_service.issue_token(user), "token_type": "bearer", "user": user}
