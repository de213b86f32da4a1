from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.user import UserCreate, UserLogin, UserOut
from app.schemas.tokens import Token
from app.services.identity import IdentityStore
from app.utils.auth import get_current_user
from app.utils.security import create_access_token

router = APIRouter()


def _token_response(user: User) -> dict:
    token = create_access_token(data={"sub": user.username})
    return {
        "access_token": token,
        "token_type": "bearer",
        "user": UserOut.model_validate(user),
    }


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
def register(user: UserCreate, db: Session = Depends(get_db)):
    """Register a new user and log them in"""
    new_user = IdentityStore(db).register(user.username, user.email, user.password)
    return _token_response(new_user)


@router.post("/login", response_model=Token)
def login(user: UserLogin, db: Session = Depends(get_db)):
    db_user = IdentityStore(db).authenticate(user.username, user.password)
    return _token_response(db_user)


@router.post("/logout")
def logout(current_user: User = Depends(get_current_user)):
    """Tokens are stateless; the client discards its copy"""
    return {"message": "Logout successful"}


@router.get("/me", response_model=UserOut)
def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current user information"""
    return current_user
