"""FastAPI dependencies wiring request handlers to settings, storage and services."""
from fastapi import Depends, Request

from account_service.auth.service import AuthService
from account_service.base_service import Database
from account_service.config import Settings
from account_service.users.service import UserService
from account_service.users.store import UserStore


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_user_store(database: Database = Depends(get_database)) -> UserStore:
    return UserStore(database)


def get_auth_service(
    store: UserStore = Depends(get_user_store),
    settings: Settings = Depends(get_app_settings),
) -> AuthService:
    return AuthService(store, settings)


def get_user_service(
    store: UserStore = Depends(get_user_store),
    settings: Settings = Depends(get_app_settings),
) -> UserService:
    return UserService(store, settings)
