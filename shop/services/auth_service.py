"""
Autenticação por token opaco (sessões só na memória do processo)
"""

import logging
import secrets
import threading
from dataclasses import replace
from typing import Dict, Optional

from werkzeug.security import check_password_hash

from ..errors import Unauthorized
from ..schemas import LoginIn, parse
from ..storage.base import User

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def extract_token(header: Optional[str]) -> str:
    token = (header or "").strip()
    if token.startswith(BEARER_PREFIX):
        token = token[len(BEARER_PREFIX):].strip()
    return token


def generate_token() -> str:
    return secrets.token_hex(16)


class SessionRegistry:
    """token -> usuário; some no restart e não expira"""

    def __init__(self):
        self._sessions: Dict[str, User] = {}
        self._lock = threading.Lock()

    def add(self, token: str, user: User) -> None:
        with self._lock:
            self._sessions[token] = user

    def get(self, token: str) -> Optional[User]:
        with self._lock:
            return self._sessions.get(token)

    def remove(self, token: str) -> bool:
        with self._lock:
            return self._sessions.pop(token, None) is not None

    def __len__(self):
        with self._lock:
            return len(self._sessions)


class AuthService:
    def __init__(self, store, sessions: Optional[SessionRegistry] = None):
        self.store = store
        self.sessions = sessions or SessionRegistry()

    def login(self, payload):
        data = parse(LoginIn, payload, error="Invalid request")
        user = self.store.get_user_by_username(data.username)
        if user is None or not check_password_hash(user.password_hash, data.password):
            logger.warning(f"Login recusado para {data.username!r}")
            raise Unauthorized("Username or password is incorrect", error="Invalid credentials")

        token = generate_token()
        # a sessão nunca guarda o hash
        session_user = replace(user, password_hash="")
        self.sessions.add(token, session_user)
        logger.info(f"Login de {user.username} ({user.role})")
        return session_user, token

    def logout(self, header: Optional[str]) -> None:
        token = extract_token(header)
        if token and self.sessions.remove(token):
            logger.info("Sessão encerrada")

    def resolve(self, header: Optional[str]) -> User:
        token = extract_token(header)
        if not token:
            raise Unauthorized(error="No token provided")
        user = self.sessions.get(token)
        if user is None:
            raise Unauthorized(error="Invalid token")
        return user
