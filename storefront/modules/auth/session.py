"""Session store for the ID-only login.

The store is always handed to its users explicitly; the web layer builds
one per request over the signed cookie, the CLI one per process over a
JSON file.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from flask import session as flask_session

logger = logging.getLogger(__name__)

SESSION_KEY = "user_session_id"

Validator = Callable[[str], bool]


class Slot(Protocol):
    def get(self) -> Optional[str]: ...

    def set(self, value: str) -> None: ...

    def delete(self) -> None: ...


class MemorySlot:
    def __init__(self, value: Optional[str] = None) -> None:
        self.value = value

    def get(self) -> Optional[str]:
        return self.value

    def set(self, value: str) -> None:
        self.value = value

    def delete(self) -> None:
        self.value = None


class FileSlot:
    """Persists the user id in a small JSON file so it survives restarts."""

    def __init__(self, path: str, key: str = SESSION_KEY) -> None:
        self.path = path
        self.key = key

    def _read(self) -> dict:
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except ValueError:
            logger.warning("Ignoring unreadable session file %s", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self) -> Optional[str]:
        return self._read().get(self.key) or None

    def set(self, value: str) -> None:
        data = self._read()
        data[self.key] = value
        os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f)

    def delete(self) -> None:
        data = self._read()
        if self.key not in data:
            return
        data.pop(self.key)
        if data:
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f)
        else:
            os.remove(self.path)


class FlaskSessionSlot:
    """Slot backed by the signed Flask session cookie (request context only)."""

    def __init__(self, key: str = SESSION_KEY) -> None:
        self.key = key

    def get(self) -> Optional[str]:
        return flask_session.get(self.key) or None

    def set(self, value: str) -> None:
        flask_session[self.key] = value

    def delete(self) -> None:
        flask_session.pop(self.key, None)


@dataclass
class Session:
    user_id: Optional[str] = None
    is_authenticated: bool = False


class SessionStore:
    def __init__(self, slot: Slot) -> None:
        self.slot = slot
        self.session = Session()

    @property
    def user_id(self) -> Optional[str]:
        return self.session.user_id

    @property
    def is_authenticated(self) -> bool:
        return self.session.is_authenticated

    def _clear(self) -> None:
        self.session = Session()
        self.slot.delete()

    def login(self, user_id: str, validate: Validator) -> bool:
        """Validate `user_id` with the caller's check and persist it on success.

        A False answer and an exception from `validate` are the same thing
        to the caller: the session is cleared and False comes back.
        """
        try:
            valid = validate(user_id)
        except Exception:
            logger.exception("Login check raised for user %s", user_id)
            valid = False

        if not valid:
            logger.info("Login rejected for user %s", user_id)
            self._clear()
            return False

        self.session = Session(user_id=user_id, is_authenticated=True)
        self.slot.set(user_id)
        return True

    def logout(self) -> None:
        self._clear()

    def restore(self, validate: Optional[Validator] = None) -> bool:
        """Load the persisted user id.

        Without `validate` the stored id is trusted as-is. With it, the id
        is checked again and a failed check logs the user out.
        """
        stored = self.slot.get()
        if not stored:
            self.session = Session()
            return False

        if validate is not None:
            return self.login(stored, validate)

        self.session = Session(user_id=stored, is_authenticated=True)
        return True
