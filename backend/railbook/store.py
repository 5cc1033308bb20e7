"""Single-file JSON store for users and their tickets.

The whole document is read on every call and written back after every
change. There is no locking: concurrent writers race and the last one wins.

Document layout::

    {
      "users":   {"A123456789": {"password": "...", "blocked": false}},
      "tickets": {"A123456789": [{"from": ..., "to": ..., "date": ..., ...}]}
    }
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional

logger = logging.getLogger("railbook.store")


class StoreError(Exception):
    pass


class UserExistsError(StoreError):
    pass


class UserNotFoundError(StoreError):
    pass


class TicketIndexError(StoreError):
    pass


def _empty_document() -> dict:
    return {"users": {}, "tickets": {}}


class JsonStore:
    def __init__(self, path):
        self.path = Path(path)

    def _read(self) -> dict:
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return _empty_document()
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read {self.path}, starting from an empty store: {e}")
            return _empty_document()

        if not isinstance(data, dict):
            logger.warning(f"{self.path} does not hold a JSON object, ignoring it")
            return _empty_document()
        data.setdefault("users", {})
        data.setdefault("tickets", {})
        return data

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, self.path)

    # --- users ---

    def exists_user(self, user_id: str) -> bool:
        return user_id in self._read()["users"]

    def create_user(self, user_id: str, password: str) -> None:
        data = self._read()
        if user_id in data["users"]:
            raise UserExistsError(user_id)
        data["users"][user_id] = {"password": password, "blocked": False}
        data["tickets"][user_id] = []
        self._write(data)
        logger.info(f"Created user {user_id}")

    def get_user(self, user_id: str) -> Optional[dict]:
        return self._read()["users"].get(user_id)

    def _set_blocked(self, user_id: str, blocked: bool) -> None:
        data = self._read()
        user = data["users"].get(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        user["blocked"] = blocked
        self._write(data)
        logger.info(f"{'Blocked' if blocked else 'Unblocked'} user {user_id}")

    def block_user(self, user_id: str) -> None:
        self._set_blocked(user_id, True)

    def unblock_user(self, user_id: str) -> None:
        self._set_blocked(user_id, False)

    # --- tickets ---

    def get_tickets(self, user_id: str) -> list[dict]:
        return self._read()["tickets"].get(user_id) or []

    def add_ticket(self, user_id: str, ticket: dict) -> None:
        data = self._read()
        if user_id not in data["users"]:
            raise UserNotFoundError(user_id)
        data["tickets"].setdefault(user_id, []).append(ticket)
        self._write(data)
        logger.info(f"Booked ticket for {user_id}: {ticket.get('from')}->{ticket.get('to')} {ticket.get('date')}")

    def remove_ticket(self, user_id: str, index: int) -> dict:
        """Delete the ticket at index and return it."""
        data = self._read()
        if user_id not in data["users"]:
            raise UserNotFoundError(user_id)
        tickets = data["tickets"].get(user_id)
        if not isinstance(tickets, list) or not 0 <= index < len(tickets):
            raise TicketIndexError(f"{user_id} has no ticket #{index}")
        removed = tickets.pop(index)
        self._write(data)
        logger.info(f"Removed ticket #{index} of {user_id}")
        return removed

    def get_all(self) -> dict:
        data = self._read()
        return {"users": data["users"], "tickets": data["tickets"]}
