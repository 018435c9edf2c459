"""Non-blocking confirmation flow for destructive or money-moving actions.

Streamlit cannot block on a modal prompt, so a pending action is parked in
session state and the next rerun renders Confirm / Cancel buttons for it::

    idle --request--> confirming --confirm--> committed
                                 --cancel---> cancelled

``reset`` (or a new ``request`` from a finished state) returns the machine
to the start.
"""

from __future__ import annotations

from typing import Any, MutableMapping, Optional, Tuple

IDLE = 'idle'
CONFIRMING = 'confirming'
COMMITTED = 'committed'
CANCELLED = 'cancelled'


class ConfirmationState:
    """Confirmation state for one kind of action, stored under ``key``."""

    def __init__(self, store: MutableMapping[str, Any], key: str):
        self._store = store
        self.key = key
        if key not in store:
            self.reset()

    @property
    def _entry(self) -> dict:
        return self._store[self.key]

    @property
    def status(self) -> str:
        return self._entry['status']

    @property
    def target(self) -> Optional[str]:
        return self._entry['target']

    @property
    def payload(self) -> Any:
        return self._entry['payload']

    def is_confirming(self, target: Optional[str] = None) -> bool:
        if self.status != CONFIRMING:
            return False
        return target is None or self.target == target

    def request(self, target: str, payload: Any = None) -> None:
        """Ask for confirmation of an action on ``target``."""
        if self.status == CONFIRMING:
            raise ValueError(f"Already confirming an action on {self.target}")
        self._store[self.key] = {'status': CONFIRMING, 'target': target, 'payload': payload}

    def confirm(self) -> Tuple[str, Any]:
        """Commit the pending action and return its target and payload."""
        if self.status != CONFIRMING:
            raise ValueError("Nothing is awaiting confirmation")
        entry = dict(self._entry, status=COMMITTED)
        self._store[self.key] = entry
        return entry['target'], entry['payload']

    def cancel(self) -> None:
        if self.status != CONFIRMING:
            raise ValueError("Nothing is awaiting confirmation")
        self._store[self.key] = dict(self._entry, status=CANCELLED)

    def reset(self) -> None:
        self._store[self.key] = {'status': IDLE, 'target': None, 'payload': None}
