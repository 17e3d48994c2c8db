"""Per-client key/value store backed by the ``client_state`` table.

The browser only carries an opaque client id in its session cookie; the
values themselves live server-side, so they are not bound by cookie size.
"""

from __future__ import annotations

import uuid
from collections.abc import MutableMapping
from typing import Iterator

from sqlalchemy.orm import Session

from ..models import ClientState, utcnow


CLIENT_ID_KEY = "client_id"


def client_id_for(session: MutableMapping) -> str:
    """Return the client id stored in ``session``, minting one if needed."""
    cid = session.get(CLIENT_ID_KEY)
    if not cid:
        cid = uuid.uuid4().hex
        session[CLIENT_ID_KEY] = cid
    return cid


class ClientStore(MutableMapping):
    def __init__(self, db: Session, client_id: str) -> None:
        self.db = db
        self.client_id = client_id

    def _row(self, key: str):
        return self.db.get(ClientState, (self.client_id, key))

    def __getitem__(self, key: str) -> str:
        row = self._row(key)
        if row is None:
            raise KeyError(key)
        return row.value

    def __setitem__(self, key: str, value: str) -> None:
        row = self._row(key)
        if row is None:
            row = ClientState(client_id=self.client_id, key=key, value=value)
        else:
            row.value = value
            row.updated_at = utcnow()
        try:
            self.db.add(row)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def __delitem__(self, key: str) -> None:
        row = self._row(key)
        if row is None:
            raise KeyError(key)
        self.db.delete(row)
        self.db.commit()

    def __iter__(self) -> Iterator[str]:
        rows = self.db.query(ClientState.key).filter(ClientState.client_id == self.client_id).all()
        return iter([k for (k,) in rows])

    def __len__(self) -> int:
        return self.db.query(ClientState).filter(ClientState.client_id == self.client_id).count()
