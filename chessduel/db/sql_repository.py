"""Implementation of the repositories using SQLAlchemy"""

import base64
import binascii
from uuid import UUID, uuid4

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session

from chessduel.core.models import MatchModel
from chessduel.db.schema import DBCredential, DBMatch


class SQLMatchRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get_match(self, match_id: UUID) -> MatchModel | None:
        match_db = self._fetch_match(match_id)
        if match_db:
            return self._to_model(match_db)
        return None

    def create_match(self, match: MatchModel) -> tuple[MatchModel, UUID]:
        new_id = uuid4()
        match_db = DBMatch(
            id=new_id,
            white_model=match.white_model,
            black_model=match.black_model,
            current_fen=match.current_fen,
            moves=list(match.moves),
            result=match.result,
            last_move=match.last_move,
        )
        self.db.add(match_db)
        self.db.commit()
        self.db.refresh(match_db)
        return self._to_model(match_db), new_id

    def update_match(self, match_id: UUID, match: MatchModel) -> MatchModel | None:
        match_db = self._fetch_match(match_id)
        if not match_db:
            return None
        match_db.white_model = match.white_model
        match_db.black_model = match.black_model
        match_db.current_fen = match.current_fen
        # new list, so the JSON column registers the change
        match_db.moves = list(match.moves)
        match_db.result = match.result
        match_db.last_move = match.last_move
        self.db.commit()
        self.db.refresh(match_db)
        return self._to_model(match_db)

    def list_matches(self) -> list[tuple[UUID, MatchModel]]:
        query = select(DBMatch).order_by(DBMatch.created_at)
        return [(row.id, self._to_model(row)) for row in self.db.scalars(query)]

    def delete_match(self, match_id: UUID) -> MatchModel | None:
        match_db = self._fetch_match(match_id)
        if not match_db:
            return None
        match_model = self._to_model(match_db)
        self.db.delete(match_db)
        self.db.commit()
        return match_model

    def _fetch_match(self, match_id: UUID) -> DBMatch | None:
        query = select(DBMatch).where(DBMatch.id == match_id)
        return self.db.scalar(query)

    def _to_model(self, match_db: DBMatch) -> MatchModel:
        """Convert SQLAlchemy model to data transfer model."""
        return MatchModel(
            white_model=match_db.white_model,
            black_model=match_db.black_model,
            current_fen=match_db.current_fen,
            moves=list(match_db.moves),
            result=match_db.result,
            last_move=match_db.last_move,
        )


class SQLCredentialStore:
    """API keys kept base64 encoded in the credentials table."""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def save(self, name: str, secret: str) -> None:
        encoded = base64.b64encode(secret.encode("utf-8")).decode("ascii")
        record = self.db.get(DBCredential, name)
        if record is None:
            self.db.add(DBCredential(name=name, encoded_value=encoded))
        else:
            record.encoded_value = encoded
        self.db.commit()

    def load(self, name: str) -> str | None:
        record = self.db.get(DBCredential, name)
        if record is None:
            return None
        try:
            return base64.b64decode(record.encoded_value).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            logger.warning("Stored credential {!r} could not be decoded", name)
            return None

    def clear(self, name: str) -> None:
        record = self.db.get(DBCredential, name)
        if record is not None:
            self.db.delete(record)
            self.db.commit()
