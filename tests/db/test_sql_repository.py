"""Unit tests for chessduel/db/sql_repository.py"""

from uuid import uuid4

from sqlalchemy.orm import Session

from chessduel.core.models import MatchModel
from chessduel.db.schema import DBCredential
from chessduel.db.sql_repository import SQLCredentialStore, SQLMatchRepository


def mock_match(**overrides: object) -> MatchModel:
    data: dict = dict(
        white_model="openai/gpt-4o",
        black_model="anthropic/claude-3-haiku",
        current_fen="rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1",
        moves=["e2-e4"],
        result="in_progress",
        last_move="e2e4",
    )
    data.update(overrides)
    return MatchModel(**data)


def test_create_match(db_session_repo: Session) -> None:
    """Conversion from a MatchModel to DBMatch for a new entry to the database."""
    model = mock_match()
    repo = SQLMatchRepository(db_session_repo)
    record_in_db, _ = repo.create_match(model)
    assert isinstance(record_in_db, MatchModel)
    assert record_in_db == model


def test_get_match_by_id(db_session_repo: Session) -> None:
    repo = SQLMatchRepository(db_session_repo)
    expected_match, match_id = repo.create_match(mock_match())
    assert repo.get_match(match_id) == expected_match


def test_get_unknown_match(db_session_repo: Session) -> None:
    """
    Should return None if ID does not match anything in database.

    NOTE with an empty database, any id is a valid test case.
    """
    repo = SQLMatchRepository(db_session_repo)
    assert repo.get_match(uuid4()) is None

    repo.create_match(mock_match())
    assert repo.get_match(uuid4()) is None


def test_update_match(db_session_repo: Session) -> None:
    repo = SQLMatchRepository(db_session_repo)
    _, match_id = repo.create_match(mock_match())

    updated = mock_match(
        moves=["e2-e4", "e7-e5"], last_move="e7e5", result="black_wins"
    )
    assert repo.update_match(match_id, updated) == updated
    assert repo.get_match(match_id) == updated


def test_update_unknown_match(db_session_repo: Session) -> None:
    repo = SQLMatchRepository(db_session_repo)
    assert repo.update_match(uuid4(), mock_match()) is None


def test_list_and_delete_matches(db_session_repo: Session) -> None:
    repo = SQLMatchRepository(db_session_repo)
    _, first_id = repo.create_match(mock_match())
    _, second_id = repo.create_match(mock_match(white_model="x/y"))

    listed = repo.list_matches()
    assert {match_id for match_id, _ in listed} == {first_id, second_id}

    deleted = repo.delete_match(first_id)
    assert deleted is not None
    assert repo.get_match(first_id) is None
    assert [match_id for match_id, _ in repo.list_matches()] == [second_id]
    assert repo.delete_match(first_id) is None


def test_credential_roundtrip(db_session_repo: Session) -> None:
    store = SQLCredentialStore(db_session_repo)
    assert store.load("api_key") is None

    store.save("api_key", "sk-or-v1-secret")
    assert store.load("api_key") == "sk-or-v1-secret"

    # not stored in plain text
    record = db_session_repo.get(DBCredential, "api_key")
    assert record is not None
    assert record.encoded_value != "sk-or-v1-secret"

    store.save("api_key", "another")
    assert store.load("api_key") == "another"

    store.clear("api_key")
    assert store.load("api_key") is None
    # clearing twice is fine
    store.clear("api_key")


def test_corrupt_credential(db_session_repo: Session) -> None:
    db_session_repo.add(DBCredential(name="api_key", encoded_value="%%%not base64"))
    db_session_repo.commit()
    assert SQLCredentialStore(db_session_repo).load("api_key") is None
