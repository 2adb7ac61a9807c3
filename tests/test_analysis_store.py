import pytest

from analysis_store import AnalysisStore
from database import build_engine, build_session_factory, init_db, session_scope
from errors import StorageError
from models import User
from schemas import AnalysisResult, Attachment, ContractType

from conftest import sample_analysis


@pytest.fixture
def analysis():
    return AnalysisResult.model_validate({**sample_analysis(), "aiModel": "test-model"})


@pytest.fixture
def attachment():
    return Attachment(file_name="contract.pdf", file_url="https://files.example.com/contracts/contract.pdf")


def test_save_then_find_by_id_round_trips(store, analysis, attachment):
    saved = store.save("user_1", ContractType.EMPLOYMENT, "Employee shall work 40 hours.", attachment, analysis)

    fetched = store.find_by_id(saved.id)

    assert fetched is not None
    assert fetched.model_dump(exclude={"created_at"}) == saved.model_dump(exclude={"created_at"})
    assert fetched.model_dump(include=set(AnalysisResult.model_fields)) == analysis.model_dump()
    assert fetched.user_id == "user_1"
    assert fetched.contract_type is ContractType.EMPLOYMENT
    assert fetched.contract_text == "Employee shall work 40 hours."
    assert fetched.attachments == [attachment]
    assert fetched.created_at.tzinfo is not None


def test_save_assigns_distinct_ids(store, analysis, attachment):
    first = store.save("user_1", ContractType.LEASE, "Text", attachment, analysis)
    second = store.save("user_1", ContractType.LEASE, "Text", attachment, analysis)

    assert first.id != second.id


def test_find_by_id_unknown_returns_none(store):
    assert store.find_by_id("does-not-exist") is None


def test_find_by_owner_filters_on_user(store, analysis, attachment):
    store.save("user_1", ContractType.LEASE, "Text one", attachment, analysis)
    store.save("user_2", ContractType.NDA, "Text two", attachment, analysis)
    store.save("user_1", ContractType.SALES, "Text three", attachment, analysis)

    records = store.find_by_owner("user_1")

    assert len(records) == 2
    assert {record.user_id for record in records} == {"user_1"}
    assert store.find_by_owner("nobody") == []


def test_list_with_owner_names_uses_users_table(store, session_factory, analysis, attachment):
    with session_scope(session_factory) as session:
        session.add(User(id="user_1", username="jdoe"))
    store.save("user_1", ContractType.LEASE, "Text", attachment, analysis)
    store.save("user_2", ContractType.NDA, "Text", attachment, analysis)

    owners = {record.user_id: record.owner_name for record in store.list_with_owner_names()}

    assert owners == {"user_1": "jdoe", "user_2": "Unknown"}


def test_list_with_owner_names_survives_lookup_failure(session_factory, analysis, attachment):
    def broken_lookup(user_id):
        raise RuntimeError("identity provider down")

    store = AnalysisStore(session_factory=session_factory, user_lookup=broken_lookup)
    store.save("user_1", ContractType.LEASE, "Text", attachment, analysis)

    records = store.list_with_owner_names()

    assert len(records) == 1
    assert records[0].owner_name == "Unknown"


def test_failed_save_leaves_nothing_and_retry_succeeds(tmp_path, analysis, attachment):
    engine = build_engine(f"sqlite:///{tmp_path / 'unregistered.db'}")
    store = AnalysisStore(session_factory=build_session_factory(engine))

    with pytest.raises(StorageError) as exc_info:
        store.save("user_1", ContractType.LEASE, "Text", attachment, analysis)
    assert exc_info.value.retryable is True

    init_db(engine)
    assert store.find_by_owner("user_1") == []

    saved = store.save("user_1", ContractType.LEASE, "Text", attachment, analysis)
    assert [record.id for record in store.find_by_owner("user_1")] == [saved.id]
    engine.dispose()


def test_save_rejects_blank_contract_text(store, analysis, attachment):
    with pytest.raises(StorageError):
        store.save("user_1", ContractType.LEASE, "   ", attachment, analysis)

    assert store.list_with_owner_names() == []
