import json

import pytest

from railbook.store import JsonStore, TicketIndexError, UserExistsError, UserNotFoundError

TICKET = {
    "from": "台北",
    "to": "台中",
    "date": "2099-01-01",
    "time": "00:00 → 01:22",
    "price": 148,
    "pay": "Line Pay",
    "seatClass": "一般座",
}


@pytest.fixture
def store(tmp_path):
    return JsonStore(tmp_path / "data" / "db.json")


def test_missing_file_reads_as_empty(store) -> None:
    assert store.get_all() == {"users": {}, "tickets": {}}
    assert store.get_user("A123456789") is None
    assert store.get_tickets("A123456789") == []
    assert not store.path.exists()


def test_create_user_writes_document(store) -> None:
    store.create_user("A123456789", "admin123")

    assert store.exists_user("A123456789")
    assert store.get_user("A123456789") == {"password": "admin123", "blocked": False}
    on_disk = json.loads(store.path.read_text(encoding="utf-8"))
    assert on_disk == {
        "users": {"A123456789": {"password": "admin123", "blocked": False}},
        "tickets": {"A123456789": []},
    }


def test_duplicate_user_is_rejected(store) -> None:
    store.create_user("A123456789", "admin123")
    with pytest.raises(UserExistsError):
        store.create_user("A123456789", "other123")
    assert store.get_user("A123456789")["password"] == "admin123"


def test_block_and_unblock(store) -> None:
    store.create_user("F131104093", "rider99")
    store.block_user("F131104093")
    assert store.get_user("F131104093")["blocked"] is True
    store.unblock_user("F131104093")
    assert store.get_user("F131104093")["blocked"] is False

    with pytest.raises(UserNotFoundError):
        store.block_user("Z999999999")


def test_tickets_round_trip_keeps_chinese_text(store) -> None:
    store.create_user("F131104093", "rider99")
    store.add_ticket("F131104093", TICKET)
    store.add_ticket("F131104093", {**TICKET, "to": "高雄"})

    assert [t["to"] for t in store.get_tickets("F131104093")] == ["台中", "高雄"]
    assert "台北" in store.path.read_text(encoding="utf-8")

    removed = store.remove_ticket("F131104093", 0)
    assert removed["to"] == "台中"
    assert [t["to"] for t in store.get_tickets("F131104093")] == ["高雄"]


def test_ticket_for_unknown_user(store) -> None:
    with pytest.raises(UserNotFoundError):
        store.add_ticket("F131104093", TICKET)
    with pytest.raises(UserNotFoundError):
        store.remove_ticket("F131104093", 0)


@pytest.mark.parametrize("index", [-1, 1, 5])
def test_remove_ticket_out_of_range(store, index) -> None:
    store.create_user("F131104093", "rider99")
    store.add_ticket("F131104093", TICKET)
    with pytest.raises(TicketIndexError):
        store.remove_ticket("F131104093", index)
    assert len(store.get_tickets("F131104093")) == 1


def test_corrupt_file_falls_back_to_empty(store) -> None:
    store.path.parent.mkdir(parents=True)
    store.path.write_text("{not json", encoding="utf-8")
    assert store.get_all() == {"users": {}, "tickets": {}}

    store.create_user("A123456789", "admin123")
    assert json.loads(store.path.read_text(encoding="utf-8"))["users"]


def test_document_missing_tickets_key(store) -> None:
    store.path.parent.mkdir(parents=True)
    store.path.write_text(json.dumps({"users": {"A123456789": {"password": "x", "blocked": False}}}), encoding="utf-8")

    assert store.get_tickets("A123456789") == []
    store.add_ticket("A123456789", TICKET)
    assert len(store.get_tickets("A123456789")) == 1
