import pytest

import api_client
from api_client import (
    ApiError,
    InventoryApiClient,
    build_movement_payload,
    collect_scanned,
    make_client_from_env,
)


class FakeResponse:
    def __init__(self, status_code=200, data=None, text=""):
        self.status_code = status_code
        self._data = data
        self.text = text

    def json(self):
        return self._data


class FakeRequests:
    """Records calls and replays queued responses."""

    def __init__(self, responses, login_token="tok-1"):
        self.responses = list(responses)
        self.calls = []
        self.logins = 0
        self.login_token = login_token

    def post(self, url, data=None, headers=None, timeout=None):
        self.logins += 1
        return FakeResponse(200, {"access_token": f"{self.login_token}-{self.logins}"})

    def request(self, method, url, json=None, params=None, headers=None, timeout=None):
        self.calls.append({"method": method, "url": url, "json": json, "params": params, "headers": headers})
        return self.responses.pop(0)


@pytest.fixture()
def fake(monkeypatch):
    def _install(*responses):
        f = FakeRequests(responses)
        monkeypatch.setattr(api_client.requests, "post", f.post)
        monkeypatch.setattr(api_client.requests, "request", f.request)
        return f

    return _install


def make_client(token=None):
    return InventoryApiClient(base_url="http://api.test/", email="a@b.c", password="pw", token=token)


ITEM = {
    "id": "11111111-1111-1111-1111-111111111111",
    "name": "Laptop 01",
    "asset_tag": "0000000000001",
    "serial_number": "SN-1",
    "holder_location_id": 3,
    "holder_organizer_id": None,
}


class TestRequests:
    def test_logs_in_lazily_and_sends_bearer(self, fake):
        f = fake(FakeResponse(200, []))
        client = make_client()
        assert client.list_categories() == []
        assert f.logins == 1
        assert f.calls[0]["url"] == "http://api.test/inventory/categories/"
        assert f.calls[0]["headers"]["Authorization"] == "Bearer tok-1-1"

    def test_retries_once_after_401(self, fake):
        f = fake(FakeResponse(401, text="expired"), FakeResponse(200, {"ok": True}))
        client = make_client(token="old")
        assert client.analytics() == {"ok": True}
        assert f.logins == 1
        assert len(f.calls) == 2
        assert f.calls[1]["headers"]["Authorization"] == "Bearer tok-1-1"

    def test_gives_up_after_second_401(self, fake):
        f = fake(FakeResponse(401, text="nope"), FakeResponse(401, text="still nope"))
        with pytest.raises(ApiError) as exc:
            make_client(token="old").analytics()
        assert exc.value.status_code == 401
        assert f.logins == 1
        assert len(f.calls) == 2

    def test_errors_raise_api_error(self, fake):
        fake(FakeResponse(409, text="stale holder"))
        with pytest.raises(ApiError) as exc:
            make_client(token="t").create_movement({"item_id": "x"})
        assert exc.value.status_code == 409
        assert "stale holder" in str(exc.value)

    def test_no_content(self, fake):
        fake(FakeResponse(204))
        assert make_client(token="t").delete_movement("abc") is None

    def test_list_items_drops_empty_params(self, fake):
        f = fake(FakeResponse(200, []))
        make_client(token="t").list_items(q="lap", holder="unassigned")
        assert f.calls[0]["params"] == {"q": "lap", "holder": "unassigned"}

    def test_bulk_move_payload(self, fake):
        f = fake(FakeResponse(201, {"moved": 2}))
        result = make_client(token="t").bulk_move(["a", "b"], to_location_id=5)
        assert result == {"moved": 2}
        assert f.calls[0]["url"] == "http://api.test/inventory/movements/bulk"
        assert f.calls[0]["json"]["reason"] == "transfer"
        assert f.calls[0]["json"]["item_ids"] == ["a", "b"]

    def test_bulk_move_requires_items(self):
        with pytest.raises(ValueError):
            make_client(token="t").bulk_move([], to_location_id=5)

    def test_move_item_builds_payload(self, fake):
        f = fake(FakeResponse(201, {"id": "m1"}))
        make_client(token="t").move_item(ITEM, reason="checkout", to_organizer_id="org-1")
        sent = f.calls[0]["json"]
        assert sent["from_location_id"] == 3
        assert sent["to_organizer_id"] == "org-1"


class TestBuildMovementPayload:
    def test_prefills_source_from_holder(self):
        payload = build_movement_payload(ITEM, reason="transfer", to_location_id="7")
        assert payload == {
            "item_id": ITEM["id"],
            "reason": "transfer",
            "from_location_id": 3,
            "from_organizer_id": None,
            "to_location_id": 7,
            "to_organizer_id": None,
            "notes": None,
        }

    def test_unassigned_person_is_dropped(self):
        payload = build_movement_payload(
            ITEM, reason="transfer", to_location_id=7, to_organizer_id="unassigned", notes="  "
        )
        assert payload["to_organizer_id"] is None
        assert payload["notes"] is None

    def test_destination_required(self):
        with pytest.raises(ValueError):
            build_movement_payload(ITEM, reason="transfer", to_location_id="", to_organizer_id="unassigned")

    def test_bad_location_id(self):
        with pytest.raises(ValueError):
            build_movement_payload(ITEM, reason="transfer", to_location_id="shelf")


def test_collect_scanned_dedupes_and_reports_unknown():
    other = dict(ITEM, id="22222222-2222-2222-2222-222222222222", name="Cable", asset_tag="0000000000002")
    found, unknown = collect_scanned([ITEM, other], ["0000000000001", "Cable", "SN-1", "nope"])
    assert [i["id"] for i in found] == [ITEM["id"], other["id"]]
    assert unknown == ["nope"]


class TestMakeClientFromEnv:
    def test_reads_env(self, monkeypatch):
        monkeypatch.setenv("INVENTORY_API_URL", "http://api.test")
        monkeypatch.setenv("INVENTORY_API_EMAIL", "a@b.c")
        monkeypatch.setenv("INVENTORY_API_PASSWORD", "pw")
        monkeypatch.setenv("INVENTORY_API_TOKEN", "")
        client = make_client_from_env()
        assert client.base_url == "http://api.test"
        assert client.token is None

    def test_missing_url(self, monkeypatch):
        monkeypatch.delenv("INVENTORY_API_URL", raising=False)
        with pytest.raises(RuntimeError):
            make_client_from_env()


def test_update_category_and_movement_limit(fake):
    f = fake(FakeResponse(200, {"id": 4, "name": "Kits"}), FakeResponse(200, []))
    client = make_client(token="t")
    assert client.update_category(4, name="Kits")["name"] == "Kits"
    assert f.calls[0]["method"] == "PATCH"
    assert f.calls[0]["url"] == "http://api.test/inventory/categories/4"
    client.list_movements(limit=5)
    assert f.calls[1]["params"] == {"limit": 5}
