"""Tests for the favorite endpoints and the store behind them."""
import pytest

from admissions.models.favorite import Favorite, ItemType
from admissions.services import favorite_store
from admissions.services.errors import AlreadyFavoritedError, InvalidItemTypeError, NotFavoritedError


def _add(client, user_id: str, item_type: str, item_id: str):
    return client.post("/api/favorites/", json={
        "user_id": user_id,
        "item_type": item_type,
        "item_id": item_id,
    })


def _remove(client, user_id: str, item_type: str, item_id: str):
    return client.delete("/api/favorites/", params={
        "user_id": user_id,
        "item_type": item_type,
        "item_id": item_id,
    })


class TestFavoriteToggle:
    """Add / remove semantics through the API."""

    def test_add_favorite(self, client, db):
        resp = _add(client, "u1", "sermon", "s1")
        assert resp.status_code == 201
        assert resp.json() == {}
        assert db.query(Favorite).count() == 1

    def test_add_twice_conflict(self, client, db):
        _add(client, "u1", "event", "e1")
        resp = _add(client, "u1", "event", "e1")
        assert resp.status_code == 409
        assert resp.json()["detail"]["code"] == "ALREADY_FAVORITED"
        assert db.query(Favorite).count() == 1

    def test_same_item_id_different_type_is_distinct(self, client, db):
        assert _add(client, "u1", "sermon", "x1").status_code == 201
        assert _add(client, "u1", "blog", "x1").status_code == 201
        assert db.query(Favorite).count() == 2

    def test_different_users_same_item(self, client):
        assert _add(client, "u1", "ministry", "m1").status_code == 201
        assert _add(client, "u2", "ministry", "m1").status_code == 201

    def test_remove_favorite(self, client, db):
        _add(client, "u1", "blog", "b1")
        resp = _remove(client, "u1", "blog", "b1")
        assert resp.status_code == 200
        assert resp.json() == {}
        assert db.query(Favorite).count() == 0

    def test_remove_twice_fails_cleanly(self, client, db):
        _add(client, "u1", "blog", "b1")
        _add(client, "u1", "blog", "b2")
        assert _remove(client, "u1", "blog", "b1").status_code == 200
        resp = _remove(client, "u1", "blog", "b1")
        assert resp.status_code == 404
        assert resp.json()["detail"]["code"] == "NOT_FAVORITED"
        # the other favorite is untouched
        assert [f.item_id for f in db.query(Favorite).all()] == ["b2"]

    def test_add_remove_add_round_trip(self, client, db):
        _add(client, "u1", "event", "e1")
        _remove(client, "u1", "event", "e1")
        assert _add(client, "u1", "event", "e1").status_code == 201
        rows = db.query(Favorite).all()
        assert [(r.user_id, r.item_type, r.item_id) for r in rows] == [("u1", ItemType.event, "e1")]

    def test_unknown_item_type(self, client, db):
        resp = _add(client, "u1", "podcast", "p1")
        assert resp.status_code == 400
        assert resp.json()["detail"]["code"] == "INVALID_ITEM_TYPE"
        assert db.query(Favorite).count() == 0


class TestFavoriteListing:
    """Listing and purge."""

    def test_list_all_types(self, client):
        _add(client, "u1", "sermon", "s1")
        _add(client, "u1", "event", "e1")
        _add(client, "u2", "event", "e2")
        resp = client.get("/api/favorites/", params={"user_id": "u1"})
        assert resp.status_code == 200
        data = resp.json()
        assert sorted(data["item_ids"]) == ["e1", "s1"]
        assert {f["item_type"] for f in data["favorites"]} == {"sermon", "event"}

    def test_list_filtered_by_type(self, client):
        _add(client, "u1", "sermon", "s1")
        _add(client, "u1", "sermon", "s2")
        _add(client, "u1", "event", "e1")
        resp = client.get("/api/favorites/", params={"user_id": "u1", "item_type": "sermon"})
        assert sorted(resp.json()["item_ids"]) == ["s1", "s2"]

    def test_list_unknown_type(self, client):
        resp = client.get("/api/favorites/", params={"user_id": "u1", "item_type": "nope"})
        assert resp.status_code == 400

    def test_list_empty(self, client):
        assert client.get("/api/favorites/", params={"user_id": "nobody"}).json()["item_ids"] == []

    def test_purge_item(self, client, db):
        _add(client, "u1", "sermon", "s1")
        _add(client, "u2", "sermon", "s1")
        _add(client, "u1", "sermon", "s2")
        _add(client, "u1", "blog", "s1")
        resp = client.delete("/api/favorites/items/sermon/s1")
        assert resp.status_code == 200
        assert resp.json() == {"item_type": "sermon", "item_id": "s1", "removed": 2}
        remaining = sorted((f.item_type.value, f.item_id) for f in db.query(Favorite).all())
        assert remaining == [("blog", "s1"), ("sermon", "s2")]


class TestFavoriteStoreDirect:
    """Service-level checks."""

    def test_favorited_item_ids(self, db):
        favorite_store.add(db, "u1", "event", "e1")
        favorite_store.add(db, "u1", ItemType.event, "e2")
        favorite_store.add(db, "u1", "ministry", "m1")
        assert favorite_store.favorited_item_ids(db, "u1", "event") == {"e1", "e2"}
        assert favorite_store.favorited_item_ids(db, "u1") == {"e1", "e2", "m1"}

    def test_errors_are_typed(self, db):
        favorite_store.add(db, "u1", "sermon", "s1")
        with pytest.raises(AlreadyFavoritedError):
            favorite_store.add(db, "u1", "sermon", "s1")
        favorite_store.remove(db, "u1", "sermon", "s1")
        with pytest.raises(NotFavoritedError):
            favorite_store.remove(db, "u1", "sermon", "s1")
        with pytest.raises(InvalidItemTypeError):
            favorite_store.add(db, "u1", "video", "v1")

    def test_unique_constraint_catches_missed_precheck(self, db, monkeypatch):
        favorite_store.add(db, "u1", "blog", "b1")
        monkeypatch.setattr(favorite_store, "_find", lambda *a, **kw: None)
        with pytest.raises(AlreadyFavoritedError):
            favorite_store.add(db, "u1", "blog", "b1")
        assert db.query(Favorite).count() == 1

    def test_committed_add_is_not_retried_as_duplicate(self, db, monkeypatch):
        from sqlalchemy.exc import OperationalError

        def _failing_refresh(instance, *args, **kwargs):
            raise OperationalError("SELECT favorites ...", {}, Exception("database is locked"))

        monkeypatch.setattr(db, "refresh", _failing_refresh)
        with pytest.raises(OperationalError):
            favorite_store.add(db, "u1", "sermon", "s9")
        monkeypatch.undo()

        assert favorite_store.favorited_item_ids(db, "u1") == {"s9"}
        assert db.query(Favorite).count() == 1
