"""HTTP-level tests for registration, profiles and photo upload."""
from datetime import date

import pytest

import heart.api.users as users_api


def _birthdate_for_age(age):
    """A birthday already passed this year, so the age is exactly ``age``."""
    return date(date.today().year - age, 1, 1)


class TestRegister:

    @pytest.mark.asyncio
    async def test_register_returns_user_id(self, client):
        resp = await client.post(
            "/register",
            json={"email": "Ana@Example.com", "username": "ana", "gender": "female"},
        )
        assert resp.status_code == 201
        user_id = resp.json()["userId"]

        me = await client.get("/me", params={"userId": user_id})
        assert me.status_code == 200
        assert me.json()["email"] == "ana@example.com"
        assert me.json()["username"] == "ana"

    @pytest.mark.asyncio
    async def test_duplicate_email_is_409(self, client):
        await client.post("/register", json={"email": "a@example.com", "username": "a"})
        resp = await client.post("/register", json={"email": "a@example.com", "username": "b"})
        assert resp.status_code == 409

    @pytest.mark.asyncio
    async def test_duplicate_username_is_409(self, client):
        await client.post("/register", json={"email": "a@example.com", "username": "a"})
        resp = await client.post("/register", json={"email": "b@example.com", "username": "a"})
        assert resp.status_code == 409

    @pytest.mark.asyncio
    async def test_missing_username_is_400(self, client):
        resp = await client.post("/register", json={"email": "a@example.com"})
        assert resp.status_code == 400


class TestMe:

    @pytest.mark.asyncio
    async def test_unknown_user_is_404(self, client):
        resp = await client.get("/me", params={"userId": 12345})
        assert resp.status_code == 404


class TestProfiles:

    @pytest.mark.asyncio
    async def test_excludes_self_and_swiped(self, client, make_user):
        for uid in (1, 2, 3, 4):
            await make_user(uid)
        await client.post("/swipe", json={"swiperId": 1, "targetId": 2, "direction": "left"})
        await client.post("/swipe", json={"swiperId": 1, "targetId": 3, "direction": "right"})

        resp = await client.get("/profiles", params={"userId": 1})

        assert resp.status_code == 200
        assert [p["id"] for p in resp.json()] == [4]

    @pytest.mark.asyncio
    async def test_filters(self, client, make_user):
        await make_user(1)
        await make_user(2, gender="female", location="Antwerpen", birthdate=_birthdate_for_age(25))
        await make_user(3, gender="female", location="Gent", birthdate=_birthdate_for_age(40))
        await make_user(4, gender="male", location="Antwerpen", birthdate=_birthdate_for_age(25))

        resp = await client.get(
            "/profiles",
            params={"userId": 1, "gender": "female", "min_age": 20, "max_age": 30},
        )
        assert [p["id"] for p in resp.json()] == [2]

        resp = await client.get("/profiles", params={"userId": 1, "location": "twerp"})
        assert sorted(p["id"] for p in resp.json()) == [2, 4]

    @pytest.mark.asyncio
    async def test_page_size_cap(self, client, make_user, monkeypatch):
        for uid in range(1, 6):
            await make_user(uid)
        settings = users_api.get_settings()
        monkeypatch.setattr(settings, "PROFILE_PAGE_SIZE", 2)

        resp = await client.get("/profiles", params={"userId": 1})
        assert len(resp.json()) == 2


class TestUpdateProfile:

    @pytest.mark.asyncio
    async def test_updates_supplied_fields_only(self, client, make_user):
        await make_user(1, bio="old", location="Gent")
        resp = await client.put("/update-profile", json={"userId": 1, "bio": "new"})
        assert resp.status_code == 200
        assert resp.json()["bio"] == "new"
        assert resp.json()["location"] == "Gent"

    @pytest.mark.asyncio
    async def test_no_fields_is_400(self, client, make_user):
        await make_user(1)
        resp = await client.put("/update-profile", json={"userId": 1})
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_user_is_404(self, client):
        resp = await client.put("/update-profile", json={"userId": 99, "bio": "x"})
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_username_collision_is_409(self, client, make_user):
        await make_user(1)
        await make_user(2)
        resp = await client.put("/update-profile", json={"userId": 1, "username": "user2"})
        assert resp.status_code == 409

    @pytest.mark.asyncio
    async def test_null_username_is_400(self, client, make_user):
        await make_user(1)
        resp = await client.put("/update-profile", json={"userId": 1, "username": None})
        assert resp.status_code == 400

        me = await client.get("/me", params={"userId": 1})
        assert me.json()["username"] == "user1"

    @pytest.mark.asyncio
    async def test_null_optional_field_clears_it(self, client, make_user):
        await make_user(1, bio="old")
        resp = await client.put("/update-profile", json={"userId": 1, "bio": None})
        assert resp.status_code == 200
        assert resp.json()["bio"] is None


class TestUploadPhoto:

    @pytest.fixture
    def stored(self, monkeypatch):
        calls = []

        def fake_store_blob(data, content_type):
            calls.append((data, content_type))
            return "abc123.png"

        monkeypatch.setattr(users_api, "store_blob", fake_store_blob)
        return calls

    @pytest.mark.asyncio
    async def test_reference_saved_on_user(self, client, make_user, stored):
        await make_user(1)
        resp = await client.post(
            "/upload-photo",
            data={"userId": "1"},
            files={"file": ("me.png", b"\x89PNG data", "image/png")},
        )
        assert resp.status_code == 201
        assert resp.json() == {"photo": "abc123.png", "url": "/images/abc123.png"}
        assert stored == [(b"\x89PNG data", "image/png")]

        me = await client.get("/me", params={"userId": 1})
        assert me.json()["photo"] == "abc123.png"

    @pytest.mark.asyncio
    async def test_unsupported_type_is_400(self, client, make_user, stored):
        await make_user(1)
        resp = await client.post(
            "/upload-photo",
            data={"userId": "1"},
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )
        assert resp.status_code == 400
        assert stored == []

    @pytest.mark.asyncio
    async def test_oversize_is_400(self, client, make_user, stored, monkeypatch):
        await make_user(1)
        monkeypatch.setattr(users_api.get_settings(), "PHOTO_MAX_BYTES", 4)
        resp = await client.post(
            "/upload-photo",
            data={"userId": "1"},
            files={"file": ("big.png", b"12345", "image/png")},
        )
        assert resp.status_code == 400
        assert stored == []

    @pytest.mark.asyncio
    async def test_unknown_user_is_404(self, client, stored):
        resp = await client.post(
            "/upload-photo",
            data={"userId": "77"},
            files={"file": ("me.png", b"data", "image/png")},
        )
        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_store_failure_is_500_and_keeps_old_photo(self, client, make_user, monkeypatch):
        await make_user(1, photo="old.png")

        def broken_store_blob(data, content_type):
            raise OSError("No space left on device: '/srv/media'")

        monkeypatch.setattr(users_api, "store_blob", broken_store_blob)
        resp = await client.post(
            "/upload-photo",
            data={"userId": "1"},
            files={"file": ("me.png", b"\x89PNG data", "image/png")},
        )

        assert resp.status_code == 500
        assert resp.json() == {"detail": "Photo storage temporarily unavailable, please retry."}
        me = await client.get("/me", params={"userId": 1})
        assert me.json()["photo"] == "old.png"
