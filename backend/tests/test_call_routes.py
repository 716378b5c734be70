"""
CallBoard Backend — Call Endpoint Tests
=========================================

What:  REST contract of every /call endpoint against the real app and a
       throwaway SQLite database, with the image host mocked.
"""

import uuid

import pytest

from app.database import async_session_factory
from app.models.call import Call
from conftest import call_form, image_files, make_oversized_png, make_png


async def _post_call(client, headers, png_bytes, **overrides):
    return await client.post(
        "/call",
        headers=headers,
        data=call_form(**overrides),
        files=image_files(png_bytes),
    )


async def _second_user_headers(login_user):
    body = await login_user("other@email.com")
    return {"Authorization": f"Bearer {body['token']}"}


class TestPostCall:

    @pytest.mark.asyncio
    async def test_post_call(self, test_client, auth_headers, image_host, png_bytes):
        response = await test_client.post(
            "/call",
            headers=auth_headers,
            data=call_form(),
            files=image_files(png_bytes, make_png("blue")),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["title"] == "Laptop"
        assert body["description"] == "Barely used, charger included"
        assert body["category"] == "electronics"
        assert body["price"] == 1200
        assert body["imageUrls"] == ["https://images.test/i/1.png", "https://images.test/i/2.png"]
        uuid.UUID(body["id"])
        uuid.UUID(body["userId"])
        assert image_host.upload_count == 2

    @pytest.mark.asyncio
    async def test_post_call_appears_in_own_calls(self, test_client, auth_headers, png_bytes):
        created = (await _post_call(test_client, auth_headers, png_bytes)).json()

        response = await test_client.get("/call/own", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"calls": [created]}

    @pytest.mark.asyncio
    async def test_requires_token(self, test_client, png_bytes):
        response = await test_client.post("/call", data=call_form(), files=image_files(png_bytes))

        assert response.status_code == 400
        assert response.json()["message"] == "No token provided"

    @pytest.mark.asyncio
    async def test_missing_field(self, test_client, auth_headers, image_host, png_bytes):
        response = await test_client.post(
            "/call",
            headers=auth_headers,
            data=call_form(title=None),
            files=image_files(png_bytes),
        )

        assert response.status_code == 400
        assert response.json()["message"] == '"title" is required'
        assert image_host.upload_count == 0

    @pytest.mark.asyncio
    async def test_unknown_category(self, test_client, auth_headers, png_bytes):
        response = await _post_call(test_client, auth_headers, png_bytes, category="cars")

        assert response.status_code == 400
        assert response.json()["message"].startswith('"category" must be one of')

    @pytest.mark.asyncio
    async def test_price_not_a_number(self, test_client, auth_headers, png_bytes):
        response = await _post_call(test_client, auth_headers, png_bytes, price="cheap")

        assert response.status_code == 400
        assert response.json()["message"] == '"price" must be a number'

    @pytest.mark.asyncio
    async def test_no_images(self, test_client, auth_headers, image_host):
        response = await test_client.post("/call", headers=auth_headers, data=call_form())

        assert response.status_code == 400
        assert response.json()["message"] == "No images provided"

    @pytest.mark.asyncio
    async def test_too_many_images(self, test_client, auth_headers, image_host, png_bytes):
        response = await test_client.post(
            "/call",
            headers=auth_headers,
            data=call_form(),
            files=image_files(*([png_bytes] * 6)),
        )

        assert response.status_code == 400
        assert "5" in response.json()["message"]
        assert image_host.upload_count == 0

    @pytest.mark.asyncio
    async def test_five_images_allowed(self, test_client, auth_headers, png_bytes):
        response = await test_client.post(
            "/call",
            headers=auth_headers,
            data=call_form(),
            files=image_files(*([png_bytes] * 5)),
        )

        assert response.status_code == 201
        assert len(response.json()["imageUrls"]) == 5

    @pytest.mark.asyncio
    async def test_non_image_file(self, test_client, auth_headers, image_host, png_bytes, text_bytes):
        files = image_files(png_bytes) + [("file", ("notes.txt", text_bytes, "text/plain"))]
        response = await test_client.post(
            "/call", headers=auth_headers, data=call_form(), files=files
        )

        assert response.status_code == 415
        assert response.json()["message"] == "Only image files are allowed"
        assert image_host.upload_count == 0

    @pytest.mark.asyncio
    async def test_oversized_dimensions(self, test_client, auth_headers, image_host, png_bytes):
        response = await test_client.post(
            "/call",
            headers=auth_headers,
            data=call_form(),
            files=image_files(png_bytes, make_oversized_png()),
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Image dimensions are too large"
        assert image_host.upload_count == 0

    @pytest.mark.asyncio
    async def test_free_category_must_be_free(self, test_client, auth_headers, image_host, png_bytes):
        response = await _post_call(
            test_client, auth_headers, png_bytes, category="free", price="10"
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Can't set price for free category. Must be 0"
        assert image_host.upload_count == 0

    @pytest.mark.asyncio
    async def test_free_category_with_zero_price(self, test_client, auth_headers, png_bytes):
        response = await _post_call(
            test_client, auth_headers, png_bytes, category="free", price="0"
        )

        assert response.status_code == 201
        assert response.json()["price"] == 0

    @pytest.mark.asyncio
    async def test_image_host_down(self, test_client, auth_headers, image_host, png_bytes):
        image_host.always_fail_with = 503

        response = await _post_call(test_client, auth_headers, png_bytes)

        assert response.status_code == 503
        assert response.json()["error"] == "image_host_unavailable"
        own = (await test_client.get("/call/own", headers=auth_headers)).json()
        assert own == {"calls": []}


class TestFavourites:

    @pytest.mark.asyncio
    async def test_add_and_list(self, test_client, auth_headers, png_bytes):
        call = (await _post_call(test_client, auth_headers, png_bytes)).json()

        response = await test_client.post(f"/call/favourite/{call['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"newFavourites": [call]}
        listed = await test_client.get("/call/favourites", headers=auth_headers)
        assert listed.json() == {"favourites": [call]}

    @pytest.mark.asyncio
    async def test_add_twice(self, test_client, auth_headers, png_bytes):
        call = (await _post_call(test_client, auth_headers, png_bytes)).json()
        await test_client.post(f"/call/favourite/{call['id']}", headers=auth_headers)

        response = await test_client.post(f"/call/favourite/{call['id']}", headers=auth_headers)

        assert response.status_code == 403
        assert response.json()["message"] == "Already in favourites"

    @pytest.mark.asyncio
    async def test_add_unknown_call(self, test_client, auth_headers):
        response = await test_client.post(f"/call/favourite/{uuid.uuid4()}", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Call not found"

    @pytest.mark.asyncio
    async def test_malformed_call_id(self, test_client, auth_headers):
        response = await test_client.post("/call/favourite/not-an-id", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid 'callId'. Must be a UUID"

    @pytest.mark.asyncio
    async def test_remove(self, test_client, auth_headers, png_bytes):
        call = (await _post_call(test_client, auth_headers, png_bytes)).json()
        await test_client.post(f"/call/favourite/{call['id']}", headers=auth_headers)

        response = await test_client.delete(f"/call/favourite/{call['id']}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {"newFavourites": []}

    @pytest.mark.asyncio
    async def test_remove_not_favourited(self, test_client, auth_headers, png_bytes):
        call = (await _post_call(test_client, auth_headers, png_bytes)).json()

        response = await test_client.delete(f"/call/favourite/{call['id']}", headers=auth_headers)

        assert response.status_code == 403
        assert response.json()["message"] == "Not in favourites"

    @pytest.mark.asyncio
    async def test_remove_unknown_call(self, test_client, auth_headers):
        response = await test_client.delete(
            f"/call/favourite/{uuid.uuid4()}", headers=auth_headers
        )

        assert response.status_code == 404
        assert response.json()["message"] == "Call not found"


class TestDeleteCall:

    @pytest.mark.asyncio
    async def test_delete_own_call(self, test_client, auth_headers, png_bytes):
        call = (await _post_call(test_client, auth_headers, png_bytes)).json()
        await test_client.post(f"/call/favourite/{call['id']}", headers=auth_headers)

        response = await test_client.delete(f"/call/{call['id']}", headers=auth_headers)

        assert response.status_code == 204
        profile = (await test_client.get("/user", headers=auth_headers)).json()
        assert profile["calls"] == []
        assert profile["favourites"] == []
        exists = await test_client.get(f"/call/exists/{call['id']}")
        assert exists.json() == {"success": False}

    @pytest.mark.asyncio
    async def test_cannot_delete_someone_elses_call(
        self, test_client, auth_headers, login_user, png_bytes
    ):
        call = (await _post_call(test_client, auth_headers, png_bytes)).json()
        other = await _second_user_headers(login_user)

        response = await test_client.delete(f"/call/{call['id']}", headers=other)

        assert response.status_code == 404
        assert response.json()["message"] == "Call not found"
        exists = await test_client.get(f"/call/exists/{call['id']}")
        assert exists.json() == {"success": True}

    @pytest.mark.asyncio
    async def test_other_users_keep_their_favourite_snapshot(
        self, test_client, auth_headers, login_user, png_bytes
    ):
        call = (await _post_call(test_client, auth_headers, png_bytes)).json()
        other = await _second_user_headers(login_user)
        await test_client.post(f"/call/favourite/{call['id']}", headers=other)

        await test_client.delete(f"/call/{call['id']}", headers=auth_headers)

        favourites = (await test_client.get("/call/favourites", headers=other)).json()
        assert favourites == {"favourites": [call]}

    @pytest.mark.asyncio
    async def test_delete_unknown_call(self, test_client, auth_headers):
        response = await test_client.delete(f"/call/{uuid.uuid4()}", headers=auth_headers)

        assert response.status_code == 404


class TestBrowsing:

    @pytest.mark.asyncio
    async def test_page_one(self, test_client, auth_headers, png_bytes):
        laptop = (await _post_call(test_client, auth_headers, png_bytes)).json()
        flat = (
            await _post_call(
                test_client, auth_headers, png_bytes, title="Flat", category="property"
            )
        ).json()
        await _post_call(test_client, auth_headers, png_bytes, title="Job", category="work")

        response = await test_client.get("/call", params={"page": 1})

        assert response.status_code == 200
        assert response.json() == {"electronics": [laptop], "property": [flat]}

    @pytest.mark.asyncio
    async def test_page_three_keys(self, test_client):
        response = await test_client.get("/call", params={"page": 3})

        assert response.status_code == 200
        assert response.json() == {"businessAndServices": [], "recreationAndSport": []}

    @pytest.mark.asyncio
    async def test_page_out_of_range(self, test_client):
        response = await test_client.get("/call", params={"page": 4})

        assert response.status_code == 400
        assert response.json()["message"] == '"page" must be less than or equal to 3'

    @pytest.mark.asyncio
    async def test_page_required(self, test_client):
        response = await test_client.get("/call")

        assert response.status_code == 400
        assert response.json()["message"] == '"page" is required'

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive(self, test_client, auth_headers, png_bytes):
        laptop = (
            await _post_call(test_client, auth_headers, png_bytes, title="Gaming LAPTOP")
        ).json()
        await _post_call(test_client, auth_headers, png_bytes, title="Bicycle")

        response = await test_client.get("/call/find", params={"search": "laptop"})

        assert response.status_code == 200
        assert response.json() == [laptop]

    @pytest.mark.asyncio
    async def test_search_treats_wildcards_literally(self, test_client, auth_headers, png_bytes):
        await _post_call(test_client, auth_headers, png_bytes, title="Laptop")
        discount = (
            await _post_call(test_client, auth_headers, png_bytes, title="Phone 50% off")
        ).json()

        response = await test_client.get("/call/find", params={"search": "50%"})

        assert response.json() == [discount]

    @pytest.mark.asyncio
    async def test_search_requires_term(self, test_client):
        response = await test_client.get("/call/find")

        assert response.status_code == 400
        assert response.json()["message"] == '"search" is required'

    @pytest.mark.asyncio
    async def test_categories(self, test_client):
        response = await test_client.get("/call/categories")

        assert response.json() == [
            "property",
            "transport",
            "work",
            "electronics",
            "businessAndServices",
            "recreationAndSport",
            "free",
            "trade",
        ]

    @pytest.mark.asyncio
    async def test_russian_categories(self, test_client):
        response = await test_client.get("/call/russian-categories")

        assert response.status_code == 200
        assert response.json()[0] == "Недвижимость"
        assert len(response.json()) == 8

    @pytest.mark.asyncio
    async def test_specific_category(self, test_client, auth_headers, png_bytes):
        flat = (
            await _post_call(test_client, auth_headers, png_bytes, category="property")
        ).json()

        response = await test_client.get("/call/specific/property")

        assert response.status_code == 200
        assert response.json() == [flat]

    @pytest.mark.asyncio
    async def test_specific_category_empty(self, test_client):
        response = await test_client.get("/call/specific/trade")

        assert response.status_code == 404
        assert response.json()["message"] == "No calls found"

    @pytest.mark.asyncio
    async def test_specific_category_includes_legacy_spelling(
        self, test_client, register_user, auth_headers, png_bytes
    ):
        current = (
            await _post_call(
                test_client, auth_headers, png_bytes, category="businessAndServices"
            )
        ).json()
        async with async_session_factory() as session:
            session.add(
                Call(
                    title="Old listing",
                    description="Stored before the category rename",
                    category="business and services",
                    price=5,
                    image_urls=[],
                    user_id=uuid.UUID(current["userId"]),
                )
            )
            await session.commit()

        response = await test_client.get("/call/specific/businessAndServices")

        assert response.status_code == 200
        titles = [call["title"] for call in response.json()]
        assert titles == ["Laptop", "Old listing"]

    @pytest.mark.asyncio
    async def test_ads(self, test_client):
        response = await test_client.get("/call/ads")

        assert response.status_code == 200
        assert all(set(ad) == {"title", "imageUrl", "link"} for ad in response.json())

    @pytest.mark.asyncio
    async def test_exists(self, test_client, auth_headers, png_bytes):
        call = (await _post_call(test_client, auth_headers, png_bytes)).json()

        found = await test_client.get(f"/call/exists/{call['id']}")
        missing = await test_client.get(f"/call/exists/{uuid.uuid4()}")

        assert found.json() == {"success": True}
        assert missing.json() == {"success": False}


class TestHealth:

    @pytest.mark.asyncio
    async def test_health(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["image_host"] == "configured"
