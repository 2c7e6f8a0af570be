"""Tests for the public menu and the administrator meal catalog."""

import pytest
from sqlalchemy import select

from menu_app.models import Comment, Meal
from menu_app.services.meals import MEAL_EXISTS, MEAL_IMAGE_REQUIRED, MEAL_MISSING_FIELDS

from helpers import meal_form_data, png_upload


async def load_meal(session_maker, meal_id):
    async with session_maker() as session:
        return await session.get(Meal, meal_id)


async def meal_named(session_maker, name):
    async with session_maker() as session:
        return await session.scalar(select(Meal).where(Meal.name == name))


# =============================================================================
# PUBLIC MENU
# =============================================================================

@pytest.mark.asyncio
async def test_home_page_renders_for_anonymous_user(client):
    response = await client.get("/")

    assert response.status_code == 200
    assert "The Spice Route" in response.text


@pytest.mark.asyncio
async def test_menu_lists_meals_in_insertion_order(client, make_meal):
    await make_meal("Lamb Rogan Josh")
    await make_meal("Chana Masala", image=None)

    response = await client.get("/menu")

    assert response.status_code == 200
    assert response.text.index("Lamb Rogan Josh") < response.text.index("Chana Masala")


@pytest.mark.asyncio
async def test_empty_menu(client):
    response = await client.get("/menu")

    assert response.status_code == 200
    assert "The menu is empty for now." in response.text


@pytest.mark.asyncio
async def test_meal_page_shows_details(client, make_meal):
    meal = await make_meal()

    response = await client.get(f"/menu/meal/{meal.id}")

    assert response.status_code == 200
    assert meal.name in response.text
    assert "lamb, yoghurt, kashmiri chilli" in response.text
    assert 'src="/uploads/rogan-josh.png"' in response.text
    assert "Log in</a> to leave a comment" in response.text


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "path",
    [
        "/menu/meal/9999",
        "/menu/meal/not-a-number",
        "/menu/meal/0",
        "/menu/meal/99999999999999999999999",
        "/meals/not-a-number",
        "/meals/99999999999999999999999",
        "/meals/99999999999999999999999/edit",
    ],
)
async def test_unknown_meal_is_not_found(client, admin, path):
    response = await client.get(path)

    assert response.status_code == 404
    assert "Not found" in response.text


# =============================================================================
# CREATE
# =============================================================================

@pytest.mark.asyncio
async def test_admin_creates_meal_with_image(client, admin, session_maker, image_storage):
    response = await client.post("/meals/create", data=meal_form_data(), files=png_upload())

    assert response.status_code == 303
    assert response.headers["location"] == "/meals"

    meal = await meal_named(session_maker, "Paneer Butter Masala")
    assert meal.allergens == "dairy"
    assert meal.meal_image.startswith("/uploads/")
    stored = list(image_storage.directory.iterdir())
    assert len(stored) == 1
    assert meal.meal_image == f"/uploads/{stored[0].name}"


@pytest.mark.asyncio
async def test_optional_fields_may_be_blank(client, admin, session_maker):
    data = meal_form_data(spice_level="", category="", cuisine="", dish_type="")

    response = await client.post("/meals/create", data=data, files=png_upload())

    assert response.status_code == 303
    meal = await meal_named(session_maker, "Paneer Butter Masala")
    assert meal.spice_level is None
    assert meal.cuisine is None


@pytest.mark.asyncio
@pytest.mark.parametrize("missing", ["name", "ingredients", "allergens"])
async def test_create_requires_core_fields(client, admin, image_storage, missing):
    response = await client.post(
        "/meals/create", data=meal_form_data(**{missing: "   "}), files=png_upload()
    )

    assert response.status_code == 400
    assert MEAL_MISSING_FIELDS in response.text
    assert list(image_storage.directory.iterdir()) == []


@pytest.mark.asyncio
async def test_duplicate_name_is_rejected_without_upload(client, admin, make_meal, image_storage):
    await make_meal("Paneer Butter Masala")

    response = await client.post("/meals/create", data=meal_form_data(), files=png_upload())

    assert response.status_code == 400
    assert MEAL_EXISTS in response.text
    assert list(image_storage.directory.iterdir()) == []


@pytest.mark.asyncio
async def test_create_requires_image(client, admin, session_maker):
    response = await client.post("/meals/create", data=meal_form_data())

    assert response.status_code == 400
    assert MEAL_IMAGE_REQUIRED in response.text
    assert 'value="Paneer Butter Masala"' in response.text
    assert await meal_named(session_maker, "Paneer Butter Masala") is None


@pytest.mark.asyncio
async def test_create_rejects_non_image_upload(client, admin, session_maker):
    files = {"meal_image": ("menu.txt", b"not an image", "text/plain")}

    response = await client.post("/meals/create", data=meal_form_data(), files=files)

    assert response.status_code == 400
    assert "Invalid file type" in response.text
    assert await meal_named(session_maker, "Paneer Butter Masala") is None


# =============================================================================
# ADMIN LIST / DETAIL
# =============================================================================

@pytest.mark.asyncio
async def test_admin_listing_and_detail(client, admin, make_meal):
    meal = await make_meal()

    listing = await client.get("/meals")
    detail = await client.get(f"/meals/{meal.id}")

    assert meal.name in listing.text
    assert f"/meals/{meal.id}/edit" in listing.text
    assert detail.status_code == 200
    assert "kashmiri chilli" in detail.text


# =============================================================================
# UPDATE
# =============================================================================

@pytest.mark.asyncio
async def test_edit_page_prefills_values(client, admin, make_meal):
    meal = await make_meal()

    response = await client.get(f"/meals/{meal.id}/edit")

    assert response.status_code == 200
    assert 'value="Lamb Rogan Josh"' in response.text
    assert 'name="existing_image" value="/uploads/rogan-josh.png"' in response.text


@pytest.mark.asyncio
async def test_update_without_new_image_keeps_existing(client, admin, make_meal, session_maker):
    meal = await make_meal()
    data = meal_form_data(name="Kashmiri Rogan Josh", existing_image=meal.meal_image)

    response = await client.post(f"/meals/{meal.id}/edit", data=data)

    assert response.status_code == 303
    assert response.headers["location"] == f"/meals/{meal.id}"
    updated = await load_meal(session_maker, meal.id)
    assert updated.name == "Kashmiri Rogan Josh"
    assert updated.ingredients == "paneer, butter, tomato, cream"
    assert updated.meal_image == "/uploads/rogan-josh.png"


@pytest.mark.asyncio
async def test_update_with_blank_existing_image_keeps_stored_uri(client, admin, make_meal, session_maker):
    meal = await make_meal()

    response = await client.post(f"/meals/{meal.id}/edit", data=meal_form_data(existing_image=""))

    assert response.status_code == 303
    assert (await load_meal(session_maker, meal.id)).meal_image == "/uploads/rogan-josh.png"


@pytest.mark.asyncio
async def test_update_with_new_image_replaces_uri(client, admin, make_meal, session_maker):
    meal = await make_meal()
    data = meal_form_data(existing_image=meal.meal_image)

    response = await client.post(f"/meals/{meal.id}/edit", data=data, files=png_upload("new.png"))

    assert response.status_code == 303
    updated = await load_meal(session_maker, meal.id)
    assert updated.meal_image != "/uploads/rogan-josh.png"
    assert updated.meal_image.endswith("_new.png")


@pytest.mark.asyncio
async def test_update_may_keep_its_own_name(client, admin, make_meal, session_maker):
    meal = await make_meal()

    response = await client.post(
        f"/meals/{meal.id}/edit", data=meal_form_data(name=meal.name, allergens="none")
    )

    assert response.status_code == 303
    assert (await load_meal(session_maker, meal.id)).allergens == "none"


@pytest.mark.asyncio
async def test_update_rejects_name_of_another_meal(client, admin, make_meal, session_maker):
    await make_meal("Chana Masala")
    meal = await make_meal()

    response = await client.post(f"/meals/{meal.id}/edit", data=meal_form_data(name="Chana Masala"))

    assert response.status_code == 400
    assert MEAL_EXISTS in response.text
    assert (await load_meal(session_maker, meal.id)).name == "Lamb Rogan Josh"


@pytest.mark.asyncio
async def test_update_requires_core_fields(client, admin, make_meal):
    meal = await make_meal()

    response = await client.post(f"/meals/{meal.id}/edit", data=meal_form_data(allergens=""))

    assert response.status_code == 400
    assert MEAL_MISSING_FIELDS in response.text


@pytest.mark.asyncio
async def test_update_unknown_meal_is_not_found(client, admin):
    response = await client.post("/meals/9999/edit", data=meal_form_data())

    assert response.status_code == 404


# =============================================================================
# DELETE
# =============================================================================

@pytest.mark.asyncio
async def test_delete_removes_meal_and_orphans_comments(client, admin, make_meal, session_maker):
    meal = await make_meal()
    async with session_maker() as session:
        session.add(Comment(meal_id=meal.id, author_id=admin.id, content="Perfect heat"))
        await session.commit()

    response = await client.post(f"/meals/{meal.id}/delete")

    assert response.status_code == 303
    assert response.headers["location"] == "/meals"
    assert await load_meal(session_maker, meal.id) is None
    assert (await client.get(f"/menu/meal/{meal.id}")).status_code == 404
    assert meal.name not in (await client.get("/menu")).text
    assert meal.name not in (await client.get("/meals")).text

    async with session_maker() as session:
        comment = await session.scalar(select(Comment).where(Comment.content == "Perfect heat"))
    assert comment is not None
    assert comment.meal_id is None

    profile = await client.get(f"/profile/{admin.id}")
    assert "Dish no longer on the menu" in profile.text
    assert "Perfect heat" in profile.text


@pytest.mark.asyncio
async def test_deleted_meal_ids_are_not_reused(client, admin, make_meal):
    first = await make_meal()
    await client.post(f"/meals/{first.id}/delete")

    second = await make_meal("Chana Masala")

    assert second.id > first.id


@pytest.mark.asyncio
async def test_delete_unknown_meal_is_not_found(client, admin):
    response = await client.post("/meals/9999/delete")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_out_of_range_delete_is_not_found(client, admin):
    response = await client.post("/meals/99999999999999999999999/delete")

    assert response.status_code == 404


# =============================================================================
# CONCURRENT NAME CLAIMS
# =============================================================================

@pytest.fixture
def name_check_misses(monkeypatch):
    """Simulate another request claiming the name after the pre-check."""

    async def never_taken(db, name, exclude_id=None):
        return False

    monkeypatch.setattr("menu_app.services.meals._name_taken", never_taken)


@pytest.mark.asyncio
async def test_create_losing_name_race_removes_upload(
    client, admin, make_meal, image_storage, name_check_misses
):
    await make_meal("Paneer Butter Masala")

    response = await client.post("/meals/create", data=meal_form_data(), files=png_upload())

    assert response.status_code == 400
    assert MEAL_EXISTS in response.text
    assert list(image_storage.directory.iterdir()) == []


@pytest.mark.asyncio
async def test_update_losing_name_race_removes_upload(
    client, admin, make_meal, session_maker, image_storage, name_check_misses
):
    await make_meal("Chana Masala")
    meal = await make_meal()

    response = await client.post(
        f"/meals/{meal.id}/edit", data=meal_form_data(name="Chana Masala"), files=png_upload()
    )

    assert response.status_code == 400
    assert MEAL_EXISTS in response.text
    assert list(image_storage.directory.iterdir()) == []
    assert (await load_meal(session_maker, meal.id)).meal_image == "/uploads/rogan-josh.png"
