"""Constants and form builders shared by the test modules."""

PASSWORD = "correct-horse-battery"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def meal_form_data(**overrides):
    data = {
        "name": "Paneer Butter Masala",
        "ingredients": "paneer, butter, tomato, cream",
        "allergens": "dairy",
        "spice_level": "mild",
        "category": "main",
        "cuisine": "Indian",
        "dish_type": "curry",
    }
    data.update(overrides)
    return data


def png_upload(filename="dish.png", content=PNG_BYTES):
    return {"meal_image": (filename, content, "image/png")}
