import pytest

from storefront.services.cart import get_all_food_images, get_food_image


@pytest.mark.parametrize("name, image", [
    ("Pho Bo", "/assets/food/pho-bo.jpg"),
    ("  pho ga ", "/assets/food/pho-ga.jpg"),
    ("French Fries", "/assets/food/crispy-fries.jpg"),
    ("Large Pho Bo Special", "/assets/food/pho-bo.jpg"),
])
def test_known_names(name, image):
    assert get_food_image(name) == image


@pytest.mark.parametrize("name", [None, "", "   ", "Xylophone"])
def test_no_match(name):
    assert get_food_image(name) is None


def test_short_words_do_not_match():
    # words of three letters or fewer are never compared
    assert get_food_image("Tea") is None


def test_all_images():
    images = get_all_food_images()
    assert {"name": "Pho Bo", "image": "/assets/food/pho-bo.jpg"} in images
    assert all(entry["image"].startswith("/assets/food/") for entry in images)
