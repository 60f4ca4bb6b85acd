import pytest

from storefront.domain.errors import NotFoundError, ValidationError
from storefront.services.wishlist_service import WishlistService


@pytest.fixture
def wishlist(db):
    return WishlistService(db)


def _ids(view):
    return [p.id for p in view["products"]]


class TestAddToWishlist:
    def test_adds_in_order(self, wishlist, user, make_product):
        cake = make_product()
        pie = make_product(name="Apple Pie", price="15.00", category="Pies")

        wishlist.add_to_wishlist(user, cake)
        view = wishlist.add_to_wishlist(user, pie)

        assert view["user_id"] == user
        assert _ids(view) == [cake, pie]

    def test_unknown_product(self, wishlist, user):
        with pytest.raises(NotFoundError, match="Product not found"):
            wishlist.add_to_wishlist(user, 404)

    def test_duplicate(self, wishlist, user, make_product):
        cake = make_product()
        wishlist.add_to_wishlist(user, cake)

        with pytest.raises(ValidationError, match="already in wishlist"):
            wishlist.add_to_wishlist(user, cake)

        assert _ids(wishlist.get_wishlist(user)) == [cake]

    def test_unavailable_product_can_be_saved(self, wishlist, user, make_product):
        tart = make_product(name="Secret Tart", is_available=False)

        assert _ids(wishlist.add_to_wishlist(user, tart)) == [tart]

    def test_wishlists_are_per_user(self, wishlist, user, make_user, make_product):
        cake = make_product()
        bob = make_user(user_id=11, name="Bob", email="b@example.com")
        wishlist.add_to_wishlist(user, cake)

        assert wishlist.get_wishlist(bob)["products"] == []


class TestRemoveFromWishlist:
    def test_removes(self, wishlist, user, make_product):
        cake = make_product()
        wishlist.add_to_wishlist(user, cake)

        assert wishlist.remove_from_wishlist(user, cake)["products"] == []

    def test_absent_entry(self, wishlist, user, make_product):
        cake = make_product()

        with pytest.raises(NotFoundError, match="Product not found in wishlist"):
            wishlist.remove_from_wishlist(user, cake)


class TestToggleAndClear:
    def test_toggle_adds_then_removes(self, wishlist, user, make_product):
        cake = make_product()

        added = wishlist.toggle_wishlist(user, cake)
        assert added["in_wishlist"] is True
        assert _ids(added) == [cake]

        removed = wishlist.toggle_wishlist(user, cake)
        assert removed["in_wishlist"] is False
        assert removed["products"] == []

    def test_toggle_unknown_product(self, wishlist, user):
        with pytest.raises(NotFoundError):
            wishlist.toggle_wishlist(user, 404)

    def test_clear(self, wishlist, user, make_product):
        wishlist.add_to_wishlist(user, make_product())
        wishlist.add_to_wishlist(user, make_product(name="Apple Pie", category="Pies"))

        assert wishlist.clear_wishlist(user)["products"] == []

    def test_clear_empty_wishlist(self, wishlist, user):
        assert wishlist.clear_wishlist(user)["products"] == []


class TestDeletedProducts:
    def test_not_listed_after_catalog_delete(self, db, wishlist, user, make_product, product_row):
        cake = make_product()
        pie = make_product(name="Apple Pie", category="Pies")
        wishlist.add_to_wishlist(user, cake)
        wishlist.add_to_wishlist(user, pie)

        db.delete(product_row(cake))
        db.commit()

        assert _ids(wishlist.get_wishlist(user)) == [pie]
