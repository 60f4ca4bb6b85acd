from storefront.data.models import ProductModel, UserModel
from storefront.data.seed import PRODUCTS, seed


class TestSeed:
    def test_seeds_empty_database(self, db):
        assert seed(db) is True

        assert db.query(ProductModel).count() == len(PRODUCTS)
        admin = db.get(UserModel, 1)
        assert admin.is_admin is True

    def test_skips_when_products_exist(self, db, make_product):
        make_product()

        assert seed(db) is False
        assert db.query(ProductModel).count() == 1
