from storefront.repos.product_repo import ProductRepo


class TestStockUpdates:
    def test_decrement_when_enough(self, db, make_product, product_row):
        cake = make_product(stock=3)
        repo = ProductRepo(db)

        assert repo.decrement_stock(cake, 3) is True
        repo.commit()

        product = product_row(cake)
        assert product.stock == 0
        assert product.sales_count == 3

    def test_decrement_refused_when_short(self, db, make_product, product_row):
        cake = make_product(stock=2)
        repo = ProductRepo(db)

        assert repo.decrement_stock(cake, 3) is False
        repo.commit()

        assert product_row(cake).stock == 2

    def test_decrement_unknown_product(self, db):
        assert ProductRepo(db).decrement_stock(404, 1) is False

    def test_restore_floors_sales_count(self, db, make_product, product_row):
        cake = make_product(stock=1)
        repo = ProductRepo(db)
        repo.decrement_stock(cake, 1)

        assert repo.restore_stock(cake, 4) is True
        repo.commit()

        product = product_row(cake)
        assert product.stock == 4
        assert product.sales_count == 0

    def test_restore_unknown_product(self, db):
        assert ProductRepo(db).restore_stock(404, 1) is False

    def test_get_stock(self, db, make_product):
        cake = make_product(stock=7)
        repo = ProductRepo(db)

        assert repo.get_stock(cake) == 7
        assert repo.get_stock(404) is None
