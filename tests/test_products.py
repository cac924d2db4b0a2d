def _names(resp):
    return [p["name"] for p in resp.get_json()["data"]]


def test_list_products_returns_catalog_in_source_order(client):
    resp = client.get("/api/products")
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] is True
    assert body["total"] == 9
    assert [p["id"] for p in body["data"]] == list(range(1, 10))
    assert body["data"][2] == {
        "id": 3,
        "name": "Wireless Headphones",
        "description": "High-quality wireless headphones with noise cancellation",
        "price": 89.99,
        "category": "electronics",
        "image": body["data"][2]["image"],
        "stock": 15,
    }


def test_filter_by_category(client):
    names = _names(client.get("/api/products?category=books"))
    assert names == ["JavaScript Book", "Vue.js Guide", "React vs Vue Book"]


def test_category_all_does_not_filter(client):
    assert client.get("/api/products?category=all").get_json()["total"] == 9


def test_unknown_category_is_empty(client):
    body = client.get("/api/products?category=garden").get_json()
    assert body["data"] == []
    assert body["total"] == 0


def test_search_is_case_insensitive_on_name_and_description(client):
    assert _names(client.get("/api/products?search=KEYBOARD")) == ["Mechanical Keyboard"]
    # "coding" só aparece na descrição
    assert _names(client.get("/api/products?search=coding")) == ["Developer Mug"]


def test_search_and_category_combine(client):
    names = _names(client.get("/api/products?category=clothing&search=vue"))
    assert names == ["Vue.js T-Shirt", "Vue Hoodie"]


def test_sort_by_price(client):
    asc = [p["price"] for p in client.get("/api/products?sort=price-asc").get_json()["data"]]
    desc = [p["price"] for p in client.get("/api/products?sort=price-desc").get_json()["data"]]
    assert asc == sorted(asc)
    assert asc[0] == 12.99
    assert desc == sorted(desc, reverse=True)
    assert desc[0] == 129.99


def test_sort_by_name(client):
    names = _names(client.get("/api/products?sort=name-asc"))
    assert names == sorted(names)
    assert _names(client.get("/api/products?sort=name-desc")) == sorted(names, reverse=True)


def test_unknown_sort_keeps_source_order(client):
    ids = [p["id"] for p in client.get("/api/products?sort=popularity").get_json()["data"]]
    assert ids == list(range(1, 10))


def test_get_product(client):
    resp = client.get("/api/products/7")
    assert resp.status_code == 200
    assert resp.get_json()["data"]["name"] == "Mechanical Keyboard"


def test_get_missing_product_is_404(client):
    resp = client.get("/api/products/999")
    assert resp.status_code == 404
    assert resp.get_json() == {"success": False, "error": "Product not found"}


def test_get_product_with_invalid_id_is_400(client):
    resp = client.get("/api/products/abc")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Invalid product ID"


def test_categories_are_distinct_and_sorted(client):
    resp = client.get("/api/products/categories")
    assert resp.status_code == 200
    assert resp.get_json()["data"] == ["books", "clothing", "electronics"]


def test_ids_outside_integer_range_are_400(client):
    for raw in ("0", "-3", "99999999999999999999", str(2**31)):
        resp = client.get(f"/api/products/{raw}")
        assert resp.status_code == 400, raw
        assert resp.get_json()["error"] == "Invalid product ID"


def test_search_wildcards_are_literal(client):
    # nenhum produto contém "%" ou "e_" literalmente
    assert _names(client.get("/api/products?search=%25")) == []
    assert _names(client.get("/api/products?search=e_")) == []
    assert _names(client.get("/api/products?search=t-sh")) == ["Vue.js T-Shirt"]
