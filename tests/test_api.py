from decimal import Decimal

import pytest

API = "/api/v1/products"

TSHIRT = {
    "store_id": "store-1",
    "name": "T-Shirt",
    "attributes": [
        {"name": "Color", "display_order": 0, "values": [{"value": "Red"}, {"value": "Blue", "display_order": 1}]},
        {"name": "Size", "display_order": 1, "values": [{"value": "S"}, {"value": "M", "display_order": 1}]},
    ],
    "variants": [
        {
            "price": "25.00",
            "stock_quantity": 3,
            "attribute_selections": [
                {"attribute_name": "Color", "value": "Blue"},
                {"attribute_name": "Size", "value": "M"},
            ],
        }
    ],
}


def selection_labels(variants):
    return [" / ".join(s["value"] for s in variant["selections"]) for variant in variants]


async def create_tshirt(client):
    response = await client.post(f"{API}/", json=TSHIRT)
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_create_and_get_product(client):
    created = await create_tshirt(client)

    assert selection_labels(created["variants"]) == ["Red / S", "Red / M", "Blue / S", "Blue / M"]
    assert Decimal(created["max_price"]) == Decimal("25")
    assert created["total_stock"] == 3

    response = await client.get(f"{API}/{created['product_id']}")
    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "T-Shirt"
    assert selection_labels(body["variants"]) == selection_labels(created["variants"])
    assert body["variants"][3]["sku"] == "T-SHIRT-BLUE-M"


@pytest.mark.asyncio
async def test_list_products(client):
    await create_tshirt(client)

    response = await client.get(f"{API}/", params={"store_id": "store-1"})
    assert response.status_code == 200
    assert [p["name"] for p in response.json()] == ["T-Shirt"]

    response = await client.get(f"{API}/", params={"store_id": "other"})
    assert response.json() == []


@pytest.mark.asyncio
async def test_add_and_delete_attribute_values(client):
    product = await create_tshirt(client)
    product_id = product["product_id"]
    color = product["attributes"][0]

    response = await client.post(
        f"{API}/{product_id}/attribute-values",
        json={"additions": [{"attribute_id": color["id"], "values": [{"value": "Green", "display_order": 2}]}]}
    )
    assert response.status_code == 200
    body = response.json()
    assert selection_labels(body["created_variants"]) == ["Green / S", "Green / M"]
    assert len(body["variants"]) == 6

    red_id = color["values"][0]["id"]
    response = await client.post(f"{API}/{product_id}/attribute-values/bulk-delete", json={"value_ids": [red_id]})
    assert response.status_code == 200
    body = response.json()
    assert selection_labels(body["removed_variants"]) == ["Red / S", "Red / M"]
    assert body["deleted_value_ids"] == [red_id]
    assert len(body["variants"]) == 4


@pytest.mark.asyncio
async def test_update_and_delete_attributes(client):
    product = await create_tshirt(client)
    product_id = product["product_id"]
    color, size = product["attributes"]

    response = await client.put(
        f"{API}/{product_id}/attributes",
        json={"attributes": [{"id": color["id"], "name": "Colour"}]}
    )
    assert response.status_code == 200
    assert [a["name"] for a in response.json()["updated_attributes"]] == ["Colour"]

    response = await client.post(
        f"{API}/{product_id}/attributes/bulk-delete",
        json={
            "attribute_ids": [size["id"]],
            "variants": [
                {"price": "9.50", "attribute_selections": [{"attribute_name": "Colour", "value": "Red"}]},
                {"price": "12", "attribute_selections": [{"attribute_name": "Colour", "value": "Blue"}]},
            ],
        }
    )
    assert response.status_code == 200
    body = response.json()
    assert body["deleted_attribute_ids"] == [size["id"]]
    assert Decimal(body["min_price"]) == Decimal("9.50")
    assert [v["name"] for v in body["variants"]] == ["T-Shirt - Red", "T-Shirt - Blue"]


@pytest.mark.asyncio
async def test_add_attribute(client):
    product = await create_tshirt(client)

    response = await client.post(
        f"{API}/{product['product_id']}/attributes",
        json={"attributes": [{"name": "Material", "display_order": 2, "values": [{"value": "Cotton"}]}]}
    )

    assert response.status_code == 200
    body = response.json()
    assert [a["name"] for a in body["added_attributes"]] == ["Material"]
    assert len(body["removed_variants"]) == 4
    assert len(body["created_variants"]) == 4


@pytest.mark.asyncio
async def test_variant_endpoints(client):
    product = await create_tshirt(client)
    product_id = product["product_id"]
    red_s, red_m, blue_s, blue_m = product["variants"]

    response = await client.put(
        f"{API}/{product_id}/variants",
        json={"variants": [{"id": red_s["id"], "price": "5", "stock_quantity": 2}]}
    )
    assert response.status_code == 200
    assert Decimal(response.json()["min_price"]) == Decimal("0")
    assert response.json()["total_stock"] == 5

    response = await client.post(
        f"{API}/{product_id}/variants/bulk-delete",
        json={"variant_ids": [red_m["id"], blue_s["id"]]}
    )
    assert response.status_code == 200
    body = response.json()
    assert selection_labels(body["variants"]) == ["Red / S", "Blue / M"]
    assert Decimal(body["min_price"]) == Decimal("5")


@pytest.mark.asyncio
async def test_validation_errors_are_listed(client):
    payload = dict(TSHIRT, attributes=TSHIRT["attributes"] + [
        {"name": "color", "values": []},
        {"name": "Material", "values": [{"value": "Wool"}]},
    ], variants=[])

    response = await client.post(f"{API}/", json=payload)

    assert response.status_code == 400
    body = response.json()
    assert body["detail"] == "Validation failed."
    assert len(body["errors"]) == 3


@pytest.mark.asyncio
async def test_error_status_codes(client):
    product = await create_tshirt(client)
    product_id = product["product_id"]

    response = await client.get(f"{API}/missing")
    assert response.status_code == 404

    response = await client.post(
        f"{API}/{product_id}/variants/bulk-delete",
        json={"variant_ids": [v["id"] for v in product["variants"]]}
    )
    assert response.status_code == 409
    assert response.json()["detail"] == "At least one active variant must remain for the product."

    response = await client.put(
        f"{API}/{product_id}/variants",
        json={"variants": [{"id": product["variants"][0]["id"], "price": "-1"}]}
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_variant_media_endpoint(client):
    product = await create_tshirt(client)
    product_id = product["product_id"]
    blue_m = product["variants"][3]

    response = await client.put(
        f"{API}/{product_id}/variants/media",
        json={"variants": [{
            "variant_id": blue_m["id"],
            "media": [
                {"media_public_id": "blue-front", "is_main": True},
                {"media_public_id": "blue-back", "display_order": 1, "is_main": True},
            ]
        }]}
    )
    assert response.status_code == 200
    body = response.json()
    assert [m["is_main"] for m in body["updated_variants"][0]["media"]] == [True, False]
    assert body["main_media_public_id"] == "blue-front"

    response = await client.put(
        f"{API}/{product_id}/variants/media",
        json={"variants": [{"variant_id": blue_m["id"], "media": [{"media_public_id": "x", "media_type": "audio"}]}]}
    )
    assert response.status_code == 422

    response = await client.put(
        f"{API}/{product_id}/variants/media",
        json={"variants": [{"variant_id": "missing", "media": [{"media_public_id": "x"}]}]}
    )
    assert response.status_code == 404
