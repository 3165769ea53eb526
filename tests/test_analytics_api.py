class TestAnalyticsEndpoint:
    def test_summary(self, client, make_item, member, front_desk, category):
        a = make_item(name="A")
        make_item(name="B", holder_location_id=front_desk["id"])
        client.post(
            "/inventory/movements",
            json={"item_id": a["id"], "reason": "checkout", "to_organizer_id": str(member.id)},
        )

        resp = client.get("/inventory/analytics")
        assert resp.status_code == 200
        data = resp.json()
        assert data["total_items"] == 2
        assert data["status_counts"] == {"active": 1, "checked_out": 1}
        assert data["category_counts"] == {"Laptops": 2}
        assert data["location_counts"] == {"Front Desk": 1}
        assert data["recent_movements"] == 1
        assert data["total_movements"] == 1
        assert data["movement_reasons"] == {"checkout": 1}
        assert data["items_with_people"] == 1
        assert data["items_with_locations"] == 1
        assert data["unassigned_items"] == 0
        assert data["top_categories"] == [["Laptops", 2]]


class TestCatalogEndpoint:
    def test_groups_by_category(self, client, make_item, storage):
        make_item(name="Laptop 02")
        make_item(name="Laptop 01")
        client.post("/inventory/categories/", json={"name": "Empty"})

        resp = client.get("/inventory/catalog")
        assert resp.status_code == 200
        catalog = resp.json()
        assert len(catalog) == 1
        entry = catalog[0]
        assert entry["category"]["name"] == "Laptops"
        assert entry["total_items"] == 2
        assert entry["location_counts"] == {"Storage Room": 2}
        assert [i["name"] for i in entry["items"]] == ["Laptop 01", "Laptop 02"]

    def test_single_category(self, client, make_item, category):
        make_item()
        resp = client.get("/inventory/catalog", params={"category_id": category["id"]})
        assert resp.status_code == 200
        assert resp.json()[0]["category"]["id"] == category["id"]

    def test_category_without_items(self, client):
        empty = client.post("/inventory/categories/", json={"name": "Empty"}).json()
        resp = client.get("/inventory/catalog", params={"category_id": empty["id"]})
        assert resp.status_code == 404
