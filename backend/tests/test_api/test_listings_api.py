"""Tests for the listings API: browsing and stay quotes."""

from decimal import Decimal

from httpx import AsyncClient


class TestBrowse:
    """GET /api/listings."""

    async def test_all_listings(self, client: AsyncClient):
        response = await client.get("/api/listings")
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == len(data["items"]) == 8
        first = data["items"][0]
        assert first["id"] == "r-101"
        assert first["distanceDisplay"] == "5.5KM from UENR"
        assert first["contact"]["email"] == "karjel@estatepro.com"

    async def test_search_and_kind(self, client: AsyncClient):
        response = await client.get("/api/listings", params={"q": "estate", "kind": "Estate"})
        assert [item["id"] for item in response.json()["items"]] == ["r-108"]

    async def test_sort_by_price(self, client: AsyncClient):
        response = await client.get("/api/listings", params={"sort": "price-asc"})
        prices = [item["pricePerMonth"] for item in response.json()["items"]]
        assert prices == sorted(prices)

    async def test_invalid_sort(self, client: AsyncClient):
        response = await client.get("/api/listings", params={"sort": "cheapest"})
        assert response.status_code == 400
        assert "sort" in response.json()["errors"]


class TestReadListing:
    async def test_found(self, client: AsyncClient):
        response = await client.get("/api/listings/r-104")
        assert response.status_code == 200
        assert response.json()["title"] == "EUSBETT HOTEL"

    async def test_not_found(self, client: AsyncClient):
        response = await client.get("/api/listings/r-999")
        assert response.status_code == 404
        assert response.json() == {"message": "Room/House not found"}


class TestQuote:
    """POST /api/listings/{id}/quote."""

    async def test_quote(self, client: AsyncClient):
        response = await client.post(
            "/api/listings/r-101/quote",
            json={"checkInDate": "2025-02-15", "checkOutDate": "2025-03-15", "numberOfGuests": 2},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["nights"] == 28
        assert data["rate"] == 32
        assert data["currency"] == "GHS"
        assert Decimal(str(data["amount"])) == Decimal(1792)
        assert data["totalAmount"] == "Ghc1792"

    async def test_hotel_quote(self, client: AsyncClient):
        response = await client.post(
            "/api/listings/r-104/quote",
            json={"checkInDate": "2025-02-25", "checkOutDate": "2025-02-28"},
        )
        assert response.json()["totalAmount"] == "$228"

    async def test_reversed_dates(self, client: AsyncClient):
        response = await client.post(
            "/api/listings/r-101/quote",
            json={"checkInDate": "2025-03-15", "checkOutDate": "2025-02-15"},
        )
        assert response.status_code == 400
        assert "checkOutDate" in response.json()["errors"]

    async def test_unknown_listing(self, client: AsyncClient):
        response = await client.post(
            "/api/listings/r-999/quote",
            json={"checkInDate": "2025-02-15", "checkOutDate": "2025-03-15"},
        )
        assert response.status_code == 404
