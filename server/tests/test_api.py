"""HTTP API tests."""

import pytest
from httpx import AsyncClient

API = "/api/v1"


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        response = await client.get(f"{API}/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_db_health(self, client: AsyncClient):
        response = await client.get(f"{API}/health/db")

        assert response.status_code == 200
        assert response.json()["database"] == "connected"


class TestAppointmentEndpoints:
    """Booking over HTTP."""

    def _payload(self, user, vehicle, unit, service_ids, **extra):
        payload = {
            "user_id": user.id,
            "vehicle_id": vehicle.id,
            "unit_id": unit.id,
            "scheduled_date": "2025-03-10",
            "scheduled_time": "14:30",
            "service_ids": service_ids,
        }
        payload.update(extra)
        return payload

    @pytest.mark.asyncio
    async def test_create_and_fetch(
        self, client, test_user, large_vehicle, test_unit, wax
    ):
        response = await client.post(
            f"{API}/appointments",
            json=self._payload(
                test_user, large_vehicle, test_unit, [wax.id], includes_pickup=True
            ),
        )

        assert response.status_code == 201
        created = response.json()
        assert created["final_price"] == 72.0
        assert created["pickup_fee"] == 15.0
        assert created["service_ids"] == [wax.id]

        response = await client.get(f"{API}/appointments/{created['id']}")
        assert response.status_code == 200
        assert response.json()["final_price"] == 72.0

    @pytest.mark.asyncio
    async def test_client_price_is_ignored(
        self, client, test_user, small_vehicle, test_unit, basic_wash
    ):
        response = await client.post(
            f"{API}/appointments",
            json=self._payload(
                test_user, small_vehicle, test_unit, [basic_wash.id], final_price=1.0
            ),
        )

        assert response.status_code == 201
        assert response.json()["final_price"] == 27.5

    @pytest.mark.asyncio
    async def test_unknown_user_is_400(self, client, small_vehicle, test_unit, basic_wash):
        payload = {
            "user_id": "missing",
            "vehicle_id": small_vehicle.id,
            "unit_id": test_unit.id,
            "scheduled_date": "2025-03-10",
            "scheduled_time": "14:30",
            "service_ids": [basic_wash.id],
        }

        response = await client.post(f"{API}/appointments", json=payload)

        assert response.status_code == 400
        assert response.json() == {"detail": "user not found"}

        response = await client.get(f"{API}/appointments")
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_no_services_is_400(self, client, test_user, small_vehicle, test_unit):
        response = await client.post(
            f"{API}/appointments",
            json=self._payload(test_user, small_vehicle, test_unit, ["nope"]),
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "no services found"

    @pytest.mark.asyncio
    async def test_missing_appointment_is_404(self, client):
        response = await client.get(f"{API}/appointments/missing")

        assert response.status_code == 404
        assert response.json()["detail"] == "appointment not found"

    @pytest.mark.asyncio
    async def test_calculate_price(self, client, basic_wash, wax):
        response = await client.post(
            f"{API}/appointments/calculate-price",
            json={"size": "medium", "service_ids": [basic_wash.id, wax.id]},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["final_price"] == 83.0
        assert body["base_total"] == 70.0
        assert body["surcharge_total"] == 13.0
        assert len(body["services"]) == 2

    @pytest.mark.asyncio
    async def test_calculate_price_unknown_size(self, client, basic_wash):
        response = await client.post(
            f"{API}/appointments/calculate-price",
            json={"size": "truck", "service_ids": [basic_wash.id]},
        )

        assert response.json()["final_price"] == 30.0

    @pytest.mark.asyncio
    async def test_pickup_fee(self, client):
        response = await client.get(f"{API}/appointments/pickup-fee")

        assert response.json() == {"charged": 15.0, "quoted": 50.0}

    @pytest.mark.asyncio
    async def test_complete_notifies(
        self, client, notifier, booking, test_user, small_vehicle, test_unit, basic_wash
    ):
        created = (
            await client.post(
                f"{API}/appointments",
                json=self._payload(test_user, small_vehicle, test_unit, [basic_wash.id]),
            )
        ).json()

        response = await client.patch(
            f"{API}/appointments/{created['id']}", json={"status": "completed"}
        )
        await booking.wait_for_notifications(timeout=5)

        assert response.status_code == 200
        assert response.json()["status"] == "completed"
        assert notifier.calls == [created["id"]]

    @pytest.mark.asyncio
    async def test_invalid_status_is_422(
        self, client, test_user, small_vehicle, test_unit, basic_wash
    ):
        created = (
            await client.post(
                f"{API}/appointments",
                json=self._payload(test_user, small_vehicle, test_unit, [basic_wash.id]),
            )
        ).json()

        response = await client.patch(
            f"{API}/appointments/{created['id']}", json={"status": "washed"}
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_delete(self, client, test_user, small_vehicle, test_unit, basic_wash):
        created = (
            await client.post(
                f"{API}/appointments",
                json=self._payload(test_user, small_vehicle, test_unit, [basic_wash.id]),
            )
        ).json()

        response = await client.delete(f"{API}/appointments/{created['id']}")
        assert response.status_code == 204

        response = await client.get(f"{API}/appointments/{created['id']}")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_list_by_user(self, client, test_user, small_vehicle, test_unit, basic_wash):
        await client.post(
            f"{API}/appointments",
            json=self._payload(test_user, small_vehicle, test_unit, [basic_wash.id]),
        )

        response = await client.get(f"{API}/appointments/user/{test_user.id}")

        assert len(response.json()) == 1
        assert response.json()[0]["user"]["name"] == "Maria Silva"


class TestAuthEndpoints:
    """Phone login."""

    @pytest.mark.asyncio
    async def test_first_login_creates_user(self, client):
        response = await client.post(
            f"{API}/auth/verify",
            json={"phone_number": "+5511912345678", "verification_code": "123456"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["token_type"] == "bearer"
        assert body["requires_registration"] is True
        assert body["user"]["phone_number"] == "+5511912345678"
        assert body["user"]["loyalty_points"] == 0

        profile = await client.get(
            f"{API}/users/profile",
            headers={"Authorization": f"Bearer {body['access_token']}"},
        )
        assert profile.status_code == 200
        assert profile.json()["id"] == body["user"]["id"]

    @pytest.mark.asyncio
    async def test_existing_user_login(self, client, test_user):
        response = await client.post(
            f"{API}/auth/verify",
            json={"phone_number": test_user.phone_number, "verification_code": "123456"},
        )

        assert response.json()["user"]["id"] == test_user.id

    @pytest.mark.asyncio
    async def test_login_with_differently_formatted_phone(self, client, test_user):
        response = await client.post(
            f"{API}/auth/verify",
            json={"phone_number": "55 11 98765-4321", "verification_code": "123456"},
        )

        body = response.json()
        assert body["user"]["id"] == test_user.id
        assert body["user"]["phone_number"] == "+5511987654321"

    @pytest.mark.asyncio
    async def test_wrong_code(self, client):
        response = await client.post(
            f"{API}/auth/verify",
            json={"phone_number": "+5511912345678", "verification_code": "000000"},
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_my_appointments(
        self, client, test_user, small_vehicle, test_unit, basic_wash
    ):
        token = (
            await client.post(
                f"{API}/auth/verify",
                json={"phone_number": test_user.phone_number, "verification_code": "123456"},
            )
        ).json()["access_token"]
        await client.post(
            f"{API}/appointments",
            json={
                "user_id": test_user.id,
                "vehicle_id": small_vehicle.id,
                "unit_id": test_unit.id,
                "scheduled_date": "2025-03-10",
                "scheduled_time": "14:30",
                "service_ids": [basic_wash.id],
            },
        )

        response = await client.get(
            f"{API}/appointments/mine", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 200
        assert [a["user_id"] for a in response.json()] == [test_user.id]

    @pytest.mark.asyncio
    async def test_missing_token(self, client):
        response = await client.get(f"{API}/appointments/mine")

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_bad_token(self, client):
        response = await client.get(
            f"{API}/users/profile", headers={"Authorization": "Bearer not-a-jwt"}
        )

        assert response.status_code == 401


class TestRegistryEndpoints:
    """Users, vehicles, units, services."""

    @pytest.mark.asyncio
    async def test_duplicate_plate(self, client, test_user, small_vehicle):
        response = await client.post(
            f"{API}/cars",
            json={
                "user_id": test_user.id,
                "model": "HB20",
                "license_plate": "abc-1d23",
                "size": "small",
            },
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "license plate already registered"

    @pytest.mark.asyncio
    async def test_create_vehicle_normalizes_plate(self, client, test_user):
        response = await client.post(
            f"{API}/cars",
            json={
                "user_id": test_user.id,
                "model": "HB20",
                "license_plate": "xyz-9a87",
                "size": "large",
            },
        )

        assert response.status_code == 201
        assert response.json()["license_plate"] == "XYZ9A87"

        listed = await client.get(f"{API}/cars/user/{test_user.id}")
        assert [v["license_plate"] for v in listed.json()] == ["XYZ9A87"]

    @pytest.mark.asyncio
    async def test_vehicle_for_unknown_user(self, client):
        response = await client.post(
            f"{API}/cars",
            json={"user_id": "missing", "model": "HB20", "license_plate": "QWE1R23", "size": "small"},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "user not found"

    @pytest.mark.asyncio
    async def test_service_crud(self, client):
        response = await client.post(
            f"{API}/services",
            json={"name": "Polimento", "base_price": "120.00", "size_surcharge": "30.00"},
        )
        assert response.status_code == 201
        service = response.json()
        assert service["base_price"] == 120.0

        response = await client.patch(f"{API}/services/{service['id']}", json={"base_price": "99.90"})
        assert response.json()["base_price"] == 99.9

        response = await client.delete(f"{API}/services/{service['id']}")
        assert response.status_code == 204

        response = await client.get(f"{API}/services/{service['id']}")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_service_in_use_is_400(
        self, client, test_user, small_vehicle, test_unit, basic_wash
    ):
        await client.post(
            f"{API}/appointments",
            json={
                "user_id": test_user.id,
                "vehicle_id": small_vehicle.id,
                "unit_id": test_unit.id,
                "scheduled_date": "2025-03-10",
                "scheduled_time": "14:30",
                "service_ids": [basic_wash.id],
            },
        )

        response = await client.delete(f"{API}/services/{basic_wash.id}")

        assert response.status_code == 400
        assert response.json()["detail"] == "service is used by appointments"

    @pytest.mark.asyncio
    async def test_negative_price_rejected(self, client):
        response = await client.post(
            f"{API}/services", json={"name": "Grátis?", "base_price": "-1"}
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_unit_crud(self, client):
        response = await client.post(
            f"{API}/units", json={"name": "Unidade Sul", "address": "Av. Interlagos, 1"}
        )
        assert response.status_code == 201
        unit_id = response.json()["id"]

        response = await client.patch(f"{API}/units/{unit_id}", json={"name": "Unidade Zona Sul"})
        assert response.json()["name"] == "Unidade Zona Sul"

        response = await client.get(f"{API}/units")
        assert [u["id"] for u in response.json()] == [unit_id]

    @pytest.mark.asyncio
    async def test_duplicate_phone(self, client, test_user):
        response = await client.post(
            f"{API}/users",
            json={
                "name": "Outra Maria",
                "phone_number": test_user.phone_number,
                "address": "Rua X, 1",
                "neighborhood": "Centro",
                "city": "São Paulo",
                "state": "SP",
                "postal_code": "01000-000",
            },
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_loyalty_points(self, client, test_user):
        response = await client.post(f"{API}/users/{test_user.id}/points", json={"points": 5})

        assert response.status_code == 200
        assert response.json()["loyalty_points"] == 5

    @pytest.mark.asyncio
    async def test_favorite_address_ownership(self, client, test_user):
        other = (
            await client.post(
                f"{API}/users",
                json={
                    "name": "João",
                    "phone_number": "+5521999990000",
                    "address": "Rua Y, 2",
                    "neighborhood": "Botafogo",
                    "city": "Rio de Janeiro",
                    "state": "RJ",
                    "postal_code": "22000-000",
                },
            )
        ).json()
        address = (
            await client.post(
                f"{API}/users/{test_user.id}/favorite-addresses",
                json={
                    "label": "Casa",
                    "street": "Rua das Flores",
                    "number": "123",
                    "neighborhood": "Centro",
                    "city": "São Paulo",
                    "postal_code": "01000-000",
                },
            )
        ).json()

        response = await client.delete(
            f"{API}/users/{other['id']}/favorite-addresses/{address['id']}"
        )
        assert response.status_code == 404

        response = await client.delete(
            f"{API}/users/{test_user.id}/favorite-addresses/{address['id']}"
        )
        assert response.status_code == 204

        response = await client.get(f"{API}/users/{test_user.id}/favorite-addresses")
        assert response.json() == []
