"""
Pruebas HTTP de los endpoints de alojamientos.
"""
import uuid
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from app.core.exceptions import ExternalServiceException
from app.services.storage_service import storage_service

from conftest import auth, hotel_payload

HOTELS = "/api/v1/hotels"

JPEG = b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00\xff\xd9'


def image_files(*names):
    return [("images", (name, JPEG, "image/jpeg")) for name in names]


class TestEnvelope:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_not_found_envelope(self, client):
        response = client.get(f"{HOTELS}/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json() == {"status": "error", "message": "No se encontró el hotel"}

    def test_missing_token(self, client):
        response = client.post(HOTELS, json=hotel_payload())
        assert response.status_code == 401
        assert response.json()["status"] == "error"

    def test_invalid_token(self, client):
        response = client.post(HOTELS, json=hotel_payload(), headers={"Authorization": "Bearer basura"})
        assert response.status_code == 401

    def test_validation_error_is_400(self, client, owner):
        response = client.post(HOTELS, json=hotel_payload(price=-5), headers=auth(owner))
        body = response.json()
        assert response.status_code == 400
        assert body["status"] == "error"
        assert "price" in body["message"]


class TestCrud:

    def test_create_then_get(self, client, owner):
        response = client.post(HOTELS, json=hotel_payload(), headers=auth(owner))
        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "success"
        assert body["message"] == "Hotel creado exitosamente"
        created = body["data"]
        assert created["owner_id"] == str(owner.id)
        assert created["active"] is True

        fetched = client.get(f"{HOTELS}/{created['id']}").json()["data"]
        assert fetched == created
        assert fetched["owner"]["email"] == owner.email

    def test_visitor_cannot_create(self, client, visitor):
        response = client.post(HOTELS, json=hotel_payload(), headers=auth(visitor))
        assert response.status_code == 403

    def test_owner_cannot_be_set_by_client(self, client, owner, other_admin):
        response = client.post(HOTELS, json=hotel_payload(owner_id=str(other_admin.id)), headers=auth(owner))
        assert response.json()["data"]["owner_id"] == str(owner.id)

    def test_list_public(self, client, hotel, make_hotel):
        make_hotel(name="Posada Taxco", location={"city": "Taxco"})

        body = client.get(HOTELS, params={"city": "taxco"}).json()
        assert body["results"] == 1
        assert body["data"][0]["name"] == "Posada Taxco"

    def test_list_mine(self, client, owner, other_admin, hotel, make_hotel):
        make_hotel(user=other_admin)
        body = client.get(f"{HOTELS}/mine", headers=auth(owner)).json()
        assert [item["id"] for item in body["data"]] == [str(hotel.id)]

    def test_update_by_owner(self, client, owner, hotel):
        response = client.patch(f"{HOTELS}/{hotel.id}", json={"price": 999}, headers=auth(owner))
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["price"] == 999
        assert data["last_modification"]["action"] == "updated"

    def test_update_by_non_owner(self, client, other_admin, hotel):
        response = client.patch(f"{HOTELS}/{hotel.id}", json={"name": "Robado"}, headers=auth(other_admin))
        assert response.status_code == 403

        data = client.get(f"{HOTELS}/{hotel.id}").json()["data"]
        assert data["name"] == "Hotel Mirador"

    @pytest.mark.parametrize("field", ["owner_id", "images", "status"])
    def test_update_rejects_protected_fields(self, client, owner, hotel, field):
        response = client.patch(f"{HOTELS}/{hotel.id}", json={field: "x"}, headers=auth(owner))
        assert response.status_code == 400

    def test_update_rejects_null_required_field(self, client, owner, hotel):
        response = client.patch(f"{HOTELS}/{hotel.id}", json={"name": None}, headers=auth(owner))
        assert response.status_code == 400

    def test_update_rejects_null_contact(self, client, owner, hotel):
        response = client.patch(f"{HOTELS}/{hotel.id}", json={"contact": None}, headers=auth(owner))
        assert response.status_code == 400

        listed = client.get(HOTELS)
        assert listed.status_code == 200
        assert listed.json()["data"][0]["contact"]["phone"] == "7221234567"

    def test_update_replaces_sub_document(self, client, owner, hotel):
        response = client.patch(f"{HOTELS}/{hotel.id}", json={"capacity": {"guests": 6}}, headers=auth(owner))
        assert response.status_code == 200
        assert response.json()["data"]["capacity"] == {"guests": 6, "rooms": None, "beds": None, "bathrooms": None}

    def test_soft_delete(self, client, owner, super_admin, hotel):
        response = client.delete(f"{HOTELS}/{hotel.id}", headers=auth(owner))
        assert response.status_code == 204
        assert response.content == b""

        public = client.get(HOTELS).json()
        assert public["results"] == 0

        elevated = client.get(HOTELS, headers=auth(super_admin)).json()
        assert elevated["results"] == 1
        assert elevated["data"][0]["active"] is False
        assert elevated["data"][0]["status"] == "inactive"


class TestToggleStatus:

    def test_owner_forbidden_while_update_allowed(self, client, owner, hotel):
        response = client.patch(f"{HOTELS}/{hotel.id}/toggle-status", headers=auth(owner))
        assert response.status_code == 403

        response = client.patch(f"{HOTELS}/{hotel.id}", json={"description": "Nuevo"}, headers=auth(owner))
        assert response.status_code == 200

    def test_super_admin_toggles_with_reason(self, client, super_admin, hotel):
        response = client.patch(
            f"{HOTELS}/{hotel.id}/toggle-status",
            json={"reason": "Queja sanitaria"},
            headers=auth(super_admin),
        )
        body = response.json()
        assert response.status_code == 200
        assert body["message"] == "Hotel bloqueado exitosamente"
        assert body["data"]["active"] is False

        history = client.get(f"{HOTELS}/{hotel.id}/status-history", headers=auth(super_admin)).json()
        assert history["data"][-1]["reason"] == "Queja sanitaria"
        assert history["data"][-1]["to_status"] == "inactive"

        response = client.patch(f"{HOTELS}/{hotel.id}/toggle-status", headers=auth(super_admin))
        assert response.json()["message"] == "Hotel activado exitosamente"


class TestImages:

    def test_upload_set_main_and_remove(self, client, owner, hotel):
        response = client.post(
            f"{HOTELS}/{hotel.id}/images/upload",
            files=image_files("a.jpg", "b.png", "c.webp"),
            headers=auth(owner),
        )
        assert response.status_code == 200
        result = response.json()["data"]
        assert result["added"] == 3
        assert result["total_images"] == 3
        a, b, c = result["new_images"]
        assert a.endswith(".jpg") and b.endswith(".png") and c.endswith(".webp")

        response = client.patch(
            f"{HOTELS}/{hotel.id}/images/set-main", json={"image_index": 2}, headers=auth(owner)
        )
        assert response.json()["data"]["main_image"] == c

        images = client.get(f"{HOTELS}/{hotel.id}/images", headers=auth(owner)).json()["data"]
        assert images == [c, a, b]

        response = client.delete(f"{HOTELS}/{hotel.id}/images/1", headers=auth(owner))
        assert response.status_code == 200
        assert response.json()["data"]["removed_image"] == {"url": a, "index": 1}

        images = client.get(f"{HOTELS}/{hotel.id}/images", headers=auth(owner)).json()["data"]
        assert images == [c, b]

        removed_key = storage_service.extract_object_key_from_url(a)
        assert not (Path(storage_service.upload_dir) / removed_key).exists()

        main = client.get(f"{HOTELS}/{hotel.id}/main-image").json()["data"]
        assert main == {"main_image": c, "total_images": 2}

    def test_set_main_already_primary(self, client, db, owner, hotel):
        hotel.images = ["https://cdn.test/a.jpg", "https://cdn.test/b.jpg"]
        db.commit()

        response = client.patch(
            f"{HOTELS}/{hotel.id}/images/set-main", json={"image_index": 0}, headers=auth(owner)
        )
        assert response.status_code == 200
        assert response.json()["message"] == "Esta imagen ya es la principal"

    def test_remove_invalid_index(self, client, db, owner, hotel):
        response = client.delete(f"{HOTELS}/{hotel.id}/images/0", headers=auth(owner))
        assert response.status_code == 404
        assert response.json()["message"] == "No hay imágenes disponibles"

        hotel.images = ["https://cdn.test/a.jpg"]
        db.commit()
        response = client.delete(f"{HOTELS}/{hotel.id}/images/3", headers=auth(owner))
        assert response.status_code == 404
        assert response.json()["message"] == "Índice de imagen inválido"

    def test_remove_succeeds_when_storage_delete_fails(self, client, db, owner, hotel):
        url = f"{storage_service.api_base_url}/uploads/hotels/perdida.jpg"
        hotel.images = [url, "https://cdn.test/b.jpg"]
        db.commit()

        failing = AsyncMock(side_effect=ExternalServiceException("R2 caído"))
        with patch.object(storage_service, "delete_file", failing):
            response = client.delete(f"{HOTELS}/{hotel.id}/images/0", headers=auth(owner))

        assert response.status_code == 200
        failing.assert_awaited_once_with("hotels/perdida.jpg")
        db.refresh(hotel)
        assert hotel.images == ["https://cdn.test/b.jpg"]

    def test_upload_failure_leaves_list_unchanged(self, client, db, owner, hotel):
        failing = AsyncMock(side_effect=ExternalServiceException("Error al subir imagen: R2 caído"))
        with patch.object(storage_service, "upload_file", failing):
            response = client.post(
                f"{HOTELS}/{hotel.id}/images/upload", files=image_files("a.jpg"), headers=auth(owner)
            )

        assert response.status_code == 502
        db.refresh(hotel)
        assert hotel.images == []

    def test_upload_rejects_non_image(self, client, owner, hotel):
        response = client.post(
            f"{HOTELS}/{hotel.id}/images/upload",
            files=[("images", ("notas.txt", b"hola", "text/plain"))],
            headers=auth(owner),
        )
        assert response.status_code == 400

    def test_non_owner_cannot_upload(self, client, other_admin, hotel):
        response = client.post(
            f"{HOTELS}/{hotel.id}/images/upload", files=image_files("a.jpg"), headers=auth(other_admin)
        )
        assert response.status_code == 403


class TestOtherTypes:

    def test_cabins_and_rentals_routes(self, client, owner):
        cabin = client.post("/api/v1/cabins", json=hotel_payload(name="Cabaña Pinos"), headers=auth(owner))
        assert cabin.status_code == 201
        assert cabin.json()["message"] == "Cabaña creada exitosamente"

        rental = client.post(
            "/api/v1/rentals", json=hotel_payload(name="Depa", min_nights=2), headers=auth(owner)
        )
        assert rental.status_code == 201
        assert rental.json()["data"]["min_nights"] == 2

        missing = client.get(f"/api/v1/cabins/{rental.json()['data']['id']}")
        assert missing.status_code == 404
        assert missing.json()["message"] == "No se encontró la cabaña"

    def test_rental_rejects_null_min_nights(self, client, owner):
        rental = client.post(
            "/api/v1/rentals", json=hotel_payload(name="Depa", min_nights=2), headers=auth(owner)
        ).json()["data"]

        response = client.patch(
            f"/api/v1/rentals/{rental['id']}", json={"min_nights": None}, headers=auth(owner)
        )
        assert response.status_code == 400
        assert client.get(f"/api/v1/rentals/{rental['id']}").json()["data"]["min_nights"] == 2
