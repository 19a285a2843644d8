"""
Pruebas del servicio de alojamientos (sin capa HTTP).
"""
import uuid
from datetime import datetime, timedelta, timezone

import pytest

from app.core.exceptions import ForbiddenException, NotFoundException, ValidationException
from app.db.base import ListingStatus
from app.models.activity_log import ActivityLog
from app.schemas.listing import (
    CabinCreate,
    HotelUpdate,
    ListingFilters,
    RentalCreate,
)
from app.services.activity_log_service import ActionTypes
from app.services.listing_service import (
    DEFAULT_TOGGLE_REASON,
    cabin_service,
    hotel_service,
    rental_service,
)

from conftest import hotel_payload


class TestCreateAndGet:

    def test_create_then_get_round_trip(self, db, owner, hotel):
        found = hotel_service.get(db, hotel.id)

        assert found.id == hotel.id
        assert found.owner_id == owner.id
        assert found.name == "Hotel Mirador"
        assert found.price == 1200.0
        assert found.location == {"city": "Valle de Bravo", "region": "Estado de México",
                                   "address": None, "latitude": None, "longitude": None}
        assert found.capacity["guests"] == 4
        assert found.amenities == ["wifi", "alberca"]
        assert found.stars == 4
        assert found.images == []
        assert found.status == ListingStatus.active

    def test_create_records_history_and_activity(self, db, owner, hotel):
        events = hotel_service.status_history(db, hotel.id, owner)
        assert [(e.from_status, e.to_status, e.action) for e in events] == [
            (None, ListingStatus.active, "created")
        ]
        log = db.query(ActivityLog).filter(ActivityLog.action_type == ActionTypes.CREATE_LISTING).one()
        assert log.entity_id == hotel.id

    def test_visitor_cannot_create(self, db, visitor, make_hotel):
        with pytest.raises(ForbiddenException):
            make_hotel(user=visitor)

    def test_get_missing(self, db):
        with pytest.raises(NotFoundException, match="No se encontró el hotel"):
            hotel_service.get(db, uuid.uuid4())

    def test_inactive_record_still_returned_by_get(self, db, owner, hotel):
        hotel_service.soft_delete(db, hotel.id, owner)
        assert hotel_service.get(db, hotel.id).active is False

    def test_other_types(self, db, owner):
        cabin = cabin_service.create(db, CabinCreate(**hotel_payload(name="Cabaña del Bosque")), owner)
        rental = rental_service.create(db, RentalCreate(**hotel_payload(name="Depa Centro", min_nights=3)), owner)

        assert cabin_service.get(db, cabin.id).name == "Cabaña del Bosque"
        assert rental_service.get(db, rental.id).min_nights == 3
        with pytest.raises(NotFoundException, match="No se encontró la cabaña"):
            cabin_service.get(db, rental.id)


class TestUpdate:

    def test_owner_update_stamps_modification(self, db, owner, hotel):
        updated = hotel_service.update(db, hotel.id, HotelUpdate(price=900, stars=5), owner)

        assert updated.price == 900
        assert updated.stars == 5
        assert updated.name == "Hotel Mirador"
        assert updated.last_modification["action"] == "updated"
        assert updated.last_modification["actor_id"] == str(owner.id)
        assert updated.last_modification["fields"] == ["price", "stars"]

    def test_sub_document_replaced_whole(self, db, owner, hotel):
        updated = hotel_service.update(db, hotel.id, HotelUpdate(capacity={"guests": 8}), owner)
        assert updated.capacity == {"guests": 8, "rooms": None, "beds": None, "bathrooms": None}

    def test_non_owner_rejected_and_record_unchanged(self, db, other_admin, hotel):
        with pytest.raises(ForbiddenException):
            hotel_service.update(db, hotel.id, HotelUpdate(name="Robado"), other_admin)

        db.refresh(hotel)
        assert hotel.name == "Hotel Mirador"
        assert hotel.last_modification is None

    def test_super_admin_can_update_any(self, db, super_admin, hotel):
        updated = hotel_service.update(db, hotel.id, HotelUpdate(name="Hotel Mirador Real"), super_admin)
        assert updated.name == "Hotel Mirador Real"
        assert updated.last_modification["actor_id"] == str(super_admin.id)

    def test_empty_patch_rejected(self, db, owner, hotel):
        with pytest.raises(ValidationException):
            hotel_service.update(db, hotel.id, HotelUpdate(), owner)


class TestSoftDelete:

    def test_deleted_hidden_from_public_list_visible_to_elevated(self, db, owner, super_admin, hotel, make_hotel):
        other = make_hotel(name="Hotel Centro")
        hotel_service.soft_delete(db, hotel.id, owner)

        public_ids = [r.id for r in hotel_service.list(db, None, None)]
        owner_ids = [r.id for r in hotel_service.list(db, None, owner)]
        elevated = {r.id: r for r in hotel_service.list(db, None, super_admin)}

        assert public_ids == [other.id]
        assert owner_ids == [other.id]
        assert hotel.id in elevated
        assert elevated[hotel.id].active is False
        assert elevated[hotel.id].last_modification["action"] == "deleted"

    def test_record_not_physically_removed(self, db, owner, hotel):
        hotel_service.soft_delete(db, hotel.id, owner)
        assert hotel_service.crud.load(db, hotel.id) is not None

    def test_idempotent(self, db, owner, hotel):
        hotel_service.soft_delete(db, hotel.id, owner)
        hotel_service.soft_delete(db, hotel.id, owner)

        actions = [e.action for e in hotel_service.status_history(db, hotel.id, owner)]
        assert actions == ["created", "deleted"]

    def test_non_owner_rejected(self, db, other_admin, hotel):
        with pytest.raises(ForbiddenException):
            hotel_service.soft_delete(db, hotel.id, other_admin)
        db.refresh(hotel)
        assert hotel.active is True


class TestToggleActive:

    def test_owner_cannot_toggle_but_can_update(self, db, owner, hotel):
        with pytest.raises(ForbiddenException):
            hotel_service.toggle_active(db, hotel.id, owner)

        updated = hotel_service.update(db, hotel.id, HotelUpdate(description="Renovado"), owner)
        assert updated.description == "Renovado"
        assert updated.active is True

    def test_privilege_checked_before_lookup(self, db, owner):
        with pytest.raises(ForbiddenException):
            hotel_service.toggle_active(db, uuid.uuid4(), owner)

    def test_flips_and_records_reason(self, db, super_admin, hotel):
        record = hotel_service.toggle_active(db, hotel.id, super_admin, "Documentación vencida")
        assert record.active is False
        assert record.last_modification["action"] == "deactivated"
        assert record.last_modification["reason"] == "Documentación vencida"

        record = hotel_service.toggle_active(db, hotel.id, super_admin)
        assert record.active is True
        assert record.last_modification["reason"] == DEFAULT_TOGGLE_REASON

        events = hotel_service.status_history(db, hotel.id, super_admin)
        assert [(e.from_status, e.to_status) for e in events] == [
            (None, ListingStatus.active),
            (ListingStatus.active, ListingStatus.inactive),
            (ListingStatus.inactive, ListingStatus.active),
        ]

    def test_email_configured_super_admin(self, db, email_super_admin, hotel):
        assert hotel_service.toggle_active(db, hotel.id, email_super_admin).active is False


class TestQueries:

    def test_public_filters(self, db, make_hotel):
        cheap = make_hotel(name="Posada", price=500, location={"city": "Taxco"}, capacity={"guests": 2})
        big = make_hotel(name="Gran Hotel", price=3000, location={"city": "Valle de Bravo"},
                         capacity={"guests": 10}, category="resort")

        def ids(**filters):
            return [r.id for r in hotel_service.list(db, ListingFilters(**filters), None)]

        assert ids(city="taxco") == [cheap.id]
        assert ids(city="bravo") == [big.id]
        assert ids(price_max=1000) == [cheap.id]
        assert ids(price_min=1000) == [big.id]
        assert ids(guests=5) == [big.id]
        assert ids(category="resort") == [big.id]

    def test_elevated_list_ignores_filters(self, db, super_admin, make_hotel):
        make_hotel(location={"city": "Taxco"})
        make_hotel(location={"city": "Tepoztlán"})
        records = hotel_service.list(db, ListingFilters(city="taxco"), super_admin)
        assert len(records) == 2

    def test_order_by_rating_then_recent_modification(self, db, make_hotel):
        unrated = make_hotel(name="Sin calificación")
        good = make_hotel(name="Bueno")
        best = make_hotel(name="Mejor")
        older = make_hotel(name="Sin calificación antiguo")

        now = datetime.now(timezone.utc)
        good.rating_average = 4.1
        best.rating_average = 4.8
        unrated.updated_at = now
        older.updated_at = now - timedelta(days=3)
        db.commit()

        names = [r.name for r in hotel_service.list(db, None, None)]
        assert names == ["Mejor", "Bueno", "Sin calificación", "Sin calificación antiguo"]

    def test_list_mine(self, db, owner, other_admin, super_admin, visitor, make_hotel):
        mine = make_hotel()
        theirs = make_hotel(user=other_admin)

        assert [r.id for r in hotel_service.list_mine(db, owner)] == [mine.id]
        assert {r.id for r in hotel_service.list_mine(db, super_admin)} == {mine.id, theirs.id}
        with pytest.raises(ForbiddenException):
            hotel_service.list_mine(db, visitor)

    def test_status_history_requires_owner(self, db, other_admin, hotel):
        with pytest.raises(ForbiddenException):
            hotel_service.status_history(db, hotel.id, other_admin)


class TestImages:

    def test_set_primary_and_main_image(self, db, owner, hotel):
        hotel.images = ["a", "b", "c"]
        db.commit()

        data, changed = hotel_service.set_primary_image(db, hotel.id, 2, owner)
        assert changed is True
        assert data == {"main_image": "c", "total_images": 3}
        assert hotel_service.get_images(db, hotel.id, owner) == ["c", "a", "b"]
        assert hotel_service.get_main_image(db, hotel.id) == {"main_image": "c", "total_images": 3}

    def test_set_primary_zero_is_noop(self, db, owner, hotel):
        hotel.images = ["a", "b"]
        db.commit()

        data, changed = hotel_service.set_primary_image(db, hotel.id, 0, owner)
        assert changed is False
        assert data["main_image"] == "a"
        assert hotel_service.get_images(db, hotel.id, owner) == ["a", "b"]

    def test_non_owner_cannot_manage_images(self, db, other_admin, hotel):
        with pytest.raises(ForbiddenException):
            hotel_service.get_images(db, hotel.id, other_admin)

    def test_inactive_record_hidden_for_owner_images(self, db, owner, super_admin, hotel):
        hotel_service.soft_delete(db, hotel.id, owner)
        with pytest.raises(NotFoundException):
            hotel_service.get_images(db, hotel.id, owner)
        assert hotel_service.get_images(db, hotel.id, super_admin) == []

    def test_main_image_of_inactive_record(self, db, owner, hotel):
        hotel_service.soft_delete(db, hotel.id, owner)
        with pytest.raises(NotFoundException):
            hotel_service.get_main_image(db, hotel.id)

    def test_main_image_without_images(self, db, hotel):
        assert hotel_service.get_main_image(db, hotel.id) == {"main_image": None, "total_images": 0}
