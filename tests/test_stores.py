"""
Tests for store, pincode and staff management rules.
"""

import pytest

from kaghati.auth import verify_password
from kaghati.db import PincodeCreate, PincodeUpdate, StaffCreate, StaffUpdate, StoreCreate, StoreUpdate, RecordStatus
from kaghati.processor.staff import authenticate_staff, create_staff, update_staff
from kaghati.processor.stores import (
    create_pincode,
    create_store,
    update_pincode,
    update_store,
    validate_google_map,
    validate_pin_code,
)


class TestValidation:
    def test_pin_code_must_be_six_digits(self):
        assert validate_pin_code(" 560001 ") == "560001"
        for bad in ("56001", "5600011", "56000A", ""):
            with pytest.raises(ValueError):
                validate_pin_code(bad)

    def test_google_map_link(self):
        assert validate_google_map("") == ""
        assert validate_google_map("https://maps.app.goo.gl/abc") == "https://maps.app.goo.gl/abc"
        with pytest.raises(ValueError):
            validate_google_map("maps.google.com")
        with pytest.raises(ValueError):
            validate_google_map("ftp://example.com/map")


class TestStoreManagement:
    """Tests for create_store and update_store."""

    def test_new_store_gets_default_rings_and_closed_hours(self, run_with_db):
        store = run_with_db(lambda db: create_store(db, StoreCreate(store_name="Indiranagar", store_code="BLR2")))

        assert store.radius == {"R1": 3, "R2": 5, "R3": 7, "R4": 10, "R5": 15}
        assert store.local_delivery["Mon"] == {"isOpen": False, "timeSlots": []}

    def test_duplicate_code_rejected(self, run_with_db):
        async def scenario(db):
            await create_store(db, StoreCreate(store_name="One", store_code="BLR1"))
            await create_store(db, StoreCreate(store_name="Two", store_code="BLR1"))

        with pytest.raises(ValueError):
            run_with_db(scenario)

    def test_invalid_rings_rejected(self, run_with_db):
        data = StoreCreate(store_name="One", store_code="BLR1", radius={"R1": 5, "R2": 3})
        with pytest.raises(ValueError):
            run_with_db(lambda db: create_store(db, data))

    def test_partial_update(self, run_with_db):
        async def scenario(db):
            store = await create_store(db, StoreCreate(store_name="One", store_code="BLR1"))
            return await update_store(db, store.id, StoreUpdate(status=RecordStatus.ACTIVE, city="Bengaluru"))

        store = run_with_db(scenario)

        assert store.status == RecordStatus.ACTIVE
        assert store.city == "Bengaluru"
        assert store.store_name == "One"

    def test_update_missing_store(self, run_with_db):
        assert run_with_db(lambda db: update_store(db, "missing", StoreUpdate(city="X"))) is None


class TestPincodeManagement:
    """Tests for create_pincode and update_pincode."""

    def test_pincode_takes_store_code(self, run_with_db):
        async def scenario(db):
            store = await create_store(db, StoreCreate(store_name="One", store_code="BLR1"))
            return await create_pincode(db, PincodeCreate(pin_code="560001", store_id=store.id))

        pincode = run_with_db(scenario)

        assert pincode.store_code == "BLR1"

    def test_unknown_store(self, run_with_db):
        with pytest.raises(LookupError):
            run_with_db(lambda db: create_pincode(db, PincodeCreate(pin_code="560001", store_id="missing")))

    def test_duplicate_pincode_for_store(self, run_with_db):
        async def scenario(db):
            store = await create_store(db, StoreCreate(store_name="One", store_code="BLR1"))
            await create_pincode(db, PincodeCreate(pin_code="560001", store_id=store.id))
            await create_pincode(db, PincodeCreate(pin_code="560001", store_id=store.id))

        with pytest.raises(ValueError):
            run_with_db(scenario)

    def test_move_pincode_to_other_store(self, run_with_db):
        async def scenario(db):
            one = await create_store(db, StoreCreate(store_name="One", store_code="BLR1"))
            two = await create_store(db, StoreCreate(store_name="Two", store_code="BLR2"))
            pincode = await create_pincode(db, PincodeCreate(pin_code="560001", store_id=one.id))
            return two, await update_pincode(db, pincode.id, PincodeUpdate(store_id=two.id))

        two, pincode = run_with_db(scenario)

        assert pincode.store_id == two.id
        assert pincode.store_code == "BLR2"


class TestStaffManagement:
    """Tests for staff accounts."""

    def test_create_hashes_password_and_normalizes_email(self, run_with_db):
        member = run_with_db(lambda db: create_staff(
            db, StaffCreate(email=" Ravi@Kaghati.in", password="s3cret", store_access=["BLR1"])
        ))

        assert member.email == "ravi@kaghati.in"
        assert verify_password("s3cret", member.password_hash)
        assert member.store_access == ["BLR1"]

    def test_duplicate_email_rejected(self, run_with_db):
        async def scenario(db):
            await create_staff(db, StaffCreate(email="ravi@kaghati.in", password="a"))
            await create_staff(db, StaffCreate(email="RAVI@kaghati.in", password="b"))

        with pytest.raises(ValueError):
            run_with_db(scenario)

    def test_authenticate(self, run_with_db):
        async def scenario(db):
            await create_staff(db, StaffCreate(email="ravi@kaghati.in", password="s3cret"))
            wrong = await authenticate_staff(db, "ravi@kaghati.in", "nope")
            right = await authenticate_staff(db, "Ravi@Kaghati.in", "s3cret")
            return wrong, right

        wrong, right = run_with_db(scenario)

        assert wrong is None
        assert right.last_signed_in is not None

    def test_inactive_staff_cannot_sign_in(self, run_with_db):
        async def scenario(db):
            member = await create_staff(db, StaffCreate(email="ravi@kaghati.in", password="s3cret"))
            await update_staff(db, member.id, StaffUpdate(status=RecordStatus.INACTIVE))
            return await authenticate_staff(db, "ravi@kaghati.in", "s3cret")

        assert run_with_db(scenario) is None

    def test_password_change(self, run_with_db):
        async def scenario(db):
            member = await create_staff(db, StaffCreate(email="ravi@kaghati.in", password="old"))
            await update_staff(db, member.id, StaffUpdate(password="new"))
            return await authenticate_staff(db, "ravi@kaghati.in", "new")

        assert run_with_db(scenario) is not None
