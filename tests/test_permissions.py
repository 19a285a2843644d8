"""
Pruebas del guardia de propiedad y privilegios.
"""
import uuid
from types import SimpleNamespace

import pytest

from app.core.exceptions import ForbiddenException
from app.core.permissions import (
    authorize,
    can_administer,
    is_elevated,
    require_admin,
    require_elevated,
)
from app.models.user import User, UserRole


def make_user(email="usuario@correo.test", role=UserRole.admin, is_super_admin=False) -> User:
    return User(id=uuid.uuid4(), email=email, full_name="Usuario", role=role, is_super_admin=is_super_admin)


class TestIsElevated:

    def test_anonymous(self):
        assert is_elevated(None) is False

    def test_plain_admin(self):
        assert is_elevated(make_user()) is False

    def test_super_admin_role(self):
        assert is_elevated(make_user(role=UserRole.super_admin)) is True

    def test_super_admin_flag(self):
        assert is_elevated(make_user(is_super_admin=True)) is True

    def test_configured_email_case_insensitive(self):
        assert is_elevated(make_user(email=" DIRECCION@turismo.test ")) is True


class TestAuthorize:

    def test_owner_allowed(self):
        user = make_user()
        record = SimpleNamespace(owner_id=user.id)
        authorize(record, user)

    def test_owner_id_compared_as_string(self):
        user = make_user()
        record = SimpleNamespace(owner_id=str(user.id))
        authorize(record, user)

    def test_non_owner_rejected(self):
        record = SimpleNamespace(owner_id=uuid.uuid4())
        with pytest.raises(ForbiddenException, match="No tienes permiso"):
            authorize(record, make_user(), "No tienes permiso para modificar este alojamiento")

    def test_elevated_non_owner_allowed(self):
        record = SimpleNamespace(owner_id=uuid.uuid4())
        authorize(record, make_user(role=UserRole.super_admin))


class TestRequirements:

    def test_require_elevated_rejects_owner_admin(self):
        with pytest.raises(ForbiddenException):
            require_elevated(make_user())

    def test_require_elevated_accepts_super_admin(self):
        require_elevated(make_user(role=UserRole.super_admin))

    def test_require_admin_rejects_visitor(self):
        with pytest.raises(ForbiddenException):
            require_admin(make_user(role=UserRole.visitor))

    def test_can_administer(self):
        assert can_administer(make_user()) is True
        assert can_administer(make_user(role=UserRole.visitor)) is False
        assert can_administer(make_user(role=UserRole.visitor, is_super_admin=True)) is True
        assert can_administer(None) is False
