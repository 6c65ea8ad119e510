import pytest

from src.event_registration.event_registration.core.exceptions import ConflictError, NotFoundError, ValidationError


def test_roles_are_limited_to_known_names(container):
    service = container.directory_service

    with pytest.raises(ValidationError) as exc:
        service.create_role(name="manager")
    assert "admin, employee" in str(exc.value)

    with pytest.raises(ConflictError):
        service.create_role(name="Employee")


def test_unused_role_can_be_deleted_and_recreated(container):
    service = container.directory_service

    service.delete_role(1)
    with pytest.raises(NotFoundError):
        service.get_role(1)

    recreated = service.create_role(name=" ADMIN ")
    assert recreated.name == "admin"
    assert [r.name for r in service.list_roles()] == ["employee", "admin"]


def test_role_in_use_cannot_be_renamed_or_deleted(container, make_user):
    make_user("alice")
    service = container.directory_service

    with pytest.raises(ValidationError) as exc:
        service.update_role(2, name="admin")
    assert "cannot be renamed" in str(exc.value)

    with pytest.raises(ValidationError):
        service.delete_role(2)

    assert service.update_role(2, name="employee").name == "employee"


def test_rename_unused_role_to_taken_name_conflicts(container):
    with pytest.raises(ConflictError):
        container.directory_service.update_role(1, name="employee")


def test_departments_use_fixed_codes(container):
    service = container.directory_service

    assert [d.name for d in service.list_departments()] == ["DDD", "DFO", "DRH", "DSSI"]
    assert service.get_department(3).name == "DRH"
    with pytest.raises(ConflictError):
        service.create_department(name="drh")
    with pytest.raises(ValidationError):
        service.create_department(name="Marketing")
    with pytest.raises(NotFoundError):
        service.get_department(99)
