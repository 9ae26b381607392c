"""Тесты закрепления активов за сотрудниками и установки комплектующих."""

API = "/api/v1/assets"


def _assign(client, headers, employee_id, asset_type, asset_id, action="assign"):
    return client.post(
        f"{API}/employees/{employee_id}/assign",
        json={"action": action, "asset_type": asset_type, "asset_id": str(asset_id)},
        headers=headers,
    )


def test_assign_device_marks_in_use_and_lists_it(client, manager_headers, make_employee, make_device):
    employee = make_employee()
    device = make_device()

    response = _assign(client, manager_headers, employee.id, "device", device.id)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["assigned_to_id"] == str(employee.id)
    assert data["status"] == "in_use"
    assert data["assigned_to"]["name"] == employee.name

    held = client.get(f"{API}/employees/{employee.id}/assets", headers=manager_headers).json()
    assert [d["id"] for d in held["devices"]] == [str(device.id)]
    assert held["components"] == [] and held["accounts"] == []


def test_assign_then_unassign_restores_state(client, manager_headers, make_employee, make_device):
    employee = make_employee()
    device = make_device()

    _assign(client, manager_headers, employee.id, "device", device.id)
    response = _assign(client, manager_headers, employee.id, "device", device.id, action="unassign")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["assigned_to_id"] is None
    assert data["status"] == "available"

    held = client.get(f"{API}/employees/{employee.id}/assets", headers=manager_headers).json()
    assert held["devices"] == []


def test_assign_twice_to_same_employee(client, manager_headers, make_employee, make_device):
    employee = make_employee()
    device = make_device()
    _assign(client, manager_headers, employee.id, "device", device.id)

    response = _assign(client, manager_headers, employee.id, "device", device.id)
    assert response.status_code == 400
    assert response.json()["kind"] == "AlreadyAssigned"


def test_assign_held_asset_names_current_holder(client, manager_headers, make_employee, make_device):
    holder = make_employee(name="Иван Петров")
    other = make_employee()
    device = make_device()
    _assign(client, manager_headers, holder.id, "device", device.id)

    response = _assign(client, manager_headers, other.id, "device", device.id)
    assert response.status_code == 400
    assert response.json()["kind"] == "AlreadyAssigned"
    assert "Иван Петров" in response.json()["detail"]

    held = client.get(f"{API}/employees/{holder.id}/assets", headers=manager_headers).json()
    assert len(held["devices"]) == 1


def test_unassign_by_non_holder_rejected(client, manager_headers, make_employee, make_device):
    holder = make_employee()
    other = make_employee()
    device = make_device()
    _assign(client, manager_headers, holder.id, "device", device.id)

    response = _assign(client, manager_headers, other.id, "device", device.id, action="unassign")
    assert response.status_code == 400
    assert response.json()["kind"] == "NotAssignedToEmployee"


def test_account_assignment_status_follows_holder(client, manager_headers, make_employee, make_account):
    employee = make_employee()
    account = make_account(status="inactive")

    response = _assign(client, manager_headers, employee.id, "account", account.id)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["assignment_status"] == "assigned"
    assert data["status"] == "inactive"

    response = _assign(client, manager_headers, employee.id, "account", account.id)
    assert response.json()["kind"] == "AlreadyAssigned"

    response = client.post(
        f"{API}/unassign",
        json={"asset_type": "account", "asset_id": str(account.id)},
        headers=manager_headers,
    )
    assert response.status_code == 200
    assert response.json()["data"]["assignment_status"] == "available"


def test_component_cannot_be_assigned_and_installed(
    client, manager_headers, make_employee, make_device, make_component
):
    employee = make_employee()
    device = make_device()
    component = make_component()
    _assign(client, manager_headers, employee.id, "component", component.id)

    response = client.post(
        f"{API}/components/{component.id}/install",
        json={"device_id": str(device.id)},
        headers=manager_headers,
    )
    assert response.status_code == 400
    assert response.json()["kind"] == "ConflictingAssignment"

    installed = make_component()
    response = client.post(
        f"{API}/components/{installed.id}/install",
        json={"device_id": str(device.id)},
        headers=manager_headers,
    )
    assert response.status_code == 200
    assert response.json()["installed_in_id"] == str(device.id)

    response = _assign(client, manager_headers, employee.id, "component", installed.id)
    assert response.status_code == 400
    assert response.json()["kind"] == "ConflictingAssignment"


def test_install_into_other_device_and_uninstall(
    client, manager_headers, make_device, make_component
):
    first = make_device()
    second = make_device()
    component = make_component()
    client.post(
        f"{API}/components/{component.id}/install",
        json={"device_id": str(first.id)},
        headers=manager_headers,
    )

    response = client.post(
        f"{API}/components/{component.id}/install",
        json={"device_id": str(second.id)},
        headers=manager_headers,
    )
    assert response.json()["kind"] == "AlreadyAssigned"

    response = client.post(f"{API}/components/{component.id}/uninstall", headers=manager_headers)
    assert response.status_code == 200
    assert response.json()["installed_in_id"] is None

    response = client.post(f"{API}/components/{component.id}/uninstall", headers=manager_headers)
    assert response.json()["code"] == "NotInstalled"


def test_generic_unassign_without_holder(client, manager_headers, make_device):
    device = make_device()
    response = client.post(
        f"{API}/unassign",
        json={"asset_type": "device", "asset_id": str(device.id)},
        headers=manager_headers,
    )
    assert response.status_code == 400
    assert response.json()["code"] == "NotAssigned"


def test_invalid_asset_type_and_action(client, manager_headers, make_employee, make_device):
    employee = make_employee()
    device = make_device()

    response = _assign(client, manager_headers, employee.id, "printer", device.id)
    assert response.status_code == 400
    assert response.json()["code"] == "InvalidAssetType"

    response = _assign(client, manager_headers, employee.id, "device", device.id, action="lend")
    assert response.json()["code"] == "InvalidAction"


def test_missing_employee_and_asset(client, manager_headers, make_employee, make_device):
    employee = make_employee()
    device = make_device()
    missing = "00000000-0000-0000-0000-000000000000"

    response = _assign(client, manager_headers, missing, "device", device.id)
    assert response.status_code == 404
    assert response.json()["code"] == "EmployeeNotFound"

    response = _assign(client, manager_headers, employee.id, "device", missing)
    assert response.status_code == 404
    assert response.json()["code"] == "AssetNotFound"


def test_disposed_device_cannot_be_assigned(client, manager_headers, make_employee, make_device):
    employee = make_employee()
    device = make_device(status="disposed")

    response = _assign(client, manager_headers, employee.id, "device", device.id)
    assert response.status_code == 400
    assert response.json()["code"] == "AssetDisposed"


def test_regular_user_cannot_assign(client, user_headers, make_employee, make_device):
    employee = make_employee()
    device = make_device()
    response = _assign(client, user_headers, employee.id, "device", device.id)
    assert response.status_code == 403


def test_held_assets_listing_is_stable(client, manager_headers, make_employee, make_device, make_account):
    employee = make_employee()
    for _ in range(3):
        device = make_device()
        _assign(client, manager_headers, employee.id, "device", device.id)
    account = make_account()
    _assign(client, manager_headers, employee.id, "account", account.id)

    first = client.get(f"{API}/employees/{employee.id}/assets", headers=manager_headers).json()
    second = client.get(f"{API}/employees/{employee.id}/assets", headers=manager_headers).json()
    assert first == second
    assert len(first["devices"]) == 3
    assert len(first["accounts"]) == 1
