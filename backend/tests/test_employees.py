"""Тесты сотрудников: уникальность, карточка, ограничения на удаление."""

API = "/api/v1/assets"

EMPLOYEE = {
    "name": "Анна Смирнова",
    "employee_code": "EMP-100",
    "email": "anna.smirnova@company.com",
    "department": "Finance",
    "position": "Бухгалтер",
    "join_date": "2023-09-01",
}


def test_create_employee(client, manager_headers):
    response = client.post(f"{API}/employees/", json=EMPLOYEE, headers=manager_headers)
    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "active"
    assert body["employee_code"] == "EMP-100"


def test_duplicate_code_and_email(client, manager_headers):
    client.post(f"{API}/employees/", json=EMPLOYEE, headers=manager_headers)

    response = client.post(
        f"{API}/employees/", json={**EMPLOYEE, "email": "other@company.com"}, headers=manager_headers
    )
    assert response.json()["code"] == "DuplicateEmployeeId"

    response = client.post(
        f"{API}/employees/", json={**EMPLOYEE, "employee_code": "EMP-101"}, headers=manager_headers
    )
    assert response.json()["code"] == "DuplicateEmail"


def test_invalid_email_rejected(client, manager_headers):
    response = client.post(
        f"{API}/employees/", json={**EMPLOYEE, "email": "not-an-email"}, headers=manager_headers
    )
    assert response.status_code == 422


def test_employee_detail_lists_devices(client, user_headers, make_employee, make_device):
    employee = make_employee()
    device = make_device(assigned_to_id=employee.id, status="in_use")
    make_device()

    response = client.get(f"{API}/employees/{employee.id}", headers=user_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["employee"]["id"] == str(employee.id)
    assert [d["id"] for d in body["assigned_devices"]] == [str(device.id)]


def test_cannot_delete_employee_with_assets(client, manager_headers, make_employee, make_account):
    employee = make_employee()
    make_account(assigned_to_id=employee.id)

    response = client.delete(f"{API}/employees/{employee.id}", headers=manager_headers)
    assert response.status_code == 400
    assert response.json()["code"] == "EmployeeHasAssets"


def test_cannot_delete_manager(client, manager_headers, make_employee):
    boss = make_employee()
    make_employee(manager_id=boss.id)

    response = client.delete(f"{API}/employees/{boss.id}", headers=manager_headers)
    assert response.json()["code"] == "EmployeeIsManager"


def test_employee_cannot_manage_self(client, manager_headers, make_employee):
    employee = make_employee()
    response = client.patch(
        f"{API}/employees/{employee.id}",
        json={"manager_id": str(employee.id)},
        headers=manager_headers,
    )
    assert response.json()["code"] == "InvalidManager"


def test_update_and_delete_employee(client, manager_headers, make_employee):
    employee = make_employee()
    response = client.patch(
        f"{API}/employees/{employee.id}",
        json={"status": "on_leave", "department": "Sales"},
        headers=manager_headers,
    )
    assert response.json()["status"] == "on_leave"
    assert response.json()["department"] == "Sales"

    response = client.delete(f"{API}/employees/{employee.id}", headers=manager_headers)
    assert response.status_code == 200
    response = client.get(f"{API}/employees/{employee.id}", headers=manager_headers)
    assert response.json()["code"] == "EmployeeNotFound"


def test_search_employees(client, user_headers, make_employee):
    make_employee(name="Ольга Кузнецова")
    make_employee(name="Пётр Иванов")
    response = client.get(f"{API}/employees/?search=Ольга", headers=user_headers)
    assert [e["name"] for e in response.json()] == ["Ольга Кузнецова"]
