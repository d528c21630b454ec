import pytest

from tabletap.app.db import get_session
from tabletap.app.repos_sqlalchemy import staff_repo_sql, tables_repo_sql
from tabletap.app.schemas import CheckInPayload, StaffIn
from tests._seed_cafe import make_owner


@pytest.mark.anyio
async def test_default_layout_created_once(database):
    _, cafe = await make_owner()
    async with get_session() as session:
        tables = await tables_repo_sql.list_tables(session, cafe.id)
        again = await tables_repo_sql.list_tables(session, cafe.id)

    assert len(tables) == len(again) == 42
    sections = {}
    for table in tables:
        sections.setdefault(table.section, []).append(table.capacity)
    assert {name: len(caps) for name, caps in sections.items()} == {"ac": 28, "non_ac": 9, "bar": 5}
    assert set(sections["bar"]) == {2}
    assert all(table.status == "available" for table in tables)


def test_table_assignment_and_release(client, owner):
    cafe_id = owner["cafe"].id
    base = f"/api/cafes/{cafe_id}/tables"
    table = client.get(base, headers=owner["headers"]).json()["data"][0]
    order = client.post("/api/orders", json={"cafe_id": cafe_id, "total_amount": 5}).json()

    assigned = client.post(
        f"{base}/{table['id']}/assign", json={"order_id": order["id"]}, headers=owner["headers"]
    ).json()["data"]
    assert assigned["status"] == "occupied"
    assert assigned["current_order_id"] == order["id"]

    freed = client.patch(
        f"{base}/{table['id']}/status", json={"status": "available"}, headers=owner["headers"]
    ).json()["data"]
    assert freed["current_order_id"] is None

    bad = client.patch(
        f"{base}/{table['id']}/status", json={"status": "broken"}, headers=owner["headers"]
    )
    assert bad.status_code == 422


@pytest.mark.anyio
async def test_attendance_check_in_break_and_out(database):
    _, cafe = await make_owner()
    async with get_session() as session:
        member = await staff_repo_sql.create_staff(session, cafe.id, StaffIn(name="Sam"))
        record = await staff_repo_sql.check_in(session, cafe.id, CheckInPayload(staff_id=member.id))
        with pytest.raises(ValueError):
            await staff_repo_sql.check_in(session, cafe.id, CheckInPayload(staff_id=member.id))
        on_break = await staff_repo_sql.set_break(session, cafe.id, record.id, True)
        metrics = await staff_repo_sql.payroll_metrics(session, cafe.id, record.check_in.date())
        done = await staff_repo_sql.check_out(session, cafe.id, record.id)

    assert on_break.status == "on_break"
    assert metrics == {
        "total_employees": 1,
        "currently_working": 0,
        "on_break": 1,
        "on_leave": 0,
    }
    assert done.check_out is not None


def test_shift_must_end_after_start(client, owner):
    base = f"/api/cafes/{owner['cafe'].id}"
    member = client.post(
        f"{base}/staff", json={"name": "Kim", "role": "barista"}, headers=owner["headers"]
    ).json()["data"]
    resp = client.post(
        f"{base}/shifts",
        json={
            "staff_id": member["id"],
            "start_time": "2024-05-01T17:00:00+00:00",
            "end_time": "2024-05-01T09:00:00+00:00",
        },
        headers=owner["headers"],
    )
    assert resp.status_code == 400
    good = client.post(
        f"{base}/shifts",
        json={
            "staff_id": member["id"],
            "start_time": "2024-05-01T09:00:00+00:00",
            "end_time": "2024-05-01T17:00:00+00:00",
        },
        headers=owner["headers"],
    )
    assert good.status_code == 200
