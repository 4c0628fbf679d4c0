#!/usr/bin/env python3
"""
Check-in -> checkout lifecycle against a real (SQLite) ledger.
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from conftest import BANGALORE, CHENNAI
from core.errors import AlreadyCheckedIn, InvalidCoordinate, NoActiveCheckin, NotAuthorizedForClient
from models.checkin import Checkin, CheckinStatus
from models.client import Client, EmployeeClient
from services.ledger import LedgerOutcome
from utils.datetime_helpers import ensure_utc


def _rows_for(engine, employee_id):
    with Session(engine) as session:
        return session.exec(select(Checkin).where(Checkin.employee_id == employee_id)).all()


def test_checkin_near_client_has_no_warning(machine, team):
    result = machine.check_in(team["arjun"].id, team["bangalore"].id, 12.9720, 77.5950)

    assert result.warning is False
    assert result.distance_km == pytest.approx(0.06, abs=0.01)
    assert result.client_id == team["bangalore"].id
    assert result.checkin_time.tzinfo is not None


def test_checkin_far_from_client_sets_warning(machine, team):
    result = machine.check_in(team["arjun"].id, team["bangalore"].id, *CHENNAI)

    assert result.warning is True
    assert result.distance_km > 280


def test_warning_uses_unrounded_distance(machine, team, engine):
    # 0.004524 degrees of latitude is about 0.503 km, which rounds to 0.5
    with Session(engine) as session:
        yard = Client(name="Equator Yard", latitude=0.0, longitude=0.0)
        session.add(yard)
        session.commit()
        session.refresh(yard)
        session.add(EmployeeClient(employee_id=team["arjun"].id, client_id=yard.id))
        session.commit()
        yard_id = yard.id

    result = machine.check_in(team["arjun"].id, yard_id, 0.004524, 0.0)

    assert result.distance_km == 0.5
    assert result.warning is True


def test_checkin_persists_rounded_distance_and_notes(machine, team, engine):
    result = machine.check_in(
        team["priya"].id, team["chennai"].id, 13.0900, 80.2700, notes="  Quarterly audit  "
    )

    [row] = _rows_for(engine, team["priya"].id)
    assert row.id == result.checkin_id
    assert row.status == CheckinStatus.CHECKED_IN
    assert row.checkout_time is None
    assert row.distance_from_client == round(row.distance_from_client, 2)
    assert row.distance_from_client == result.distance_km
    assert row.notes == "Quarterly audit"


def test_blank_notes_are_stored_as_none(machine, team, engine):
    machine.check_in(team["priya"].id, team["chennai"].id, *CHENNAI, notes="   ")

    [row] = _rows_for(engine, team["priya"].id)
    assert row.notes is None


def test_second_checkin_fails_while_active(machine, team):
    machine.check_in(team["arjun"].id, team["bangalore"].id, *BANGALORE)

    with pytest.raises(AlreadyCheckedIn):
        machine.check_in(team["arjun"].id, team["chennai"].id, *CHENNAI)


def test_unassigned_and_unknown_clients_look_the_same(machine, team):
    with pytest.raises(NotAuthorizedForClient) as unassigned:
        machine.check_in(team["arjun"].id, team["unassigned"].id, 18.5204, 73.8567)
    with pytest.raises(NotAuthorizedForClient) as unknown:
        machine.check_in(team["arjun"].id, 987654, 18.5204, 73.8567)

    assert unassigned.value.message == unknown.value.message


def test_invalid_position_is_rejected_without_a_row(machine, team, engine):
    with pytest.raises(InvalidCoordinate):
        machine.check_in(team["arjun"].id, team["bangalore"].id, 95.0, 77.5946)

    assert _rows_for(engine, team["arjun"].id) == []


def test_checkout_before_checkin_fails(machine, team):
    with pytest.raises(NoActiveCheckin):
        machine.check_out(team["kiran"].id)


def test_double_checkout_fails_on_second_call(machine, team):
    machine.check_in(team["kiran"].id, team["bangalore"].id, *BANGALORE)
    machine.check_out(team["kiran"].id)

    with pytest.raises(NoActiveCheckin):
        machine.check_out(team["kiran"].id)


def test_checkout_closes_row_without_touching_distance(machine, team, engine):
    opened = machine.check_in(team["kiran"].id, team["bangalore"].id, *CHENNAI)
    closed = machine.check_out(team["kiran"].id)

    [row] = _rows_for(engine, team["kiran"].id)
    assert closed.checkin_id == opened.checkin_id
    assert row.status == CheckinStatus.CHECKED_OUT
    assert ensure_utc(row.checkout_time) > ensure_utc(row.checkin_time)
    assert row.distance_from_client == opened.distance_km
    assert closed.hours_worked >= 0


def test_checkin_allowed_again_after_checkout(machine, team, engine):
    machine.check_in(team["arjun"].id, team["bangalore"].id, *BANGALORE)
    machine.check_out(team["arjun"].id)
    machine.check_in(team["arjun"].id, team["chennai"].id, *CHENNAI)

    statuses = sorted(row.status.value for row in _rows_for(engine, team["arjun"].id))
    assert statuses == ["checked_in", "checked_out"]


def test_checkout_reports_hours_from_stored_checkin_time(ledger, machine, team):
    three_hours_ago = datetime.now(timezone.utc) - timedelta(hours=3)
    ledger.try_open_checkin(
        Checkin(
            employee_id=team["priya"].id,
            client_id=team["bangalore"].id,
            checkin_time=three_hours_ago,
            distance_from_client=0.0,
        )
    )

    result = machine.check_out(team["priya"].id)
    assert result.hours_worked == pytest.approx(3.0, abs=0.01)


def test_ledger_bumps_checkout_that_is_not_after_checkin(ledger, team):
    checkin_time = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)
    ledger.try_open_checkin(
        Checkin(
            employee_id=team["arjun"].id,
            client_id=team["bangalore"].id,
            checkin_time=checkin_time,
            distance_from_client=0.0,
        )
    )

    result = ledger.try_close_checkin(team["arjun"].id, checkin_time)
    assert result.outcome == LedgerOutcome.SUCCESS
    assert result.checkin.checkout_time > checkin_time


def test_ledger_reports_already_active_from_the_index(ledger, team):
    # Skips any pre-flight read: the insert itself must be rejected
    first = ledger.try_open_checkin(
        Checkin(employee_id=team["arjun"].id, client_id=team["bangalore"].id, distance_from_client=0.0)
    )
    second = ledger.try_open_checkin(
        Checkin(employee_id=team["arjun"].id, client_id=team["chennai"].id, distance_from_client=1.0)
    )

    assert first.outcome == LedgerOutcome.SUCCESS
    assert second.outcome == LedgerOutcome.ALREADY_ACTIVE


def test_partial_index_rejects_direct_second_active_row(engine, team):
    with Session(engine) as session:
        session.add(Checkin(employee_id=team["kiran"].id, client_id=team["bangalore"].id, distance_from_client=0.0))
        session.commit()

        session.add(Checkin(employee_id=team["kiran"].id, client_id=team["chennai"].id, distance_from_client=0.0))
        with pytest.raises(IntegrityError):
            session.commit()


def test_partial_index_allows_many_closed_rows(engine, team):
    base = datetime(2026, 3, 2, 8, 0, tzinfo=timezone.utc)
    with Session(engine) as session:
        for hour in range(3):
            session.add(
                Checkin(
                    employee_id=team["kiran"].id,
                    client_id=team["bangalore"].id,
                    checkin_time=base + timedelta(hours=hour),
                    checkout_time=base + timedelta(hours=hour, minutes=30),
                    distance_from_client=0.0,
                    status=CheckinStatus.CHECKED_OUT,
                )
            )
        session.commit()

    assert len(_rows_for(engine, team["kiran"].id)) == 3


def test_active_checkin_lookup(machine, team):
    assert machine.active_checkin(team["arjun"].id) is None

    opened = machine.check_in(team["arjun"].id, team["bangalore"].id, *BANGALORE)
    assert machine.active_checkin(team["arjun"].id).id == opened.checkin_id
