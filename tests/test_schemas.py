"""Wire format tests for users and visited paths."""

import json
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from visitlog.auth.dependencies import Principal
from visitlog.schemas.visit import UserRead, VisitedPathRead


def test_visited_path_wire_shape():
    vp = VisitedPathRead(
        path="/path1", date=datetime(2018, 11, 17, tzinfo=timezone.utc), user_id=49185
    )
    assert json.loads(vp.model_dump_json()) == {
        "path": "/path1",
        "date": "2018-11-17T00:00:00Z",
        "user_id": 49185,
    }


def test_visited_path_survives_the_wire():
    original = VisitedPathRead(
        path="/a/b", date=datetime(2019, 3, 4, 5, 6, 7, tzinfo=timezone.utc), user_id=7
    )
    parsed = VisitedPathRead.model_validate_json(original.model_dump_json())
    assert parsed == original


def test_visited_path_dates_normalize_to_utc():
    plus_two = timezone(timedelta(hours=2))
    vp = VisitedPathRead(path="/", date=datetime(2018, 11, 17, 2, tzinfo=plus_two), user_id=1)
    assert vp.date == datetime(2018, 11, 17, tzinfo=timezone.utc)
    assert vp.model_dump(mode="json")["date"] == "2018-11-17T00:00:00Z"

    naive = VisitedPathRead(path="/", date=datetime(2018, 11, 17), user_id=1)
    assert naive.date.tzinfo is timezone.utc


def test_user_wire_shape():
    user = UserRead(id=914611345, email="janedoe@example.com", name="Jane Doe", is_admin=True)
    assert json.loads(user.model_dump_json()) == {
        "id": 914611345,
        "email": "janedoe@example.com",
        "name": "Jane Doe",
        "is_admin": True,
    }


@pytest.mark.parametrize("bad_id", [-1, 2_147_483_648])
def test_user_id_out_of_range(bad_id):
    with pytest.raises(ValidationError):
        UserRead.model_validate_json(
            json.dumps({"id": bad_id, "email": "x@example.com", "name": "X", "is_admin": False})
        )


def test_principal_round_trips_through_user():
    user = UserRead(id=91461, email="johndoe@example.com", name="John Doe", is_admin=False)
    principal = Principal.from_user(user)
    assert principal.is_known
    assert principal.as_user() == user
    assert not Principal(email="nobody@example.com").is_known
