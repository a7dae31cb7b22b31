from sponsorkit.utils.pagination import build_pagination, parse_page_args
from factories import make_child, make_school


def test_middle_page_window():
    p = build_pagination(page=2, limit=20, total_count=45)
    assert p == {
        "currentPage": 2,
        "totalPages": 3,
        "totalCount": 45,
        "limit": 20,
        "hasNextPage": True,
        "hasPrevPage": True,
        "startIndex": 21,
        "endIndex": 40,
    }


def test_last_partial_page():
    p = build_pagination(page=3, limit=20, total_count=45)
    assert p["hasNextPage"] is False
    assert (p["startIndex"], p["endIndex"]) == (41, 45)


def test_empty_result_set():
    p = build_pagination(page=1, limit=20, total_count=0)
    assert p["totalPages"] == 0
    assert p["hasNextPage"] is False and p["hasPrevPage"] is False
    assert (p["startIndex"], p["endIndex"]) == (1, 0)


def test_parse_page_args_falls_back_on_bad_values():
    assert parse_page_args({}) == (1, 20)
    assert parse_page_args({"page": "abc", "limit": "-5"}) == (1, 20)
    assert parse_page_args({"page": "0", "limit": "0"}) == (1, 20)
    assert parse_page_args({"page": "3", "limit": "10"}) == (3, 10)
    assert parse_page_args({"limit": "5000"}) == (1, 100)


def test_page_past_the_end_is_not_clamped(client, auth, session):
    school = make_school(session)
    for i in range(3):
        make_child(session, school, first=f"Kid{i}")
    r = client.get("/api/children?page=5&limit=2", headers=auth)
    assert r.status_code == 200
    body = r.get_json()
    assert body["data"] == []
    assert body["pagination"]["currentPage"] == 5
    assert body["pagination"]["totalPages"] == 2
    assert body["pagination"]["totalCount"] == 3


def test_count_and_page_agree(client, auth, session):
    school = make_school(session)
    for i in range(5):
        make_child(session, school, first=f"Kid{i}")
    first = client.get("/api/children?limit=2", headers=auth).get_json()
    last = client.get("/api/children?limit=2&page=3", headers=auth).get_json()
    assert first["pagination"]["totalCount"] == 5
    assert len(first["data"]) == 2 and len(last["data"]) == 1
    assert last["pagination"]["endIndex"] == 5
