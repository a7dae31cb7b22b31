from sqlalchemy import func, select

from sponsorkit.models import Child, Sponsorship
from sponsorkit.services.sponsorship_sync import count_active_sponsorships, sync_child_sponsorship_status
from factories import make_child, make_school, make_sponsor, sponsor_child


def _child(client, auth, cid):
    r = client.get(f"/api/children/{cid}", headers=auth)
    assert r.status_code == 200
    return r.get_json()


def _assert_flag_matches(session, cid):
    session.expire_all()
    child = session.get(Child, cid)
    assert child.is_sponsored == (count_active_sponsorships(session, cid) > 0)


def test_end_to_end_sponsor_lifecycle(client, auth):
    r = client.post("/api/schools", json={"name": "Test School", "location": "X"}, headers=auth)
    assert r.status_code == 201
    school_id = r.get_json()["id"]

    r = client.post("/api/children", json={
        "firstName": "Jane", "lastName": "Doe", "dateOfBirth": "2015-01-01", "gender": "Female",
        "schoolId": school_id, "class": "P3", "fatherFullName": "F", "motherFullName": "M",
    }, headers=auth)
    assert r.status_code == 201
    child = r.get_json()
    assert child["isSponsored"] is False
    assert child["school"]["name"] == "Test School"

    r = client.post("/api/sponsors", json={"fullName": "Sponsor A", "contact": "x"}, headers=auth)
    assert r.status_code == 201
    sponsor_id = r.get_json()["id"]

    r = client.post(f"/api/children/{child['id']}/sponsors", json={"sponsorId": sponsor_id}, headers=auth)
    assert r.status_code == 201
    assert _child(client, auth, child["id"])["isSponsored"] is True

    r = client.delete(f"/api/children/{child['id']}/sponsors/{sponsor_id}", headers=auth)
    assert r.status_code == 200
    assert r.get_json()["sponsorship"]["isActive"] is False
    assert r.get_json()["sponsorship"]["endDate"] is not None
    assert _child(client, auth, child["id"])["isSponsored"] is False

    r = client.delete(f"/api/children/{child['id']}/sponsors/{sponsor_id}", headers=auth)
    assert r.status_code == 404
    assert r.get_json() == {"error": "Active sponsorship not found"}


def test_duplicate_active_sponsorship_rejected(client, auth, session):
    child = make_child(session, make_school(session))
    sponsor = make_sponsor(session)
    sponsor_child(session, child, sponsor)

    r = client.post(f"/api/children/{child.id}/sponsors", json={"sponsorId": sponsor.id}, headers=auth)
    assert r.status_code == 400
    assert "already has an active sponsorship" in r.get_json()["error"]
    session.expire_all()
    total = session.execute(select(func.count(Sponsorship.id))).scalar_one()
    assert total == 1


def test_ended_pair_can_be_sponsored_again(client, auth, session):
    child = make_child(session, make_school(session))
    sponsor = make_sponsor(session)
    sponsor_child(session, child, sponsor, active=False)
    r = client.post(f"/api/children/{child.id}/sponsors", json={"sponsorId": sponsor.id}, headers=auth)
    assert r.status_code == 201
    _assert_flag_matches(session, child.id)


def test_attach_unknown_rows(client, auth, session):
    child = make_child(session, make_school(session))
    r = client.post(f"/api/children/{child.id}/sponsors", json={"sponsorId": 999}, headers=auth)
    assert r.status_code == 404
    assert r.get_json() == {"error": "Sponsor not found"}
    r = client.post("/api/children/999/sponsors", json={"sponsorId": 1}, headers=auth)
    assert r.status_code == 404
    r = client.post(f"/api/children/{child.id}/sponsors", json={}, headers=auth)
    assert r.status_code == 400


def test_negative_amount_rejected(client, auth, session):
    child = make_child(session, make_school(session))
    sponsor = make_sponsor(session)
    r = client.post(f"/api/children/{child.id}/sponsors",
                    json={"sponsorId": sponsor.id, "monthlyAmount": -3}, headers=auth)
    assert r.status_code == 400
    _assert_flag_matches(session, child.id)


def test_non_finite_amount_rejected(client, auth, session):
    child = make_child(session, make_school(session))
    sponsor = make_sponsor(session)
    for bad in ("inf", "-Infinity", "NaN"):
        r = client.post(f"/api/children/{child.id}/sponsors",
                        json={"sponsorId": sponsor.id, "monthlyAmount": bad}, headers=auth)
        assert r.status_code == 400
        assert r.get_json() == {"error": "Monthly amount must be a number"}
    _assert_flag_matches(session, child.id)

    r = client.post(f"/api/children/{child.id}/sponsors",
                    json={"sponsorId": sponsor.id, "monthlyAmount": "25.5"}, headers=auth)
    spid = r.get_json()["id"]
    r = client.put(f"/api/sponsorships/{spid}", json={"monthlyAmount": "inf"}, headers=auth)
    assert r.status_code == 400
    assert client.get(f"/api/sponsorships?childId={child.id}", headers=auth).get_json()["data"][0]["monthlyAmount"] == 25.5


def test_update_is_active_goes_through_sync(client, auth, session):
    child = make_child(session, make_school(session))
    sp = sponsor_child(session, child, make_sponsor(session))

    r = client.put(f"/api/sponsorships/{sp.id}", json={"isActive": False}, headers=auth)
    assert r.status_code == 200
    assert r.get_json()["endDate"] is not None
    assert _child(client, auth, child.id)["isSponsored"] is False

    r = client.put(f"/api/sponsorships/{sp.id}", json={"isActive": True, "notes": "back"}, headers=auth)
    assert r.status_code == 200
    assert r.get_json()["notes"] == "back"
    assert r.get_json()["endDate"] is None
    assert _child(client, auth, child.id)["isSponsored"] is True


def test_reactivation_respects_duplicate_rule(client, auth, session):
    child = make_child(session, make_school(session))
    sponsor = make_sponsor(session)
    old = sponsor_child(session, child, sponsor, active=False)
    sponsor_child(session, child, sponsor)
    r = client.put(f"/api/sponsorships/{old.id}", json={"isActive": True}, headers=auth)
    assert r.status_code == 400
    _assert_flag_matches(session, child.id)


def test_sponsorships_resource(client, auth, session):
    child = make_child(session, make_school(session))
    sponsor = make_sponsor(session)
    r = client.post("/api/sponsorships", json={"childId": child.id, "sponsorId": sponsor.id,
                                               "paymentMethod": "bank"}, headers=auth)
    assert r.status_code == 201
    spid = r.get_json()["id"]
    assert r.get_json()["child"]["firstName"] == "Jane"

    listed = client.get(f"/api/sponsorships?childId={child.id}&active=true", headers=auth).get_json()
    assert [x["id"] for x in listed["data"]] == [spid]

    r = client.post(f"/api/sponsorships/{spid}/end", headers=auth)
    assert r.status_code == 200
    assert r.get_json()["isActive"] is False
    r = client.post(f"/api/sponsorships/{spid}/end", headers=auth)
    assert r.status_code == 400
    assert _child(client, auth, child.id)["isSponsored"] is False

    assert client.post("/api/sponsorships", json={"sponsorId": sponsor.id}, headers=auth).status_code == 400
    assert client.put("/api/sponsorships/999", json={}, headers=auth).status_code == 404


def test_sync_is_idempotent_and_repairs_drift(session):
    child = make_child(session, make_school(session))
    sponsor_child(session, child, make_sponsor(session))
    child.is_sponsored = False  # drifted
    session.commit()
    assert sync_child_sponsorship_status(session, child.id) is True
    assert sync_child_sponsorship_status(session, child.id) is True
    session.commit()
    _assert_flag_matches(session, child.id)


def test_flag_holds_across_a_sequence_of_writes(client, auth, session):
    child = make_child(session, make_school(session))
    sponsors = [make_sponsor(session, f"S{i}") for i in range(3)]
    for sp in sponsors:
        client.post(f"/api/children/{child.id}/sponsors", json={"sponsorId": sp.id}, headers=auth)
        _assert_flag_matches(session, child.id)
    for sp in sponsors:
        client.delete(f"/api/children/{child.id}/sponsors/{sp.id}", headers=auth)
        _assert_flag_matches(session, child.id)
    assert session.get(Child, child.id).is_sponsored is False
