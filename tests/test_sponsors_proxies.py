from sqlalchemy import func, select

from sponsorkit.models import Sponsorship
from factories import make_child, make_proxy, make_school, make_sponsor, sponsor_child


def test_create_sponsor_validation(client, auth, session):
    r = client.post("/api/sponsors", json={"fullName": "  "}, headers=auth)
    assert r.get_json() == {"error": "Sponsor full name is required"}
    r = client.post("/api/sponsors", json={"fullName": "A", "email": "nope"}, headers=auth)
    assert r.get_json() == {"error": "Invalid email format"}
    r = client.post("/api/sponsors", json={"fullName": "A", "proxyId": 42}, headers=auth)
    assert r.get_json() == {"error": "Invalid proxy ID"}

    proxy = make_proxy(session)
    r = client.post("/api/sponsors", json={"fullName": "Ann", "email": " Ann@Example.org ",
                                           "proxyId": proxy.id}, headers=auth)
    assert r.status_code == 201
    body = r.get_json()
    assert body["email"] == "ann@example.org"
    assert body["contact"] == ""
    assert body["proxy"]["fullName"] == "Pastor John"


def test_create_sponsor_with_new_proxy(client, auth):
    r = client.post("/api/sponsors", json={
        "fullName": "Bea", "newProxy": {"fullName": "Sister Mary", "role": "Nun"},
    }, headers=auth)
    assert r.status_code == 201
    assert r.get_json()["proxy"]["role"] == "Nun"


def test_update_sponsor(client, auth, session):
    sponsor = make_sponsor(session, proxy=make_proxy(session))
    r = client.put(f"/api/sponsors/{sponsor.id}", json={"phone": "0700", "proxyId": None}, headers=auth)
    assert r.status_code == 200
    assert r.get_json()["phone"] == "0700"
    assert r.get_json()["proxyId"] is None
    r = client.put(f"/api/sponsors/{sponsor.id}", json={"fullName": ""}, headers=auth)
    assert r.get_json() == {"error": "Sponsor full name cannot be empty"}
    assert client.put("/api/sponsors/999", json={}, headers=auth).status_code == 404


def test_delete_sponsor_rules(client, auth, session):
    school = make_school(session)
    child = make_child(session, school)
    busy = make_sponsor(session, "Busy")
    sponsor_child(session, child, busy)
    r = client.delete(f"/api/sponsors/{busy.id}", headers=auth)
    assert r.status_code == 400
    assert r.get_json() == {"error": "Cannot delete sponsor with active sponsorships. End sponsorships first."}

    done = make_sponsor(session, "Done")
    sponsor_child(session, child, done, active=False)
    r = client.delete(f"/api/sponsors/{done.id}", headers=auth)
    assert r.status_code == 200
    session.expire_all()
    left = session.execute(select(func.count(Sponsorship.id))).scalar_one()
    assert left == 1
    assert client.get(f"/api/children/{child.id}", headers=auth).get_json()["isSponsored"] is True


def test_list_sponsors_filters(client, auth, session):
    school = make_school(session)
    child = make_child(session, school)
    proxy = make_proxy(session)
    with_proxy = make_sponsor(session, "Carl", proxy=proxy)
    make_sponsor(session, "Dana")
    sponsor_child(session, child, with_proxy)

    def names(q):
        body = client.get(f"/api/sponsors?{q}", headers=auth).get_json()
        return [s["fullName"] for s in body["data"]]

    assert names("") == ["Carl", "Dana"]
    assert names("proxyId=none") == ["Dana"]
    assert names(f"proxyId={proxy.id}") == ["Carl"]
    assert names("proxy=with_proxy") == ["Carl"]
    assert names("hasSponsorship=true") == ["Carl"]
    assert names("sponsorship=inactive") == ["Dana"]
    assert names("search=pastor") == ["Carl"]

    carl = client.get("/api/sponsors", headers=auth).get_json()["data"][0]
    assert carl["sponsorships"][0]["child"]["school"]["name"] == "Test School"


def test_sponsor_detail_lists_all_sponsorships(client, auth, session):
    child = make_child(session, make_school(session))
    sponsor = make_sponsor(session)
    sponsor_child(session, child, sponsor, active=False)
    sponsor_child(session, child, sponsor)
    body = client.get(f"/api/sponsors/{sponsor.id}", headers=auth).get_json()
    assert len(body["sponsorships"]) == 2
    assert client.get("/api/sponsors/999", headers=auth).get_json() == {"error": "Sponsor not found"}


def test_proxy_crud(client, auth, session):
    r = client.post("/api/proxies", json={"fullName": "Father Tom"}, headers=auth)
    assert r.get_json() == {"error": "Proxy role is required"}
    r = client.post("/api/proxies", json={"fullName": "Father Tom", "role": "Priest",
                                          "email": "tom@parish.org"}, headers=auth)
    assert r.status_code == 201
    pid = r.get_json()["id"]
    assert r.get_json()["sponsorCount"] == 0

    r = client.post("/api/proxies", json={"fullName": "father tom", "role": "Priest"}, headers=auth)
    assert r.get_json() == {"error": "A proxy with this name already exists"}

    r = client.put(f"/api/proxies/{pid}", json={"description": "Parish of St. Paul"}, headers=auth)
    assert r.get_json()["description"] == "Parish of St. Paul"

    listed = client.get("/api/proxies?search=paul", headers=auth).get_json()
    assert [p["id"] for p in listed["data"]] == [pid]
    assert listed["pagination"]["totalCount"] == 1


def test_delete_proxy_guarded(client, auth, session):
    proxy = make_proxy(session)
    sponsor = make_sponsor(session, proxy=proxy)
    r = client.delete(f"/api/proxies/{proxy.id}", headers=auth)
    assert r.status_code == 400
    client.put(f"/api/sponsors/{sponsor.id}", json={"proxyId": None}, headers=auth)
    assert client.delete(f"/api/proxies/{proxy.id}", headers=auth).status_code == 200
    assert client.get(f"/api/proxies/{proxy.id}", headers=auth).status_code == 404


def test_schools(client, auth):
    r = client.post("/api/schools", json={"name": "Hill School", "location": "Lira"}, headers=auth)
    assert r.status_code == 201
    sid = r.get_json()["id"]
    assert client.post("/api/schools", json={"name": "hill school"}, headers=auth).status_code == 400
    assert client.post("/api/schools", json={}, headers=auth).get_json() == {"error": "School name is required"}

    client.put(f"/api/schools/{sid}", json={"isActive": False}, headers=auth)
    assert client.get("/api/schools", headers=auth).get_json() == []
    listed = client.get("/api/schools?includeInactive=true", headers=auth).get_json()
    assert [s["name"] for s in listed] == ["Hill School"]
    assert client.get(f"/api/schools/{sid}", headers=auth).get_json()["childCount"] == 0
