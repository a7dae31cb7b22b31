import base64

from factories import make_child, make_school, png_base64


def _upload(client, auth, cid, **extra):
    payload = {"photoBase64": png_base64(), "mimeType": "image/png", "fileName": "kid.png", **extra}
    return client.post(f"/api/child-photos/child/{cid}", json=payload, headers=auth)


def _profile_ids(client, auth, cid):
    photos = client.get(f"/api/child-photos/child/{cid}", headers=auth).get_json()
    return [p["id"] for p in photos if p["isProfile"]]


def test_new_photo_becomes_profile(client, auth, session):
    child = make_child(session, make_school(session))
    first = _upload(client, auth, child.id)
    assert first.status_code == 201
    assert first.get_json()["isProfile"] is True
    assert "photoBase64" not in first.get_json()

    second = _upload(client, auth, child.id, description="newer")
    assert _profile_ids(client, auth, child.id) == [second.get_json()["id"]]

    detail = client.get(f"/api/children/{child.id}", headers=auth).get_json()
    assert detail["photoCount"] == 2
    assert detail["profilePhotoId"] == second.get_json()["id"]


def test_deleting_profile_promotes_latest_remaining(client, auth, session):
    child = make_child(session, make_school(session))
    a = _upload(client, auth, child.id).get_json()["id"]
    b = _upload(client, auth, child.id).get_json()["id"]
    c = _upload(client, auth, child.id).get_json()["id"]

    r = client.delete(f"/api/child-photos/{c}", headers=auth)
    assert r.get_json() == {"message": "Photo deleted successfully", "wasProfilePhoto": True}
    assert _profile_ids(client, auth, child.id) == [b]

    r = client.delete(f"/api/child-photos/{a}", headers=auth)
    assert r.get_json()["wasProfilePhoto"] is False
    assert _profile_ids(client, auth, child.id) == [b]

    client.delete(f"/api/child-photos/{b}", headers=auth)
    assert client.get(f"/api/child-photos/child/{child.id}", headers=auth).get_json() == []
    assert client.get(f"/api/children/{child.id}/image", headers=auth).status_code == 404


def test_invalid_payloads(client, auth, session):
    child = make_child(session, make_school(session))
    url = f"/api/child-photos/child/{child.id}"
    r = client.post(url, json={"photoBase64": png_base64()}, headers=auth)
    assert r.get_json() == {"error": "Photo data and MIME type are required"}
    r = client.post(url, json={"photoBase64": png_base64(), "mimeType": "text/plain"}, headers=auth)
    assert r.status_code == 400
    r = client.post(url, json={"photoBase64": "not base64!!", "mimeType": "image/png"}, headers=auth)
    assert r.get_json() == {"error": "Invalid base64 image data"}
    junk = base64.b64encode(b"definitely not an image").decode()
    r = client.post(url, json={"photoBase64": junk, "mimeType": "image/png"}, headers=auth)
    assert r.status_code == 400
    r = client.post(url, json={"photoBase64": png_base64(), "mimeType": "image/png",
                               "fileSize": 6 * 1024 * 1024}, headers=auth)
    assert r.get_json() == {"error": "Image file size exceeds 5MB limit"}
    assert client.post("/api/child-photos/child/999", json={}, headers=auth).status_code == 404
    assert client.get(f"/api/child-photos/child/{child.id}", headers=auth).get_json() == []


def test_data_url_prefix_is_accepted(client, auth, session):
    child = make_child(session, make_school(session))
    r = _upload(client, auth, child.id, photoBase64="data:image/png;base64," + png_base64())
    assert r.status_code == 201
    photos = client.get(f"/api/child-photos/child/{child.id}?includeBase64=true", headers=auth).get_json()
    assert photos[0]["dataUrl"].startswith("data:image/png;base64,iVBOR")
    assert not photos[0]["photoBase64"].startswith("data:")


def test_serve_raw_bytes(client, auth, session):
    child = make_child(session, make_school(session))
    pid = _upload(client, auth, child.id).get_json()["id"]
    r = client.get(f"/api/child-photos/{pid}", headers=auth)
    assert r.status_code == 200
    assert r.mimetype == "image/png"
    assert r.data == base64.b64decode(png_base64())
    assert r.headers["Cache-Control"] == "public, max-age=86400"
    assert r.headers["Content-Disposition"] == 'inline; filename="kid.png"'
    etag = r.headers["ETag"]
    assert etag.startswith(f'"{pid}-')

    again = client.get(f"/api/child-photos/{pid}", headers={**auth, "If-None-Match": etag})
    assert again.status_code == 304

    image = client.get(f"/api/children/{child.id}/image", headers=auth)
    assert image.status_code == 200 and image.data == r.data


def test_update_description(client, auth, session):
    child = make_child(session, make_school(session))
    pid = _upload(client, auth, child.id).get_json()["id"]
    r = client.put(f"/api/child-photos/{pid}", json={"description": "  first day  "}, headers=auth)
    assert r.get_json()["description"] == "first day"
    assert client.put("/api/child-photos/999", json={}, headers=auth).status_code == 404
