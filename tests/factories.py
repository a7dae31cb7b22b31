"""Row builders shared by the API tests; each one commits."""
import base64
import io
from datetime import date

from PIL import Image

from sponsorkit.models import Child, Proxy, School, Sponsor, Sponsorship
from sponsorkit.services.sponsorship_sync import sync_child_sponsorship_status


def png_base64(size=(2, 2), color=(200, 30, 30)) -> str:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return base64.b64encode(buf.getvalue()).decode("ascii")


def make_school(s, name="Test School", location="X"):
    school = School(name=name, location=location, is_active=True)
    s.add(school); s.commit()
    return school


def make_child(s, school, first="Jane", last="Doe", gender="Female", class_name="P3",
               born=date(2015, 1, 1), **kw):
    child = Child(
        first_name=first, last_name=last, gender=gender, class_name=class_name,
        date_of_birth=born, school_id=school.id,
        father_full_name="F", mother_full_name="M", **kw,
    )
    s.add(child); s.commit()
    return child


def make_proxy(s, name="Pastor John", role="Pastor"):
    proxy = Proxy(full_name=name, role=role, contact="")
    s.add(proxy); s.commit()
    return proxy


def make_sponsor(s, name="Sponsor A", proxy=None, contact="x"):
    sponsor = Sponsor(full_name=name, contact=contact, proxy_id=proxy.id if proxy else None)
    s.add(sponsor); s.commit()
    return sponsor


def sponsor_child(s, child, sponsor, active=True):
    sp = Sponsorship(child_id=child.id, sponsor_id=sponsor.id, is_active=active)
    s.add(sp)
    sync_child_sponsorship_status(s, child.id)
    s.commit()
    return sp
