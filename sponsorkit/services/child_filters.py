"""
List filters for children, sponsors and proxies.

Raw query-string values are parsed into typed filter objects first
(``from_args``), then turned into a single SQLAlchemy boolean clause that the
list endpoints use for both the total count and the page fetch.

Parsing is lenient: an unparseable id or an unknown enum value means "no
constraint", never a 400.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Mapping

from sqlalchemy import and_, func, or_, true
from sqlalchemy.sql.elements import ColumnElement

from sponsorkit.models import Child, Proxy, School, Sponsor, Sponsorship
from sponsorkit.utils.validation import parse_bool, parse_int

ALL = "all"
NONE = "none"
DIRECT = "direct"


def _text(args: Mapping[str, Any], key: str) -> str:
    raw = args.get(key)
    return str(raw).strip() if raw is not None else ""


def _choice(args: Mapping[str, Any], key: str, allowed: set[str]) -> str | None:
    value = _text(args, key).lower()
    return value if value in allowed else None


def _id_or_sentinel(args: Mapping[str, Any], key: str, sentinels: set[str]) -> int | str | None:
    """``None`` for absent/"all"/garbage, a sentinel string, or an int id."""
    raw = _text(args, key).lower()
    if not raw or raw == ALL:
        return None
    if raw in sentinels:
        return raw
    return parse_int(raw)


def _contains(column, term: str) -> ColumnElement:
    # both sides lower-cased; the store's collation is not relied on
    return func.lower(column).contains(term, autoescape=True)


def _active_sponsorship(*extra: ColumnElement) -> ColumnElement:
    return Child.sponsorships.any(and_(Sponsorship.is_active.is_(True), *extra))


@dataclass
class ChildFilters:
    search: str | None = None
    gender: str | None = None
    school_id: int | None = None
    sponsor_id: int | str | None = None
    proxy_id: int | str | None = None
    sponsorship: str | None = None
    archived: bool | None = None

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "ChildFilters":
        search = _text(args, "search").lower() or None
        gender = _text(args, "gender").lower() or None
        if gender == ALL:
            gender = None
        school_raw = _text(args, "schoolId").lower()
        school_id = parse_int(school_raw) if school_raw and school_raw != ALL else None
        return cls(
            search=search,
            gender=gender,
            school_id=school_id,
            sponsor_id=_id_or_sentinel(args, "sponsorId", {NONE}),
            proxy_id=_id_or_sentinel(args, "proxyId", {NONE, DIRECT}),
            sponsorship=_choice(args, "sponsorship", {"sponsored", "unsponsored"}),
            archived=parse_bool(args.get("archived")),
        )

    def clauses(self) -> list[ColumnElement]:
        out: list[ColumnElement] = []
        if self.search:
            out.append(or_(
                _contains(Child.first_name, self.search),
                _contains(Child.last_name, self.search),
                Child.school.has(_contains(School.name, self.search)),
            ))
        if self.gender:
            out.append(func.lower(Child.gender) == self.gender)
        if self.school_id is not None:
            out.append(Child.school_id == self.school_id)

        if self.sponsor_id == NONE:
            out.append(~_active_sponsorship())
        elif isinstance(self.sponsor_id, int):
            out.append(_active_sponsorship(Sponsorship.sponsor_id == self.sponsor_id))

        if self.proxy_id == NONE:
            # universal: no sponsorship at all (active or ended) goes through a proxy
            out.append(~Child.sponsorships.any(Sponsorship.sponsor.has(Sponsor.proxy_id.isnot(None))))
        elif self.proxy_id == DIRECT:
            # existential: at least one active sponsorship without a proxy
            out.append(_active_sponsorship(Sponsorship.sponsor.has(Sponsor.proxy_id.is_(None))))
        elif isinstance(self.proxy_id, int):
            out.append(_active_sponsorship(Sponsorship.sponsor.has(Sponsor.proxy_id == self.proxy_id)))

        if self.sponsorship == "sponsored":
            out.append(Child.is_sponsored.is_(True))
        elif self.sponsorship == "unsponsored":
            out.append(Child.is_sponsored.is_(False))

        if self.archived is not None:
            out.append(Child.is_archived.is_(self.archived))
        return out

    def predicate(self) -> ColumnElement:
        parts = self.clauses()
        return and_(*parts) if parts else true()

    def applied(self) -> dict:
        return {
            "search": self.search,
            "gender": self.gender,
            "schoolId": self.school_id,
            "sponsorId": self.sponsor_id,
            "proxyId": self.proxy_id,
            "sponsorship": self.sponsorship,
            "archived": self.archived,
        }


def build_child_predicate(args: Mapping[str, Any]) -> ColumnElement:
    return ChildFilters.from_args(args).predicate()


@dataclass
class SponsorFilters:
    search: str | None = None
    proxy_id: int | str | None = None
    has_sponsorship: bool | None = None

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "SponsorFilters":
        proxy_id = _id_or_sentinel(args, "proxyId", {NONE, DIRECT})
        if proxy_id is None:
            legacy = _choice(args, "proxy", {"with_proxy", "without_proxy"})
            proxy_id = {"with_proxy": "any", "without_proxy": NONE}.get(legacy or "")

        has = parse_bool(args.get("hasSponsorship"))
        if has is None:
            legacy = _choice(args, "sponsorship", {"active", "inactive"})
            has = {"active": True, "inactive": False}.get(legacy or "")
        return cls(
            search=_text(args, "search").lower() or None,
            proxy_id=proxy_id,
            has_sponsorship=has,
        )

    def predicate(self) -> ColumnElement:
        parts: list[ColumnElement] = []
        if self.search:
            parts.append(or_(
                _contains(Sponsor.full_name, self.search),
                _contains(Sponsor.email, self.search),
                _contains(Sponsor.phone, self.search),
                _contains(Sponsor.contact, self.search),
                Sponsor.proxy.has(_contains(Proxy.full_name, self.search)),
            ))
        if self.proxy_id in (NONE, DIRECT):
            parts.append(Sponsor.proxy_id.is_(None))
        elif self.proxy_id == "any":
            parts.append(Sponsor.proxy_id.isnot(None))
        elif isinstance(self.proxy_id, int):
            parts.append(Sponsor.proxy_id == self.proxy_id)

        if self.has_sponsorship is True:
            parts.append(Sponsor.sponsorships.any(Sponsorship.is_active.is_(True)))
        elif self.has_sponsorship is False:
            parts.append(~Sponsor.sponsorships.any(Sponsorship.is_active.is_(True)))
        return and_(*parts) if parts else true()


def build_proxy_predicate(args: Mapping[str, Any]) -> ColumnElement:
    term = _text(args, "search").lower()
    if not term:
        return true()
    return or_(
        _contains(Proxy.full_name, term),
        _contains(Proxy.role, term),
        _contains(Proxy.email, term),
        _contains(Proxy.phone, term),
        _contains(Proxy.contact, term),
        _contains(Proxy.description, term),
    )
