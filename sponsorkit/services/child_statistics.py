"""
Dashboard statistics over an already-filtered list of children.

Everything here works on loaded ``Child`` rows (with ``school`` available);
no queries are issued. Percentages are whole numbers rounded half-up, and a
zero denominator gives 0.
"""
from __future__ import annotations
from collections import Counter, defaultdict
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from sponsorkit.models import Child

CLASS_ORDER = [f"P{i}" for i in range(1, 8)] + [f"S{i}" for i in range(1, 7)]
_CLASS_RANK = {name: idx for idx, name in enumerate(CLASS_ORDER)}

AGE_BUCKETS = [
    ("0-5", 0, 5),
    ("6-10", 6, 10),
    ("11-14", 11, 14),
    ("15-18", 15, 18),
    ("19+", 19, None),
]

LOW_RATE_THRESHOLD = 50
HIGH_RATE_THRESHOLD = 80


def percentage(part: int, total: int) -> int:
    if total <= 0:
        return 0
    value = (Decimal(part) * 100 / Decimal(total)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return max(0, min(100, int(value)))


def age_on(born: date | None, today: date) -> int | None:
    if born is None:
        return None
    years = today.year - born.year
    if (today.month, today.day) < (born.month, born.day):
        years -= 1
    return years


def age_bucket(age: int | None) -> str:
    if age is None or age < 0:
        return "unknown"
    for label, low, high in AGE_BUCKETS:
        if age >= low and (high is None or age <= high):
            return label
    return "unknown"


def _class_key(name: str) -> tuple[int, str]:
    return (_CLASS_RANK.get(name, len(CLASS_ORDER)), name)


def _gender_label(raw: str | None) -> str:
    value = (raw or "").strip()
    return value.capitalize() if value else "Unknown"


def gender_breakdown(children: list[Child]) -> list[dict]:
    counts = Counter(_gender_label(c.gender) for c in children)
    total = len(children)
    return [
        {"gender": g, "count": n, "percentage": percentage(n, total)}
        for g, n in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    ]


def class_breakdown(children: list[Child]) -> list[dict]:
    counts: Counter[str] = Counter()
    sponsored: Counter[str] = Counter()
    for c in children:
        name = (c.class_name or "").strip().upper() or "UNKNOWN"
        counts[name] += 1
        if c.is_sponsored:
            sponsored[name] += 1
    total = len(children)
    return [
        {"class": name, "count": counts[name], "sponsored": sponsored[name],
         "percentage": percentage(counts[name], total)}
        for name in sorted(counts, key=_class_key)
    ]


def age_breakdown(children: list[Child], today: date) -> list[dict]:
    counts = Counter(age_bucket(age_on(c.date_of_birth, today)) for c in children)
    labels = [label for label, _, _ in AGE_BUCKETS]
    if counts.get("unknown"):
        labels.append("unknown")
    total = len(children)
    return [{"range": label, "count": counts.get(label, 0), "percentage": percentage(counts.get(label, 0), total)}
            for label in labels]


def top_schools(children: list[Child], top_n: int = 5) -> list[dict]:
    grouped: dict[int, list[Child]] = defaultdict(list)
    for c in children:
        grouped[c.school_id].append(c)
    rows = []
    for school_id, members in grouped.items():
        school = members[0].school
        sponsored = sum(1 for c in members if c.is_sponsored)
        rows.append({
            "schoolId": school_id,
            "name": school.name if school else None,
            "location": school.location if school else None,
            "count": len(members),
            "sponsored": sponsored,
            "sponsorshipRate": percentage(sponsored, len(members)),
        })
    rows.sort(key=lambda r: (-r["count"], r["name"] or ""))
    return rows[:top_n]


def build_insights(total: int, sponsored_rate: int, unsponsored: int, schools: list[dict]) -> list[dict]:
    if total == 0:
        return [{"type": "info", "message": "No children match the current filters."}]
    insights = []
    if sponsored_rate < LOW_RATE_THRESHOLD:
        insights.append({
            "type": "warning",
            "message": f"Sponsorship rate is {sponsored_rate}%, below {LOW_RATE_THRESHOLD}%.",
        })
    if unsponsored > 0:
        noun = "child is" if unsponsored == 1 else "children are"
        insights.append({"type": "info", "message": f"{unsponsored} {noun} still waiting for a sponsor."})
    if schools:
        best = max(schools, key=lambda r: (r["sponsorshipRate"], r["count"]))
        if best["sponsorshipRate"] > HIGH_RATE_THRESHOLD:
            insights.append({
                "type": "success",
                "message": f"{best['name']} has a {best['sponsorshipRate']}% sponsorship rate.",
            })
    return insights


def build_child_statistics(children: Iterable[Child], top_n: int = 5, today: date | None = None) -> dict:
    rows = list(children)
    today = today or date.today()
    total = len(rows)
    sponsored = sum(1 for c in rows if c.is_sponsored)
    unsponsored = total - sponsored
    schools = top_schools(rows, top_n)
    sponsored_rate = percentage(sponsored, total)
    return {
        "total": {
            "children": total,
            "sponsored": sponsored,
            "unsponsored": unsponsored,
            "schools": len({c.school_id for c in rows}),
        },
        "percentages": {
            "sponsored": sponsored_rate,
            "unsponsored": percentage(unsponsored, total),
        },
        "breakdown": {
            "gender": gender_breakdown(rows),
            "class": class_breakdown(rows),
            "age": age_breakdown(rows, today),
            "topSchools": schools,
        },
        "insights": build_insights(total, sponsored_rate, unsponsored, schools),
    }
