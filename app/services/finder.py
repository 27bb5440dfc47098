"""Service – therapist-directory search helper.

Builds Google ``site:`` searches against public therapist directories from a
set of filters, plus a copy-paste outreach note for the clinicians found.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional
from urllib.parse import quote

MODALITY_OPTIONS = ("CBT", "DBT", "ACT", "Psychodynamic", "Person-Centered", "Emotion-Focused", "Solution-Focused")
SPECIALTY_OPTIONS = ("Anxiety", "Depression", "Trauma/PTSD", "ADHD", "Grief", "Couples", "Family", "LGBTQ+ Affirming")
LANGUAGE_OPTIONS = ("English", "中文", "Spanish", "Hindi", "Tagalog", "Vietnamese", "French", "Arabic", "Korean", "Russian")

# (domain, English label, Chinese label)
DIRECTORIES = (
    ("psychologytoday.com", "Search Psychology Today", "搜索 Psychology Today"),
    ("therapyden.com", "Search TherapyDen", "搜索 TherapyDen"),
    ("inclusivetherapists.com", "Search Inclusive Therapists", "搜索 Inclusive Therapists"),
    ("openpathcollective.org", "Search Open Path (lower-cost)", "搜索 Open Path（低费用）"),
    ("zencare.co", "Search Zencare", "搜索 Zencare"),
)

GOOGLE_SEARCH = "https://www.google.com/search?q="


def _as_list(value) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


@dataclass
class SearchFilters:
    city: str = ""
    telehealth: bool = True
    insurance: str = ""
    max_fee: Optional[float] = None
    modalities: List[str] = field(default_factory=list)
    specialties: List[str] = field(default_factory=list)
    language: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "SearchFilters":
        max_fee = data.get("maxFee")
        return cls(
            city=str(data.get("city") or "").strip(),
            telehealth=bool(data.get("telehealth", True)),
            insurance=str(data.get("insurance") or "").strip(),
            max_fee=float(max_fee) if max_fee not in (None, "") else None,
            modalities=_as_list(data.get("modalities")),
            specialties=_as_list(data.get("specialties")),
            language=str(data.get("language") or "").strip(),
        )


def _fee(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def build_terms(filters: SearchFilters) -> str:
    parts = []
    if filters.city:
        parts.append(filters.city)
    if filters.telehealth:
        parts.append("telehealth")
    if filters.insurance:
        parts.append(f"insurance {filters.insurance}")
    if filters.max_fee:
        parts.append(f"fee <= {_fee(filters.max_fee)}")
    if filters.modalities:
        parts.append(" ".join(filters.modalities))
    if filters.specialties:
        parts.append(" ".join(filters.specialties))
    if filters.language:
        parts.append(filters.language)
    return " ".join(p for p in parts if p)


def search_url(domain: str, terms: str) -> str:
    # same escaping as JavaScript's encodeURIComponent
    query = quote(f"site:{domain} therapist {terms}", safe="-_.!~*'()")
    return f"{GOOGLE_SEARCH}{query}"


def directory_searches(filters: SearchFilters, lang: str = "en") -> list[dict]:
    terms = build_terms(filters)
    return [
        {
            "domain": domain,
            "label": label_zh if lang == "zh" else label_en,
            "url": search_url(domain, terms),
        }
        for domain, label_en, label_zh in DIRECTORIES
    ]


def outreach_email(filters: SearchFilters, lang: str = "en") -> str:
    f = filters
    if lang == "zh":
        budget = f"不超过 ${_fee(f.max_fee)}" if f.max_fee else "弹性"
        return (
            "你好，\n\n"
            "我正在寻找心理治疗，你的资料看起来可能比较匹配。以下是来自 Credibot（一个治疗准备工具）的简要信息：\n"
            f"- 所在地：{f.city or '(你的城市)'}\n"
            f"- 会谈偏好：{'远程' if f.telehealth else '面谈'}\n"
            f"- 保险：{f.insurance or '自费 / 待定'}\n"
            f"- 预算：{budget}\n"
            f"- 可能偏好的取向：{', '.join(f.modalities) or '待定'}\n"
            f"- 关注领域：{', '.join(f.specialties) or '待定'}\n"
            f"- 语言：{f.language or '中文/英语'}\n\n"
            "如果你正在接收新来访者，能否告知初次咨询的可预约时间和通常费用？\n\n"
            "谢谢！"
        )
    budget = f"Up to ${_fee(f.max_fee)}" if f.max_fee else "Flexible"
    return (
        "Hello,\n\n"
        "I’m exploring therapy and your profile looks like a potential fit. "
        "A quick snapshot about me from Credibot (a therapy-prep tool):\n"
        f"- Location: {f.city or '(your city)'}\n"
        f"- Session preference: {'Telehealth' if f.telehealth else 'In-person'}\n"
        f"- Insurance: {f.insurance or 'Self-pay / TBD'}\n"
        f"- Budget: {budget}\n"
        f"- Modalities I think I might like: {', '.join(f.modalities) or 'TBD'}\n"
        f"- Focus areas: {', '.join(f.specialties) or 'TBD'}\n"
        f"- Language: {f.language or 'English'}\n\n"
        "If you’re taking new clients, could you share openings for an initial consultation "
        "and typical fees?\n\n"
        "Thank you!"
    )
