"""Plain-text breakdown of a client IP resolution."""

from __future__ import annotations

import jinja2

from clientip.address import AddressValue
from clientip.headers import HeaderRole
from clientip.resolver import MULTIPLE_IP_HEADERS_TAG, HeaderCandidate

_REPORT_TEMPLATE = jinja2.Template("""\
{% for row in rows %}
{{ row.header.ljust(width) }}  {{ row.raw }}
{{ "".ljust(width) }}  -> {{ row.outcome }}
{% endfor %}
client ip: {{ result }}
{% if tag %}
{{ tag_key }}: {{ tag }}
{% endif %}
""", trim_blocks=True, lstrip_blocks=True)


def _outcome(candidate: HeaderCandidate) -> str:
    if candidate.raw is None:
        return "absent"
    if candidate.address is None:
        return "no address"
    return f"{candidate.address} ({candidate.privacy.value})"


def render_report(
    candidates: list[HeaderCandidate],
    result: AddressValue | None,
    tag: str | None = None,
    present: list[HeaderRole] | None = None,
) -> str:
    """Render one line pair per header, then the chosen address.

    Absent headers are skipped unless none was present at all. When
    ``present`` is given (see HeaderSet.present()), fixed-role candidates
    outside it are treated as absent.
    """
    shown = [
        c for c in candidates
        if c.raw is not None and (present is None or c.role is None or c.role in present)
    ] or candidates
    rows = [
        {"header": c.header, "raw": c.raw if c.raw is not None else "-",
         "outcome": _outcome(c)}
        for c in shown
    ]
    width = max((len(row["header"]) for row in rows), default=0)
    return _REPORT_TEMPLATE.render(
        rows=rows,
        width=width,
        result=result if result is not None else "none",
        tag=tag,
        tag_key=MULTIPLE_IP_HEADERS_TAG,
    )
