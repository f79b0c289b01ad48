from typing import Iterable, List

def csv_to_list(v: str | List[str] | None) -> List[str]:
    if v is None:
        return []
    if isinstance(v, (list, tuple)):
        return [str(s).strip() for s in v if s and str(s).strip()]
    return [s.strip() for s in str(v).split(",") if s.strip()]


def normalize_exts(exts: Iterable[str]) -> List[str]:
    """Lowercase extensions, drop leading dots and duplicates, keep order."""
    out: List[str] = []
    for e in exts:
        s = str(e).strip().lstrip(".").lower()
        if s and s not in out:
            out.append(s)
    return out
