import enum


class ScopeStatus(str, enum.Enum):
    WITHIN_SCOPE = "Within Scope"
    LAST_FREE_REVISION = "Last Free Revision"
    OUT_OF_SCOPE = "Out of Scope"


def scope_status(count: int, limit: int) -> ScopeStatus:
    """Display status of a project given revisions used and its revision limit.

    A limit of zero or below is treated as already out of scope. This is only a
    display/pre-flight value; the revision gate enforces the limit on write.
    """
    if limit <= 0 or count >= limit:
        return ScopeStatus.OUT_OF_SCOPE
    if count == limit - 1:
        return ScopeStatus.LAST_FREE_REVISION
    return ScopeStatus.WITHIN_SCOPE


def usage_percent(count: int, limit: int) -> int:
    if limit <= 0:
        return 100
    return max(0, min(100, round(count * 100 / limit)))
