from dataclasses import dataclass


@dataclass(frozen=True)
class Anomaly:
    kind: str  # "listing_unresolved" | "profile_unresolved" | "schedule_unparseable"
    request_id: str | None
    reference_id: str | None
    detail: str = ""
