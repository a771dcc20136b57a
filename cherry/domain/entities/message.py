from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Message:
    id: str
    request_id: str
    sender_id: str
    body: str
    created_at: datetime
