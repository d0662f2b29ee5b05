from collections import defaultdict
from dataclasses import dataclass, field

from convenimus.adapters.db.django.models import CfsSubmission, Event, Group, Session


@dataclass
class Storage:
    cfs_submissions: dict[int, CfsSubmission] = field(default_factory=dict)
    events: dict[int, Event] = field(default_factory=dict)
    groups: dict[int, Group] = field(default_factory=dict)
    sessions_by_event: dict[int, dict[int, Session]] = field(
        default_factory=lambda: defaultdict(dict)
    )
