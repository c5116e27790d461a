"""CRUD operations package.

- campaign.py: Campaign operations
- mention.py: Mention operations
- alert.py: Crisis alert operations and summary
- crisis_event.py: Crisis event lifecycle, history and dashboard
"""

from warroom.app.db.crud.campaign import (
    create_campaign,
    get_campaign_by_id,
    list_campaigns,
    update_campaign,
)

from warroom.app.db.crud.mention import (
    create_mention,
    list_mentions,
)

from warroom.app.db.crud.alert import (
    create_alert,
    list_alerts,
    resolve_alert,
    get_alerts_summary,
)

from warroom.app.db.crud.crisis_event import (
    create_crisis_event,
    list_open_events,
    acknowledge_event,
    resolve_event,
    get_event_history,
    get_dashboard_stats,
)

__all__ = [
    # Campaign operations
    "create_campaign",
    "get_campaign_by_id",
    "list_campaigns",
    "update_campaign",
    # Mention operations
    "create_mention",
    "list_mentions",
    # Alert operations
    "create_alert",
    "list_alerts",
    "resolve_alert",
    "get_alerts_summary",
    # Crisis event operations
    "create_crisis_event",
    "list_open_events",
    "acknowledge_event",
    "resolve_event",
    "get_event_history",
    "get_dashboard_stats",
]
