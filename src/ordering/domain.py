"""Ordering bounded context — order intake and order status management.

Orders are standard (CQRS) aggregates: created once by the intake service and
afterwards only moved between statuses by the admin console.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
