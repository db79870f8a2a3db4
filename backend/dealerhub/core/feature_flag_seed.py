"""Seed the catalog feature flag definitions.

Run with ``python -m dealerhub.core.feature_flag_seed``. Existing flags are
left untouched, so seeding is safe to repeat.
"""

import asyncio
from typing import Any, Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from dealerhub import crud
from dealerhub.core.flag_cache_service import flag_cache
from dealerhub.core.logging import logger
from dealerhub.core.shared_models import FeatureFlagKey

CATALOG: List[Dict[str, Any]] = [
    dict(
        key=FeatureFlagKey.API_V2.value,
        name="API Version 2",
        description="New REST API with improved performance and features",
        percentage=10,
    ),
    dict(
        key=FeatureFlagKey.ADVANCED_SEARCH.value,
        name="Advanced Search",
        description="Enhanced search with filters, sorting, and saved searches",
        default_enabled=True,
    ),
    dict(
        key=FeatureFlagKey.BULK_OPERATIONS.value,
        name="Bulk Operations",
        description="Perform actions on multiple vehicles at once",
        percentage=50,
    ),
    dict(
        key=FeatureFlagKey.NEW_DASHBOARD.value,
        name="New Dashboard",
        description="Redesigned dashboard with improved performance",
    ),
    dict(
        key=FeatureFlagKey.ANALYTICS_DASHBOARD.value,
        name="Analytics Dashboard",
        description="Advanced analytics and insights",
    ),
    dict(
        key=FeatureFlagKey.REAL_TIME_UPDATES.value,
        name="Real-time Updates",
        description="Live updates using WebSockets",
    ),
    dict(
        key=FeatureFlagKey.AI_VEHICLE_VALIDATION.value,
        name="AI Vehicle Validation",
        description="AI-powered vehicle data validation",
        default_enabled=True,
    ),
    dict(
        key=FeatureFlagKey.VEHICLE_HISTORY.value,
        name="Vehicle History",
        description="Track full vehicle history and changes",
    ),
    dict(
        key=FeatureFlagKey.VEHICLE_COMPARISON_V2.value,
        name="Vehicle Comparison 2.0",
        description="Enhanced vehicle comparison with more features",
        percentage=25,
    ),
    dict(
        key=FeatureFlagKey.TEAM_COLLABORATION.value,
        name="Team Collaboration",
        description="Comments, mentions, and shared workspaces",
    ),
    dict(
        key=FeatureFlagKey.TEAM_ACTIVITY_FEED.value,
        name="Team Activity Feed",
        description="See what your team is working on",
    ),
    dict(
        key=FeatureFlagKey.ADVANCED_EXPORTS.value,
        name="Advanced Exports",
        description="Export data in multiple formats with custom templates",
        default_enabled=True,
    ),
    dict(
        key=FeatureFlagKey.CUSTOM_REPORTS.value,
        name="Custom Reports",
        description="Build and save custom reports",
    ),
    dict(
        key=FeatureFlagKey.WEBHOOK_INTEGRATIONS.value,
        name="Webhook Integrations",
        description="Send data to external systems via webhooks",
    ),
    dict(
        key=FeatureFlagKey.THIRD_PARTY_SYNC.value,
        name="Third-party Sync",
        description="Sync data with CRM and inventory systems",
    ),
]


async def seed_feature_flags(db: AsyncSession) -> List[str]:
    """Insert catalog flags that do not exist yet.

    Catalog keys are written straight to the store; some of them predate the
    key format enforced on the admin API.

    Returns:
        Keys of the flags that were created
    """
    created = []
    for definition in CATALOG:
        if await crud.feature_flag.get_by_key(db, definition["key"]):
            continue
        await crud.feature_flag.create(db, obj_in=definition)
        created.append(definition["key"])
    await db.commit()

    if created:
        await flag_cache.invalidate_many(await crud.organization.get_all_ids(db))

    logger.info(f"Seeded {len(created)} feature flag(s)")
    return created


async def main() -> None:
    """Seed using a standalone session."""
    from dealerhub.db.session import get_db_context

    async with get_db_context() as db:
        await seed_feature_flags(db)


if __name__ == "__main__":
    asyncio.run(main())
