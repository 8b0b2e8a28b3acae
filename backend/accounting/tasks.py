"""
Celery tasks for ledger maintenance.

Tasks:
- verify_account_balances: compare every stored balance with its entries

Scheduled nightly through CELERY_BEAT_SCHEDULE; can also be triggered
by hand:
    from accounting.tasks import verify_account_balances
    verify_account_balances.delay()
"""
import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    autoretry_for=(Exception,),
    retry_backoff=True,
)
def verify_account_balances(self, repair: bool = False) -> dict:
    """
    Recompute balances from entries and report drift.

    Args:
        repair: Rewrite drifted balances instead of only reporting them

    Returns:
        {"checked": int, "drifted": [...], "repaired": bool}
    """
    from accounting.balances import rebuild_balances
    from accounting.models import Account

    drift = rebuild_balances(dry_run=not repair)
    checked = Account.objects.count()

    if drift:
        logger.error(
            "Account balance drift detected",
            extra={"drifted": len(drift), "checked": checked, "repaired": repair},
        )
    else:
        logger.info("Account balances verified", extra={"checked": checked})

    return {
        "checked": checked,
        "drifted": [item.to_dict() for item in drift],
        "repaired": repair and bool(drift),
    }
