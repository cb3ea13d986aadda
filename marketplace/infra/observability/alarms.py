import logging

from .metrics import data_integrity_alarms_total


logger = logging.getLogger("marketplace.data_integrity")


def raise_integrity_alarm(kind: str, detail: str, **context) -> None:
    """
    Record a ledger/aggregate divergence.

    The caller must fail the current operation; nothing here corrects data.
    """
    data_integrity_alarms_total.labels(kind=kind).inc()
    logger.critical(f"DATA INTEGRITY ALARM [{kind}]: {detail}", extra={"data_integrity": True, **context})
