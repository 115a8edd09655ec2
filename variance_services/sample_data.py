"""
Demo dataset generator.

Five cost centers with three GL accounts each across three monthly periods.
Budgets, actuals and workflow state are random; passing ``seed`` (and a
DeterministicClock for due dates) makes the output fully reproducible,
record ids included.
"""

from __future__ import annotations

import random
from datetime import timedelta
from uuid import UUID

from variance_engines.classifier import classify_record
from variance_kernel.domain.clock import Clock, SystemClock
from variance_kernel.domain.records import ParsedDataset, VarianceRecord
from variance_kernel.domain.values import RootCause, VarianceStatus, VarianceThresholds
from variance_kernel.logging_config import get_logger

logger = get_logger("services.sample_data")

SAMPLE_ACCOUNTS: dict[str, tuple[str, ...]] = {
    "1001 - Marketing": ("51000 - Advertising", "51010 - Events", "51020 - Digital Marketing"),
    "1002 - Sales": ("52000 - Travel", "52010 - Commissions", "52020 - Client Gifts"),
    "2001 - Engineering": ("61000 - Cloud Infra", "61010 - Software Licenses", "61020 - Hardware"),
    "3001 - Operations": ("71000 - Facilities", "71010 - Utilities", "71020 - Supplies"),
    "4001 - Finance": ("81000 - Audit Fees", "81010 - Banking Fees", "81020 - Insurance"),
}
SAMPLE_PERIODS = ("2024-01", "2024-02", "2024-03")
SAMPLE_OWNERS = ("Sarah Chen", "Mike Johnson", "Lisa Park", "David Kim", "Emily Taylor", "")
SAMPLE_COLUMNS = ("Category", "Cost Center", "GL Account", "Period", "Budget", "Actual")

_TAGGED_CAUSES = tuple(c for c in RootCause if c is not RootCause.UNTAGGED)


def _category(gl_account: str) -> str:
    _, sep, name = gl_account.partition(" - ")
    return name if sep and name else gl_account


def generate_sample_dataset(
    seed: int | None = None,
    clock: Clock | None = None,
    thresholds: VarianceThresholds | None = None,
) -> ParsedDataset:
    rng = random.Random(seed)
    today = (clock or SystemClock()).today()
    thresholds = thresholds or VarianceThresholds()
    statuses = tuple(VarianceStatus)

    records: list[VarianceRecord] = []
    for cost_center, gl_accounts in SAMPLE_ACCOUNTS.items():
        for gl_account in gl_accounts:
            for period in SAMPLE_PERIODS:
                budget = rng.randrange(10_000, 110_000)
                actual = int(budget * (1 + (rng.random() - 0.5) * 0.4))

                status = rng.choice(statuses)
                owner = rng.choice(SAMPLE_OWNERS)
                root_cause = RootCause.UNTAGGED
                explanation = ""
                due_date = None
                if status.is_resolved:
                    root_cause = rng.choice(_TAGGED_CAUSES)
                    timing = "earlier than expected" if rng.random() > 0.5 else "delayed"
                    explanation = f"{root_cause.label} variance due to {timing} activity."
                else:
                    due_date = today + timedelta(days=rng.randint(-7, 7))

                record = VarianceRecord(
                    record_id=UUID(int=rng.getrandbits(128), version=4),
                    category=_category(gl_account),
                    budget=float(budget),
                    actual=float(actual),
                    cost_center=cost_center,
                    gl_account=gl_account,
                    period=period,
                    status=status,
                    owner=owner,
                    root_cause=root_cause,
                    due_date=due_date,
                    explanation=explanation,
                )
                records.append(classify_record(record, thresholds))

    logger.info("sample_dataset_generated", extra={"record_count": len(records), "seed": seed})
    return ParsedDataset(records=records, columns=SAMPLE_COLUMNS)
