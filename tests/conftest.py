"""Shared fixtures: small DSS grids and audit inputs."""

import pytest

from dss_auditor.services.engine.models import AuditInput
from dss_auditor.services.policy.loader import load_policy_table


@pytest.fixture
def refund_row_raw():
    return {
        "L1": "Refund requested",
        "L2": "Partial refund approved",
        "keywords": ["partial refund"],
        "E": "Partial refund - 50%",
    }


@pytest.fixture
def table(refund_row_raw):
    return load_policy_table([
        {
            "L1": "Cancel before start",
            "L2": "Free cancellation window",
            "keywords": ["free cancellation", "cancel before"],
            "C": "Full refund to original payment method",
            "E": "Full refund to original payment method",
        },
        refund_row_raw,
        {
            "L1": "Other",
            "L2": "Unknown scenario",
            "keywords": [],
            "C": "No action - escalate",
        },
    ])


@pytest.fixture
def scenario_input():
    return AuditInput(
        conversation_text="We issued a partial refund of $50 to the customer.",
        subject="Booking 4821 refund request",
        experience_type="Non-Partnered",
        observed_action_text="partial refund of $50 to the customer.",
        conversation_count=1,
    )
