import logging
from pathlib import Path

import pytest

INTERNAL_CSV = """transaction_reference,amount,status,customer
T1,100,settled,Acme
T2,250.00,pending,Globex

T3,75.50,settled,Initech
"""

PROVIDER_CSV = """transaction_reference,amount,status
T1,100.00,settled
T2,250.00,settled
T4,12.00,failed
"""


@pytest.fixture(autouse=True)
def reset_package_logger():
    """CLI runs attach handlers to streams that close when the run ends."""
    yield
    logging.getLogger("mini_recon").handlers = []


@pytest.fixture
def internal_records():
    return [
        {"transaction_reference": "T1", "amount": "100", "status": "settled", "customer": "Acme"},
        {"transaction_reference": "T2", "amount": "250.00", "status": "pending", "customer": "Globex"},
        {"transaction_reference": "T3", "amount": "75.50", "status": "settled", "customer": "Initech"},
    ]


@pytest.fixture
def provider_records():
    return [
        {"transaction_reference": "T1", "amount": "100.00", "status": "settled"},
        {"transaction_reference": "T2", "amount": "250.00", "status": "settled"},
        {"transaction_reference": "T4", "amount": "12.00", "status": "failed"},
    ]


@pytest.fixture
def internal_csv(tmp_path: Path) -> Path:
    path = tmp_path / "internal.csv"
    path.write_text(INTERNAL_CSV, encoding="utf-8")
    return path


@pytest.fixture
def provider_csv(tmp_path: Path) -> Path:
    path = tmp_path / "provider.csv"
    path.write_text(PROVIDER_CSV, encoding="utf-8")
    return path
