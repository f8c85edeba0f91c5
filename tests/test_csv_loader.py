from datetime import date
from decimal import Decimal

import pytest

from ledger_engine.config import load_config
from ledger_engine.core.models import TransactionKind
from ledger_engine.loaders import get_loader
from ledger_engine.loaders.csv_loader import CSVLoader


def config():
    cfg = load_config()
    cfg['categories'] = {'4': ['market'], '5': ['uber']}
    return cfg


def test_signed_amounts_without_kind_column(tmp_path):
    path = tmp_path / 'export.csv'
    path.write_text(
        "Date,Description,Amount\n"
        "2025-12-05,Salary,\"5,000.00\"\n"
        "2025-12-10,Supermarket,-450.25\n"
        "2025-12-11,Pending,\n"
        "2025-12-15,Uber trip,-45\n"
    )

    txs = list(CSVLoader(config()).load(str(path)))

    assert [(t.description, t.kind, t.amount, t.category_id) for t in txs] == [
        ('Salary', TransactionKind.INCOME, Decimal('5000.00'), 'uncategorized'),
        ('Supermarket', TransactionKind.EXPENSE, Decimal('450.25'), '4'),
        ('Uber trip', TransactionKind.EXPENSE, Decimal('45'), '5'),
    ]
    assert txs[0].occurred_on == date(2025, 12, 5)


def test_kind_and_category_columns_win(tmp_path):
    path = tmp_path / 'export.csv'
    path.write_text(
        "date,description,amount,kind,category\n"
        "2025-12-01,Rent,1500,expense,6\n"
        "2025-12-02,Market refund,20,income,4\n"
    )

    txs = list(get_loader('csv', config()).load(str(path)))

    assert [(t.kind, t.category_id) for t in txs] == [
        (TransactionKind.EXPENSE, '6'),
        (TransactionKind.INCOME, '4'),
    ]


def test_missing_required_column(tmp_path):
    path = tmp_path / 'export.csv'
    path.write_text("date,description\n2025-12-01,Rent\n")

    with pytest.raises(ValueError, match="Missing required column 'amount'"):
        list(CSVLoader(config()).load(str(path)))


def test_bad_date_names_the_file(tmp_path):
    path = tmp_path / 'export.csv'
    path.write_text("date,description,amount\nsoon,Rent,-1\n")

    with pytest.raises(ValueError, match="export.csv"):
        list(CSVLoader(config()).load(str(path)))


def test_unknown_loader():
    with pytest.raises(ValueError, match="ofx"):
        get_loader('ofx', config())


def test_bank_style_dates(tmp_path):
    path = tmp_path / 'export.csv'
    path.write_text(
        "Date,Description,Amount\n"
        "12/10/2025,Supermarket,-450.25\n"
        "\"Dec 15, 2025\",Uber,-45\n"
    )

    txs = list(CSVLoader(config()).load(str(path)))

    assert [t.occurred_on for t in txs] == [date(2025, 12, 10), date(2025, 12, 15)]


def test_blank_date_is_reported(tmp_path):
    path = tmp_path / 'export.csv'
    path.write_text("date,description,amount\n,Rent,-1\n")

    with pytest.raises(ValueError, match="Could not parse date"):
        list(CSVLoader(config()).load(str(path)))
