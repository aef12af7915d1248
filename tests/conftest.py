"""
Shared test fixtures.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

import json
import pytest
import pandas as pd
from unittest.mock import patch

from models.operator import Operator
from models.session import Mode
from services.session_service import WorkSession
from tests.factories import ProductItemFactory


# ===================
# SAMPLE DATA
# ===================

@pytest.fixture
def operator() -> Operator:
    """Operator of the 五道口 store."""
    return Operator(username="wdk_user", store_name="宝珠奶酪（五道口店）")


@pytest.fixture
def three_items() -> list:
    """Items A, B, C, all PENDING."""
    return [
        ProductItemFactory.create(id="item-0", name="A"),
        ProductItemFactory.create(id="item-1", name="B"),
        ProductItemFactory.create(id="item-2", name="C"),
    ]


@pytest.fixture
def count_session(operator, three_items) -> WorkSession:
    """COUNT session over A, B, C."""
    return WorkSession(operator=operator, mode=Mode.COUNT, items=three_items)


@pytest.fixture
def order_session(operator, three_items) -> WorkSession:
    """ORDER session over A, B, C."""
    return WorkSession(operator=operator, mode=Mode.ORDER, items=three_items)


# ===================
# CONFIG FILES
# ===================

def write_products_workbook(path: Path, sheets: dict[str, list[dict]]) -> Path:
    """Write a product workbook, one sheet per store."""
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet_name, rows in sheets.items():
            columns = list(rows[0].keys()) if rows else ["货品名称", "规格", "单位"]
            pd.DataFrame(rows, columns=columns).to_excel(writer, sheet_name=sheet_name, index=False)
    return path


@pytest.fixture
def users_file(tmp_path) -> Path:
    """Operator directory with one store per operator."""
    path = tmp_path / "users.json"
    path.write_text(json.dumps([
        {"username": "alice", "password": "pw1", "storeName": "测试门店A"},
        {"username": "bob", "password": "pw2", "storeName": "测试门店B"},
    ], ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture
def products_file(tmp_path) -> Path:
    """Product workbook with a sheet for 测试门店A only."""
    return write_products_workbook(tmp_path / "products.xlsx", {
        "测试门店A": [
            {"货品名称": "鲜奶", "规格": "1L/盒", "单位": "盒"},
            {"货品名称": "白糖", "规格": "1kg/袋", "单位": "袋"},
        ],
    })


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client(users_file, products_file):
    """
    FastAPI test client wired to temporary config files.

    Usage:
        def test_endpoint(test_client):
            response = test_client.post("/api/auth/login", json={...})
    """
    from fastapi.testclient import TestClient
    from main import app
    from services.item_source_service import ItemSourceService
    from services.operator_service import OperatorService
    from services.session_registry import SessionRegistry

    operators = OperatorService(users_path=users_file)
    registry = SessionRegistry(item_source=ItemSourceService(products_path=products_file))

    with patch("routes.auth.get_operator_service", return_value=operators):
        with patch("routes.sessions.get_operator_service", return_value=operators):
            with patch("routes.sessions.get_session_registry", return_value=registry):
                yield TestClient(app)
