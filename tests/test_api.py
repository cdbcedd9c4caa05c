#!/usr/bin/env python3
"""
Endpoint tests for the stock opname API with the spreadsheet patched out.
"""

import os
import sys
import unittest
from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

# Add the parent directory to the path to access the api module
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import api
from constants.schemas import CurrentStockItem, SupplierContact
from utils.config import AppConfig, ConfigurationError
from utils.google_sheets import SheetFetchError
from utils.llm_handler import SummaryGenerationError
from utils.restock import evaluate_condition
from utils.stock_data import parse_processing_rows

SUBMISSIONS = [
    {"Timestamp": "01/06/2024 08:00:00", "Email address": "a@sarkop.id", "PNS yang mengisi:": "Budi", "Rice [kg]": "10"},
    {"Timestamp": "01/06/2024 18:00:00", "Email address": "a@sarkop.id", "PNS yang mengisi:": "Budi", "Rice [kg]": "8"},
    {"Timestamp": "02/06/2024 09:00:00", "Email address": "b@sarkop.id", "PNS yang mengisi:": "Sari", "Rice [kg]": "5"},
]


def make_item(name, vendor, par, min_restock, current):
    return CurrentStockItem(
        item=name, unit="kg", vendor=vendor, par_qty=par, min_restock=min_restock,
        current_qty=current, condition=evaluate_condition(par, current, min_restock),
    )


ITEMS = [
    make_item("Oil", "", 10, 4, 3),
    make_item("Rice", "ABC", 10, 4, 4),
    make_item("Sugar", "ABC", 10, 4, 2),
    make_item("Flour", "ABC", 10, 4, 8),
]

SUPPLIERS = [SupplierContact(name="ABC", media="Whatsapp", phone="62811", alias="Pak Budi")]


class TestStockOpnameApi(unittest.TestCase):

    def setUp(self):
        self.config = AppConfig(sheet_id="sheet123", api_key="key", whatsapp_target_number="62821")
        api.app.dependency_overrides[api.get_config] = lambda: self.config
        self.client = TestClient(api.app)

        patchers = [
            patch('api.get_stock_data', return_value=SUBMISSIONS),
            patch('api.get_processing_data', return_value=ITEMS),
            patch('api.get_suppliers', return_value=SUPPLIERS),
        ]
        for p in patchers:
            p.start()
            self.addCleanup(p.stop)

    def tearDown(self):
        api.app.dependency_overrides.clear()

    def test_root(self):
        self.assertEqual(self.client.get("/").json()["status"], "healthy")

    @patch('api.get_latest_submission_meta')
    def test_current_stock_sorted_by_urgency(self, mock_meta):
        mock_meta.return_value = None
        body = self.client.get("/api/current-stock").json()
        self.assertEqual([i["item"] for i in body["items"]], ["Oil", "Rice", "Sugar", "Flour"])
        self.assertEqual(body["danger_count"], 3)
        self.assertEqual(body["low_count"], 0)
        self.assertIsNone(body["latest"])

    def test_history(self):
        body = self.client.get("/api/history", params={"start": "2024-06-01", "end": "2024-06-02"}).json()
        self.assertEqual(body["days"]["2024-06-01"], [{"item_name": "Rice", "before": "-", "after": "8"}])
        self.assertEqual(body["days"]["2024-06-02"], [{"item_name": "Rice", "before": "8", "after": "5"}])
        self.assertIsNone(body["message"])

    def test_history_without_data(self):
        body = self.client.get("/api/history", params={"start": "2024-07-01", "end": "2024-07-02"}).json()
        self.assertEqual(body["days"], {})
        self.assertEqual(body["message"], api.NO_DATA_MESSAGE)

    def test_history_rejects_bad_dates(self):
        self.assertEqual(self.client.get("/api/history", params={"start": "01/06/2024", "end": "2024-06-02"}).status_code, 400)
        self.assertEqual(self.client.get("/api/history", params={"start": "2024-06-03", "end": "2024-06-02"}).status_code, 400)

    def test_vendor_messages(self):
        body = self.client.get("/api/vendor-messages").json()
        self.assertEqual([m["vendor"] for m in body], ["ABC", "Tanpa Vendor"])
        self.assertEqual([i["item"] for i in body[0]["items"]], ["Rice", "Sugar"])
        self.assertTrue(body[0]["whatsapp_url"].startswith("https://wa.me/62811?text=Halo%20ABC"))
        self.assertTrue(body[1]["whatsapp_url"].startswith("https://web.whatsapp.com/send?text="))

    def test_supplier_message_uses_alias(self):
        body = self.client.get("/api/suppliers/ABC/message").json()
        self.assertTrue(body["message"].startswith("Halo Pak Budi,"))
        self.assertEqual([i["item"] for i in body["items"]], ["Rice", "Sugar", "Flour"])
        self.assertIn("- Flour: 4 (kg)", body["message"])

    def test_suppliers_view(self):
        body = self.client.get("/api/suppliers").json()
        self.assertEqual([s["name"] for s in body["suppliers"]], ["ABC"])
        self.assertEqual(list(body["groups"]), ["Tanpa Vendor", "ABC"])

    def test_summary_without_data_skips_llm(self):
        with patch('api.StockSummaryHandler') as mock_handler:
            body = self.client.get("/api/summary", params={"start": "2024-07-01", "end": "2024-07-02"}).json()
        mock_handler.assert_not_called()
        self.assertEqual(body["report"], api.NO_DATA_MESSAGE)

    def test_summary(self):
        with patch('api.StockSummaryHandler') as mock_handler:
            mock_handler.return_value.generate_summary = AsyncMock(return_value="Report")
            body = self.client.get("/api/summary", params={"start": "2024-06-02", "end": "2024-06-02"}).json()
        records = mock_handler.return_value.generate_summary.call_args.args[0]
        self.assertEqual([r["Rice [kg]"] for r in records], ["5"])
        self.assertEqual(body["report"], "Report")
        self.assertEqual(body["whatsapp_url"], "https://wa.me/62821?text=Report")
        kwargs = mock_handler.call_args.kwargs
        self.assertEqual(kwargs["timestamp_column"], "Timestamp")
        self.assertEqual(kwargs["staff_column"], "PNS yang mengisi:")

    def test_summary_service_failure(self):
        with patch('api.StockSummaryHandler') as mock_handler:
            mock_handler.return_value.generate_summary = AsyncMock(
                side_effect=SummaryGenerationError("Failed to communicate with the AI service.")
            )
            response = self.client.get("/api/summary", params={"start": "2024-06-01", "end": "2024-06-02"})
        self.assertEqual(response.status_code, 502)

    def test_history_report_download(self):
        response = self.client.get("/api/reports/history", params={"start": "2024-06-01", "end": "2024-06-02"})
        self.assertEqual(response.status_code, 200)
        self.assertIn("stock-opname-20240601-20240602.xlsx", response.headers["content-disposition"])

    def test_history_report_without_data(self):
        response = self.client.get("/api/reports/history", params={"start": "2024-07-01", "end": "2024-07-02"})
        self.assertEqual(response.status_code, 404)

    def test_fetch_error_returns_bad_gateway(self):
        with patch('api.get_processing_data', side_effect=SheetFetchError(403, "Failed. Status: 403.")):
            response = self.client.get("/api/vendor-messages")
        self.assertEqual(response.status_code, 502)
        self.assertIn("403", response.json()["detail"])

    def test_configuration_error(self):
        with patch('api.get_processing_data', side_effect=ConfigurationError("Google Sheet is not configured.")):
            response = self.client.get("/api/current-stock")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["detail"], "Google Sheet is not configured.")

    @patch('api.get_latest_submission_meta', return_value=None)
    def test_infinite_quantity_cell_does_not_break_current_stock(self, mock_meta):
        values = [
            ["Item", "Vendor", "Par Qty", "Min Restock", "Current Qty"],
            ["Rice", "ABC", "10", "4", "inf"],
            ["Oil", "ABC", "10", "4", "1e400"],
            ["Sugar", "ABC", "10", "4", "8"],
        ]
        with patch('api.get_processing_data', side_effect=lambda config: parse_processing_rows(values)):
            response = self.client.get("/api/current-stock")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["danger_count"], 2)
        self.assertEqual([i["current_qty"] for i in body["items"]], [0, 0, 8])


if __name__ == '__main__':
    unittest.main()
