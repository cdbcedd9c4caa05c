#!/usr/bin/env python3
"""
Unit tests for turning Sheets API values into form records.
"""

import os
import sys
import unittest

# Add the parent directory to the path to access utils
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from utils.record_normalizer import extract_items, is_meta_key, item_label, rows_to_records

HEADER = ["Timestamp", "Email address", "PNS yang mengisi:", "Rice [kg]", "Sugar [kg]", "Column 6"]


class TestRowsToRecords(unittest.TestCase):

    def test_header_only_or_empty_gives_no_records(self):
        self.assertEqual(rows_to_records([]), [])
        self.assertEqual(rows_to_records([HEADER]), [])

    def test_missing_trailing_cells_become_empty_strings(self):
        values = [HEADER, ["01/06/2024 08:00:00", "a@sarkop.id", "Budi", "10"]]
        records = rows_to_records(values)
        self.assertEqual(len(records), 1)
        self.assertEqual(records[0]["Rice [kg]"], "10")
        self.assertEqual(records[0]["Sugar [kg]"], "")
        self.assertEqual(records[0]["Column 6"], "")

    def test_blank_rows_are_dropped(self):
        values = [
            HEADER,
            ["01/06/2024 08:00:00", "a@sarkop.id", "Budi", "10"],
            [],
            ["", "", "", "3"],
            ["02/06/2024 08:00:00", "", "Budi", "4"],
        ]
        records = rows_to_records(values)
        self.assertEqual([r["Rice [kg]"] for r in records], ["10"])


class TestExtractItems(unittest.TestCase):

    def test_item_label_strips_bracket_suffix(self):
        self.assertEqual(item_label("Rice [kg]"), "Rice")
        self.assertEqual(item_label("Rice"), "Rice")
        self.assertEqual(item_label("Chili Sauce [botol] [besar]"), "Chili Sauce")

    def test_meta_keys(self):
        self.assertTrue(is_meta_key("Timestamp"))
        self.assertTrue(is_meta_key("Email address"))
        self.assertTrue(is_meta_key("PNS yang mengisi:"))
        self.assertTrue(is_meta_key("Column 12"))
        self.assertFalse(is_meta_key("Rice [kg]"))

    def test_skips_meta_and_empty_values(self):
        record = {
            "Timestamp": "01/06/2024 08:00:00",
            "Email address": "a@sarkop.id",
            "PNS yang mengisi:": "Budi",
            "Rice [kg]": "10",
            "Sugar [kg]": "  ",
            "Column 6": "noise",
        }
        self.assertEqual(extract_items(record), {"Rice": "10"})

    def test_distinct_labels_are_kept_apart(self):
        record = {"Item A [kg]": "1", "Item B [kg]": "2"}
        self.assertEqual(extract_items(record), {"Item A": "1", "Item B": "2"})

    def test_custom_meta_columns(self):
        record = {"Waktu": "01/06/2024 08:00:00", "Petugas": "Budi", "Rice [kg]": "10"}
        self.assertEqual(extract_items(record, ("Waktu", "Email", "Petugas")), {"Rice": "10"})
        self.assertTrue(is_meta_key("Petugas", ("Waktu", "Petugas")))
        self.assertFalse(is_meta_key("Timestamp", ("Waktu", "Petugas")))

    def test_same_label_later_column_wins(self):
        record = {"Item A [kg]": "1", "Item A [unit]": "2"}
        self.assertEqual(extract_items(record), {"Item A": "2"})


if __name__ == '__main__':
    unittest.main()
