# -*- coding: utf-8 -*-
import unittest

from handwrite_rows.accumulator import RowAccumulator, Table


class TestRowAccumulator(unittest.TestCase):

    def test_append_preserves_batch_order(self):
        acc = RowAccumulator()
        batches = [
            [["r1"], ["r2"]],
            [],
            [["r3", "x"], ["r4"], ["r5"]],
        ]
        added = acc.append(batches)

        self.assertEqual(added, 5)
        self.assertEqual(acc.row_count, 5)
        self.assertEqual(
            [row[0] for row in acc.snapshot().rows],
            ["r1", "r2", "r3", "r4", "r5"],
        )

    def test_append_grows_existing_table(self):
        acc = RowAccumulator()
        acc.append([[["a"]]])
        acc.append([[["b"]], [["c"], ["d"]]])
        self.assertEqual(acc.snapshot().rows, (("a",), ("b",), ("c",), ("d",)))

    def test_rows_are_stored_unpadded(self):
        acc = RowAccumulator(columns=["A", "B", "C"])
        acc.append([[["1"], ["1", "2", "3", "4"]]])
        snapshot = acc.snapshot()
        self.assertEqual(snapshot.rows, (("1",), ("1", "2", "3", "4")))
        self.assertEqual(snapshot.width, 4)

    def test_clear_keeps_columns(self):
        acc = RowAccumulator(columns=["Item", "Qty"])
        acc.append([[["a", "1"]]])
        acc.clear()
        self.assertEqual(acc.row_count, 0)
        self.assertEqual(acc.columns, ("Item", "Qty"))

    def test_set_columns_does_not_touch_rows(self):
        acc = RowAccumulator()
        acc.append([[["a", "b"]]])
        acc.set_columns(["X"])
        self.assertEqual(acc.snapshot().columns, ("X",))
        self.assertEqual(acc.snapshot().rows, (("a", "b"),))

    def test_snapshot_synthesizes_header(self):
        acc = RowAccumulator()
        acc.append([[["a"], ["b", "c", "d"]]])
        self.assertEqual(acc.snapshot().columns, ("col_1", "col_2", "col_3"))

    def test_snapshot_of_empty_accumulator(self):
        snapshot = RowAccumulator().snapshot()
        self.assertEqual(snapshot.columns, ())
        self.assertEqual(snapshot.rows, ())
        self.assertEqual(snapshot.width, 0)

    def test_snapshot_is_not_a_live_view(self):
        acc = RowAccumulator()
        acc.append([[["a"]]])
        snapshot = acc.snapshot()
        acc.append([[["b"]]])
        acc.clear()
        self.assertEqual(snapshot.rows, (("a",),))


class TestTable(unittest.TestCase):

    def test_header_and_padding(self):
        table = Table(columns=("Item", "Qty"), rows=(("apple",), ("pear", "2", "note")))
        self.assertEqual(table.width, 3)
        self.assertEqual(table.header(), ["Item", "Qty", "col_3"])
        self.assertEqual(
            table.padded_rows(),
            [["apple", "", ""], ["pear", "2", "note"]],
        )

    def test_more_columns_than_cells(self):
        table = Table(columns=("A", "B", "C"), rows=(("1",),))
        self.assertEqual(table.header(), ["A", "B", "C"])
        self.assertEqual(table.padded_rows(), [["1", "", ""]])
        self.assertEqual(len(table), 1)


if __name__ == '__main__':
    unittest.main(verbosity=2)
