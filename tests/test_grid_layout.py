import unittest

from app.discgrid.layout.grid import (
    AlbumCell,
    GridConfig,
    YearCell,
    YearGroup,
    compute_grid_layout,
    find_placement,
    mark_placement,
)


def _groups(rows):
    return [YearGroup(year=y, albums=[{"id": i} for i in ids]) for y, ids in rows]


def _overlaps(a, b, eps=1e-6):
    return (a.x < b.x + b.w - eps and b.x < a.x + a.w - eps
            and a.y < b.y + b.h - eps and b.y < a.y + a.h - eps)


class TestPlacementHelpers(unittest.TestCase):
    def test_find_placement_lowest_span_leftmost_on_tie(self):
        self.assertEqual(find_placement([0, 0, 0, 0], 2), (0, 0))
        self.assertEqual(find_placement([2, 2, 0, 0, 0, 0], 2), (2, 0))
        # c=1 and c=2 both give row 1; leftmost wins
        self.assertEqual(find_placement([3, 1, 1, 1, 3], 2), (1, 1))
        # span max decides, not the minimum column
        self.assertEqual(find_placement([0, 5, 1, 1], 2), (2, 1))

    def test_mark_placement_raises_span(self):
        hm = [0, 0, 0, 0]
        mark_placement(hm, 1, 3, 2, 2)
        self.assertEqual(hm, [0, 5, 5, 0])


class TestGridLayout(unittest.TestCase):
    def test_single_year_scenario(self):
        # 1048 - 48 = 1000 usable => 10 columns of 100px
        groups = [{"year": 1975, "albums": [{"id": "a"}, {"id": "b"}, {"id": "c"}]}]
        layout = compute_grid_layout(groups, 1048)

        self.assertEqual(layout.cols, 10)
        self.assertEqual(layout.cell_size, 100)
        self.assertEqual(len(layout.cells), 4)

        year = layout.cells[0]
        self.assertIsInstance(year, YearCell)
        self.assertEqual((year.x, year.y, year.year, year.count), (24, 0, 1975, 3))

        albums = layout.cells[1:]
        self.assertTrue(all(isinstance(c, AlbumCell) for c in albums))
        self.assertEqual([c.album["id"] for c in albums], ["a", "b", "c"])
        self.assertEqual([(c.x, c.y) for c in albums], [(224, 0), (424, 0), (624, 0)])
        self.assertTrue(all(c.w == 200 and c.h == 200 for c in layout.cells))

        # Tallest column is row 2
        self.assertEqual(layout.total_height, 2 * 100 + 100)

    def test_second_year_starts_below_first(self):
        # 648 - 48 = 600 => 6 columns
        layout = compute_grid_layout(_groups([(1975, ["a"]), (1974, ["b"])]), 648)
        self.assertEqual(layout.cols, 6)

        y1975, a, y1974, b = layout.cells
        self.assertEqual((a.x, a.y), (224, 0))
        # Reset levels every column to max(2) + 1 = 3
        self.assertEqual((y1974.x, y1974.y), (24, 300))
        self.assertGreater(y1974.y, a.y + a.h - 1)
        self.assertEqual((b.x, b.y), (224, 300))
        self.assertEqual(layout.total_height, 5 * 100 + 100)

    def test_spacer_shifts_album(self):
        # "!" hashes to 33; 33/255 < 0.15 so a 1x1 spacer goes in first
        layout = compute_grid_layout(_groups([(2000, ["!"])]), 648)
        album = layout.cells[1]
        self.assertEqual((album.x, album.y), (324, 0))

    def test_spacer_threshold(self):
        # 38/255 is just under 0.15, 39/255 just over
        with_spacer = compute_grid_layout(_groups([(2000, ["&"])]), 648).cells[1]
        without = compute_grid_layout(_groups([(2000, ["'"])]), 648).cells[1]
        self.assertEqual(with_spacer.x, 324)
        self.assertEqual(without.x, 224)

    def test_spacer_rate_zero_disables_spacers(self):
        layout = compute_grid_layout(
            _groups([(2000, ["!"])]), 648, config=GridConfig(spacer_rate=0)
        )
        self.assertEqual(layout.cells[1].x, 224)

    def test_deterministic(self):
        groups = _groups([(2001, [f"album-ecm-{n}" for n in range(1000, 1040)]),
                          (2000, [f"album-ecm-{n}" for n in range(1040, 1065)])])
        first = compute_grid_layout(groups, 1337)
        second = compute_grid_layout(groups, 1337)
        self.assertEqual(first, second)
        self.assertEqual(first.to_dict(), second.to_dict())

    def test_no_overlap_and_year_ordering(self):
        groups = _groups([
            (2010, [f"album-ecm-{n}" for n in range(2000, 2033)]),
            (2009, [f"album-ecm-{n}" for n in range(2100, 2107)]),
            ("Unknown", [f"album-japo-{n}" for n in range(60000, 60012)]),
        ])
        for width in (200, 480, 777, 1048, 1920):
            layout = compute_grid_layout(groups, width)
            cells = layout.cells
            self.assertEqual(len(cells), 3 + 33 + 7 + 12)
            for i in range(len(cells)):
                for j in range(i + 1, len(cells)):
                    self.assertFalse(_overlaps(cells[i], cells[j]), (width, i, j))

            bottom = 0
            seen_year = False
            for cell in cells:
                if isinstance(cell, YearCell):
                    if seen_year:
                        # at least one empty row below everything placed before
                        self.assertGreaterEqual(cell.y, bottom + layout.cell_size - 1e-6)
                    seen_year = True
                bottom = max(bottom, cell.y + cell.h)
                self.assertGreaterEqual(cell.x, 24)
                self.assertLessEqual(cell.x + cell.w, width - 24 + 1e-6)
            self.assertLessEqual(bottom, layout.total_height)

    def test_cells_are_uniform_size(self):
        layout = compute_grid_layout(_groups([(1999, ["x", "y", "z"])]), 901)
        self.assertTrue(all(c.w == c.h == layout.cell_size * 2 for c in layout.cells))

    def test_degenerate_inputs(self):
        for groups, width in (([], 800), (None, 800), (_groups([(1975, ["a"])]), 150),
                              (_groups([(1975, ["a"])]), None), (_groups([(1975, ["a"])]), 0)):
            layout = compute_grid_layout(groups, width)
            self.assertEqual(layout.cells, [])
            self.assertEqual(layout.total_height, 0)
            self.assertEqual(layout.to_dict()["totalHeight"], 0)

    def test_malformed_albums_do_not_raise(self):
        groups = [{"year": 1980, "albums": [{"title": "no id"}, {"id": None}, {"id": 1064}, None]}]
        layout = compute_grid_layout(groups, 1048)
        self.assertEqual(len(layout.cells), 5)
        self.assertEqual(layout.cells[0].count, 4)

    def test_narrow_viewport_clamps_to_min_cols(self):
        layout = compute_grid_layout(_groups([(1975, ["a"])]), 300)
        self.assertEqual(layout.cols, 6)
        self.assertAlmostEqual(layout.cell_size, 252 / 6)

    def test_invalid_config_rejected(self):
        for kwargs in ({"cell_unit": 0}, {"min_cols": 0}, {"padding": -1}, {"block_size": 0}):
            with self.assertRaises(ValueError, msg=kwargs):
                GridConfig(**kwargs)

    def test_valid_config_never_raises_on_odd_inputs(self):
        config = GridConfig(cell_unit=50, min_cols=1, block_size=3, padding=0)
        for width in (float("nan"), float("inf"), -5, "wide", True, 260):
            layout = compute_grid_layout(_groups([(1975, ["a"])]), width, config=config)
            self.assertIsInstance(layout.cells, list)

    def test_to_dict_shape(self):
        data = compute_grid_layout(_groups([(1975, ["a"])]), 1048).to_dict()
        self.assertEqual(set(data), {"cells", "totalHeight", "cellSize"})
        self.assertEqual(data["cells"][0]["type"], "year")
        self.assertEqual(data["cells"][1]["type"], "album")
        self.assertEqual(data["cells"][1]["album"], {"id": "a"})


if __name__ == "__main__":
    unittest.main()
