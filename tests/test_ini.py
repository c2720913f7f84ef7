#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Tests for the Circuitscape .ini serializer.
"""
import os
import re
import tempfile
import unittest

import numpy as np

from circuitscape_runner.core.ini import build_ini_lines, format_bool, read_ini, write_ini
from circuitscape_runner.core.options import CircuitscapeOptions

FOCAL_SECTION = "Options for pairwise and one-to-all and all-to-one modes"
ADVANCED_SECTION = "Options for advanced mode"

BOOLEAN_KEYS = [
    "habitat_map_is_resistances", "connect_four_neighbors_only",
    "connect_using_avg_resistances", "use_included_pairs",
    "ground_file_is_resistances", "use_unit_currents", "use_direct_grounds",
    "write_cur_maps", "write_cum_cur_map_only", "write_volt_maps",
    "log_transform_maps", "compress_grids", "low_memory_mode", "parallelize",
    "preemptive_memory_release", "print_timings", "screenprint_log", "use_polygons",
]


class TestFormatBool(unittest.TestCase):

    def test_values(self):
        self.assertEqual(format_bool(True), "true")
        self.assertEqual(format_bool(False), "false")

    def test_rejects_non_bool(self):
        for value in (1, 0, "true", None):
            with self.subTest(value=value):
                with self.assertRaises(TypeError):
                    format_bool(value)


class TestBuildIniLines(unittest.TestCase):

    def make(self, **kwargs):
        kwargs.setdefault("cost_file", "cost.asc")
        kwargs.setdefault("focal_points_file", "pts.txt")
        kwargs.setdefault("output_dir", "out")
        kwargs.setdefault("output_name", "run1")
        return CircuitscapeOptions(**kwargs)

    def test_pairwise_example(self):
        lines = build_ini_lines(self.make())
        self.assertEqual(lines[:3], ["[Circuitscape mode]", "scenario = pairwise", "data_type = raster"])
        focal_index = lines.index(f"[{FOCAL_SECTION}]")
        self.assertEqual(lines[focal_index + 1], "point_file = pts.txt")
        self.assertEqual(lines[focal_index + 2], "use_included_pairs = false")

    def test_section_order(self):
        headers = [line for line in build_ini_lines(self.make(scenario="advanced")) if line.startswith("[")]
        self.assertEqual(headers, [
            "[Circuitscape mode]",
            "[Habitat raster or graph]",
            "[Connection scheme for raster habitat data]",
            f"[{FOCAL_SECTION}]",
            f"[{ADVANCED_SECTION}]",
            "[Output options]",
            "[Calculation options]",
            "[Logging Options]",
            "[Short circuit regions (aka polygons)]",
        ])

    def test_sections_separated_by_blank_line(self):
        lines = build_ini_lines(self.make())
        for i, line in enumerate(lines):
            if line.startswith("[") and i > 0:
                self.assertEqual(lines[i - 1], "")
        self.assertNotEqual(lines[-1], "")

    def test_advanced_section_only_for_advanced(self):
        for scenario, expected in [("pairwise", False), ("one-to-all", False),
                                   ("all-to-one", False), ("advanced", True), ("Advanced", True)]:
            with self.subTest(scenario=scenario):
                lines = build_ini_lines(self.make(scenario=scenario))
                self.assertEqual(f"[{ADVANCED_SECTION}]" in lines, expected)

    def test_advanced_values(self):
        lines = build_ini_lines(self.make(
            scenario="advanced",
            ground_file="ground.asc",
            remove_src_or_gnd="rmvsrc",
            use_direct_grounds=True,
        ))
        self.assertIn("ground_file = ground.asc", lines)
        self.assertIn("# source_file not provided", lines)
        self.assertIn("remove_src_or_gnd = rmvsrc", lines)
        self.assertIn("use_direct_grounds = true", lines)
        self.assertIn("use_unit_currents = false", lines)

    def test_single_point_file_entry(self):
        for kwargs in ({"focal_points_file": "pts.txt"},
                       {"focal_points_file": None, "focal_polygons_ascii": "regions.asc"}):
            with self.subTest(**kwargs):
                options = self.make(**kwargs)
                entries = [line for line in build_ini_lines(options) if line.startswith("point_file")]
                self.assertEqual(entries, [f"point_file = {options.point_file}"])

    def test_all_booleans_lowercase(self):
        options = self.make(
            scenario="advanced",
            habitat_map_is_resistance=False,
            connect_four_neighbors_only=True,
            write_volt_maps=True,
            parallelize=True,
            max_parallel=4,
        )
        values = {}
        for line in build_ini_lines(options):
            match = re.match(r"^(\w+) = (.*)$", line)
            if match:
                values[match.group(1)] = match.group(2)
        for key in BOOLEAN_KEYS:
            with self.subTest(key=key):
                self.assertIn(values[key], ("true", "false"))
        self.assertEqual(values["habitat_map_is_resistances"], "false")
        self.assertEqual(values["connect_four_neighbors_only"], "true")
        self.assertEqual(values["max_parallel"], "4")

    def test_numpy_bools_written_lowercase(self):
        lines = build_ini_lines(self.make(parallelize=np.True_, write_cur_maps=np.False_))
        self.assertIn("parallelize = true", lines)
        self.assertIn("write_cur_maps = false", lines)

    def test_no_other_boolean_spellings(self):
        text = "\n".join(build_ini_lines(self.make(scenario="advanced")))
        self.assertNotIn("= True", text)
        self.assertNotIn("= False", text)

    def test_output_paths(self):
        lines = build_ini_lines(self.make())
        output_dir = os.path.abspath("out")
        self.assertIn(f"output_file = {os.path.join(output_dir, 'run1.out')}", lines)
        self.assertIn(f"log_file = {os.path.join(output_dir, 'run1.log')}", lines)
        self.assertIn(f"profiler_log_file = {os.path.join(output_dir, 'run1_rusages.log')}", lines)
        self.assertIn("point_file = pts.txt", lines)

    def test_included_pairs(self):
        lines = build_ini_lines(self.make(included_pairs_file="pairs.txt"))
        self.assertIn("use_included_pairs = true", lines)
        self.assertIn("included_pairs_file = pairs.txt", lines)

    def test_short_circuit_regions_disabled(self):
        lines = build_ini_lines(self.make(focal_points_file=None, focal_polygons_ascii="regions.asc"))
        self.assertEqual(lines[-3:], [
            "[Short circuit regions (aka polygons)]",
            "polygon_file = (Browse for a short-circuit region file)",
            "use_polygons = false",
        ])


class TestWriteIni(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.output_dir = os.path.join(self.tmp.name, "nested", "out")

    def tearDown(self):
        self.tmp.cleanup()

    def make(self, **kwargs):
        kwargs.setdefault("cost_file", "cost.asc")
        kwargs.setdefault("focal_points_file", "pts.txt")
        kwargs.setdefault("output_dir", self.output_dir)
        kwargs.setdefault("output_name", "run1")
        return CircuitscapeOptions(**kwargs)

    def test_creates_directory_and_file(self):
        path = write_ini(self.make())
        self.assertEqual(str(path), os.path.join(self.output_dir, "run1.ini"))
        self.assertTrue(path.is_file())

    def test_existing_directory_is_fine(self):
        os.makedirs(self.output_dir)
        self.assertTrue(write_ini(self.make()).is_file())

    def test_content_matches_lines(self):
        options = self.make()
        path = write_ini(options)
        with open(path, encoding="utf-8") as f:
            content = f.read()
        self.assertEqual(content, "\n".join(build_ini_lines(options)) + "\n")

    def test_rewrite_is_identical_to_fresh_write(self):
        path = write_ini(self.make(scenario="advanced", parallelize=True))
        with open(path, "rb") as f:
            first = f.read()

        write_ini(self.make(solver="cg+amg"))
        path = write_ini(self.make(scenario="advanced", parallelize=True))
        with open(path, "rb") as f:
            second = f.read()

        self.assertEqual(first, second)

    def test_read_back(self):
        path = write_ini(self.make(scenario="advanced", source_file="src.asc"))
        config = read_ini(str(path))
        self.assertEqual(config["Circuitscape mode"]["scenario"], "advanced")
        self.assertEqual(config["Habitat raster or graph"]["habitat_file"], "cost.asc")
        self.assertEqual(config[FOCAL_SECTION]["point_file"], "pts.txt")
        self.assertEqual(config[ADVANCED_SECTION]["source_file"], "src.asc")
        self.assertNotIn("ground_file", config[ADVANCED_SECTION])
        self.assertEqual(config["Calculation options"]["solver"], "cholmod")

    def test_read_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            read_ini(os.path.join(self.tmp.name, "missing.ini"))


if __name__ == '__main__':
    unittest.main()
