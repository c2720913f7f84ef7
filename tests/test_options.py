#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Tests for option validation.
"""
import os
import tempfile
import unittest

import numpy as np

from circuitscape_runner import circuitscape_run
from circuitscape_runner.core.options import (
    CircuitscapeOptions, FocalInputError, OptionError, validate_focal_inputs
)


class TestFocalInputs(unittest.TestCase):
    """Exactly one focal input, and never a vector file."""

    def test_points_only(self):
        self.assertEqual(validate_focal_inputs("pts.txt", None), "pts.txt")

    def test_polygons_only(self):
        self.assertEqual(validate_focal_inputs(None, "regions.asc"), "regions.asc")

    def test_both_rejected(self):
        with self.assertRaises(FocalInputError) as ctx:
            validate_focal_inputs("pts.txt", "regions.asc")
        self.assertIn("not both", str(ctx.exception))

    def test_neither_rejected(self):
        with self.assertRaises(FocalInputError) as ctx:
            validate_focal_inputs(None, None)
        self.assertIn("No focal node input", str(ctx.exception))

    def test_shapefile_rejected(self):
        for path in ("regions.shp", "REGIONS.SHP", "data/regions.gpkg", "regions.geojson"):
            with self.subTest(path=path):
                with self.assertRaises(FocalInputError) as ctx:
                    validate_focal_inputs(None, path)
                self.assertIn("ASCII raster", str(ctx.exception))

    def test_focal_error_is_value_error(self):
        self.assertTrue(issubclass(FocalInputError, ValueError))


class TestNothingWrittenOnUsageError(unittest.TestCase):
    """Usage errors are raised before the output directory is touched."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.output_dir = os.path.join(self.tmp.name, "out")

    def tearDown(self):
        self.tmp.cleanup()

    def _assert_nothing_written(self):
        self.assertFalse(os.path.exists(self.output_dir))

    def test_both_inputs(self):
        with self.assertRaises(FocalInputError):
            circuitscape_run("cost.asc", "pts.txt", "regions.asc",
                             output_dir=self.output_dir, run_in_julia=False)
        self._assert_nothing_written()

    def test_no_inputs(self):
        with self.assertRaises(FocalInputError):
            circuitscape_run("cost.asc", output_dir=self.output_dir, run_in_julia=False)
        self._assert_nothing_written()

    def test_vector_polygons(self):
        with self.assertRaises(FocalInputError):
            circuitscape_run("cost.asc", focal_polygons_ascii="regions.shp",
                             output_dir=self.output_dir, run_in_julia=False)
        self._assert_nothing_written()


class TestCircuitscapeOptions(unittest.TestCase):
    """Validation of the remaining options."""

    def make(self, **kwargs):
        kwargs.setdefault("cost_file", "cost.asc")
        kwargs.setdefault("focal_points_file", "pts.txt")
        kwargs.setdefault("output_dir", "/tmp/cs")
        return CircuitscapeOptions(**kwargs)

    def test_defaults(self):
        options = self.make()
        self.assertEqual(options.scenario, "pairwise")
        self.assertEqual(options.solver, "cholmod")
        self.assertEqual(options.remove_src_or_gnd, "keepall")
        self.assertEqual(options.output_name, "circuitscape_output")
        self.assertEqual(options.point_file, "pts.txt")
        self.assertFalse(options.is_advanced)
        self.assertFalse(options.uses_polygons)

    def test_point_file_from_polygons(self):
        options = self.make(focal_points_file=None, focal_polygons_ascii="regions.asc")
        self.assertEqual(options.point_file, "regions.asc")
        self.assertTrue(options.uses_polygons)

    def test_output_dir_defaults_to_cwd(self):
        options = CircuitscapeOptions(cost_file="cost.asc", focal_points_file="pts.txt")
        self.assertEqual(options.output_dir, os.getcwd())

    def test_advanced_case_insensitive(self):
        for scenario in ("advanced", "Advanced", "ADVANCED"):
            with self.subTest(scenario=scenario):
                self.assertTrue(self.make(scenario=scenario).is_advanced)

    def test_unknown_scenario(self):
        with self.assertRaises(OptionError):
            self.make(scenario="one-to-many")

    def test_unknown_solver(self):
        with self.assertRaises(OptionError):
            self.make(solver="lu")

    def test_cg_amg_solver(self):
        self.assertEqual(self.make(solver="cg+amg").solver, "cg+amg")

    def test_unknown_removal_policy(self):
        with self.assertRaises(OptionError):
            self.make(remove_src_or_gnd="rmvboth")

    def test_log_level_normalized(self):
        self.assertEqual(self.make(log_level="debug").log_level, "DEBUG")
        with self.assertRaises(OptionError):
            self.make(log_level="VERBOSE")

    def test_max_parallel(self):
        self.assertEqual(self.make(max_parallel=4).max_parallel, 4)
        with self.assertRaises(OptionError):
            self.make(max_parallel=-1)
        with self.assertRaises(OptionError):
            self.make(max_parallel=2.5)

    def test_boolean_options_need_bools(self):
        for name, value in (('write_cur_maps', 1), ('write_volt_maps', "yes"),
                            ('parallelize', None), ('print_timings', 0)):
            with self.subTest(name=name, value=value):
                with self.assertRaises(OptionError):
                    self.make(**{name: value})

    def test_numpy_bools_become_bools(self):
        options = self.make(parallelize=np.True_, compress_grids=np.False_)
        self.assertIs(options.parallelize, True)
        self.assertIs(options.compress_grids, False)

    def test_relative_output_dir_made_absolute(self):
        options = self.make(output_dir=os.path.join("runs", "out"), output_name="run1")
        expected = os.path.join(os.getcwd(), "runs", "out")
        self.assertEqual(options.output_dir, expected)
        self.assertEqual(options.output_file, os.path.join(expected, "run1.out"))

    def test_unknown_keyword(self):
        with self.assertRaises(TypeError):
            self.make(write_max_cur_maps=True)

    def test_derived_paths(self):
        options = self.make(output_dir="/data/run", output_name="run1")
        self.assertEqual(options.ini_path, os.path.join("/data/run", "run1.ini"))
        self.assertEqual(options.output_file, os.path.join("/data/run", "run1.out"))
        self.assertEqual(options.log_file, os.path.join("/data/run", "run1.log"))
        self.assertEqual(options.profiler_log_file, os.path.join("/data/run", "run1_rusages.log"))
        self.assertEqual(options.cum_curmap_path, os.path.join("/data/run", "run1_cum_curmap.asc"))

    def test_advanced_without_files_warns(self):
        with self.assertLogs("circuitscape_runner", level="WARNING") as logs:
            self.make(scenario="advanced")
        self.assertTrue(any("ground_file" in message for message in logs.output))
        self.assertTrue(any("source_file" in message for message in logs.output))


if __name__ == '__main__':
    unittest.main()
