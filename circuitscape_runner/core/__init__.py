#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Core functionality for Circuitscape configuration.

This module contains the option model, the .ini serializer, raster and
focal node I/O, configuration constants and logging setup.
"""
