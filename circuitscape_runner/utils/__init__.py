#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Utility modules for running Circuitscape and inspecting its results.
"""
