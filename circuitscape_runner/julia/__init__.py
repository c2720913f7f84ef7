#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Bridge to Circuitscape.jl running in an external Julia process.
"""
