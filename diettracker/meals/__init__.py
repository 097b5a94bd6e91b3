# -*- coding: utf-8 -*-
"""Meals domain (logging, food selection, weekly stats)."""
