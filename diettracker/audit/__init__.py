# -*- coding: utf-8 -*-
"""Audit log of changes to user data."""
