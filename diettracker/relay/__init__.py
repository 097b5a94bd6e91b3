# -*- coding: utf-8 -*-
"""Relays forwarding chat and food-search requests to the completions API."""
