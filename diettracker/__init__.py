# -*- coding: utf-8 -*-
"""Diet tracker backend: AI chat and food-search relays plus meal logging."""

__version__ = "0.1.0"
