# -*- coding: utf-8 -*-
"""Chat history and the client-side stream consumer."""
