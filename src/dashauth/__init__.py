# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Stateless session-token authentication for a self-hosted dashboard."""

__version__ = "0.1.0"
