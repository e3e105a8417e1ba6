"""Campus academic administration backend.

Academic catalog management (students, subjects, academic periods) and
the enrollment ledger that keeps subject seat quotas consistent under
concurrent requests.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
