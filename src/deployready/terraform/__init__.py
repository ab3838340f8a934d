# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Terraform invocation helpers."""

from .runner import TerraformRunner, parse_console_string

__all__ = ["TerraformRunner", "parse_console_string"]
