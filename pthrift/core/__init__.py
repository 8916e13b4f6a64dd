# SPDX-License-Identifier: MIT
"""Core pieces of the generation task: config, changes, commands, errors."""
